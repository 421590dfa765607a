"""
Configuration settings for the Smallbank workload generator.

Uses Pydantic Settings to load environment variables (and an optional `.env`
file) for logging, workload defaults, and signing. CLI options override
these values.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Workload defaults
    num_accounts: int = Field(100, ge=0, alias="SMALLBANK_ACCOUNTS")
    num_transactions: int = Field(1_000, ge=0, alias="SMALLBANK_TRANSACTIONS")
    seed: Optional[int] = Field(None, alias="SMALLBANK_SEED")

    # Signing
    signing_algorithm: str = Field("secp256k1", alias="SMALLBANK_SIGNING_ALGORITHM")
    private_key: Optional[str] = Field(None, alias="SMALLBANK_PRIVATE_KEY", repr=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
