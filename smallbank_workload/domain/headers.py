"""
Transaction header model.

Mirrors the ledger's `TransactionHeader` message field for field; the wire
codec converts between this model and its protobuf form.
"""
from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, Field

FAMILY_NAME = "smallbank"
FAMILY_VERSION = "1.0"


class TransactionHeader(BaseModel):
    """Signed part of a transaction envelope."""

    family_name: str = Field(FAMILY_NAME, description="Transaction family.")
    family_version: str = Field(FAMILY_VERSION, description="Transaction family version.")
    nonce: str = Field(..., description="Distinguishes otherwise identical transactions.")
    inputs: Tuple[str, ...] = Field(..., description="State addresses read.")
    outputs: Tuple[str, ...] = Field(..., description="State addresses written.")
    dependencies: Tuple[str, ...] = Field((), description="Header signatures this one waits on.")
    payload_sha512: str = Field(..., description="Hex SHA-512 of the payload bytes.")
    signer_public_key: str = Field(..., description="Hex public key of the signer.")
    batcher_public_key: str = Field(..., description="Hex public key of the batcher.")

    model_config = {
        "frozen": True,
    }


__all__ = ["FAMILY_NAME", "FAMILY_VERSION", "TransactionHeader"]
