"""
Pytest configuration for the Smallbank workload generator.

Provides fixtures for:
- Settings isolation (cached settings are cleared around every test)
- Root logger isolation (the CLI reconfigures logging on every command)
- Known signing keys for both backends
- A deterministic fake signer and clock for envelope tests
"""

from __future__ import annotations

import hashlib
import logging
from typing import Callable, Iterator, List

import pytest

from smallbank_workload.config import Settings, get_settings
from smallbank_workload.domain.models import (
    Amalgamate,
    CreateAccount,
    DepositChecking,
    SendPayment,
    TransactionRecord,
    TransactSavings,
    WriteCheck,
)


class FakeSigner:
    """Deterministic signer: the 'signature' is the SHA-256 of the data."""

    algorithm = "fake"
    public_key = "02" + "ab" * 32

    def __init__(self) -> None:
        self.signed: List[bytes] = []

    def sign(self, data: bytes) -> str:
        self.signed.append(data)
        return hashlib.sha256(data).hexdigest()


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def test_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """
    Settings fixture with test-specific overrides.
    """
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SMALLBANK_ACCOUNTS", "5")
    monkeypatch.setenv("SMALLBANK_TRANSACTIONS", "20")
    monkeypatch.setenv("SMALLBANK_SEED", "7")
    return get_settings()


@pytest.fixture
def secp256k1_key() -> str:
    return "2f1e7b7a130d7ba9da0068b3bb0ba1d79e7e77110302c9f746c3c2a63fe40088"


@pytest.fixture
def ed25519_key() -> str:
    # RFC 8032, section 7.1, test 1
    return "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def step_clock() -> Callable[[], int]:
    """Monotonic clock advancing 1.5 seconds per call, starting at 10s."""
    ticks = iter(range(10_000_000_000, 10**15, 1_500_000_000))
    return lambda: next(ticks)


@pytest.fixture
def frozen_clock() -> Callable[[], int]:
    return lambda: 42


@pytest.fixture
def sample_records() -> List[TransactionRecord]:
    """One record of every transaction type."""
    return [
        CreateAccount(
            customer_id=0,
            customer_name="customer_000000",
            initial_savings_balance=1_000_000,
            initial_checking_balance=1_000_000,
        ),
        DepositChecking(customer_id=5, amount=50),
        WriteCheck(customer_id=3, amount=199),
        TransactSavings(customer_id=2, amount=-25),
        SendPayment(source_customer_id=1, dest_customer_id=4, amount=10),
        Amalgamate(source_customer_id=4, dest_customer_id=0),
    ]
