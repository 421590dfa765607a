"""
Content-addressed state locations for Smallbank accounts.

An account lives at `NAMESPACE_PREFIX` followed by the first 32 hex characters
of the SHA-512 digest of its decimal customer id. Envelopes declare these
addresses as both inputs and outputs so the ledger can schedule conflicting
transactions.
"""

from __future__ import annotations

import hashlib
from typing import List, Optional, Protocol, runtime_checkable

from smallbank_workload.domain.models import U32_MAX, TransactionRecord, customer_ids
from smallbank_workload.errors import InvalidConfiguration

# First six hex characters of the SHA-512 digest of "smallbank".
NAMESPACE_PREFIX = "332514"
ADDRESS_LENGTH = 38


@runtime_checkable
class Hasher(Protocol):
    """Produces a fixed-length digest for a byte buffer."""

    name: str

    def digest(self, data: bytes) -> bytes:
        ...


class Sha512Hasher:
    """SHA-512 hasher, used for addresses and payload integrity."""

    name: str = "sha512"

    def digest(self, data: bytes) -> bytes:
        return hashlib.sha512(data).digest()

    def hexdigest(self, data: bytes) -> str:
        return hashlib.sha512(data).hexdigest()


_DEFAULT_HASHER = Sha512Hasher()


def derive_address(customer_id: int, hasher: Optional[Hasher] = None) -> str:
    """
    Map a customer id to its 38-character state address.

    Parameters
    ----------
    customer_id : int
        Unsigned 32-bit customer identifier.
    hasher : Hasher | None
        Digest implementation; SHA-512 when omitted.
    """
    if isinstance(customer_id, bool) or not 0 <= customer_id <= U32_MAX:
        raise InvalidConfiguration(f"customer_id {customer_id!r} is not an unsigned 32-bit value")
    digest = (hasher or _DEFAULT_HASHER).digest(str(customer_id).encode("utf-8"))
    return NAMESPACE_PREFIX + digest.hex()[:32]


def record_addresses(record: TransactionRecord, hasher: Optional[Hasher] = None) -> List[str]:
    """Addresses of every account `record` reads or writes, in reference order."""
    return [derive_address(customer_id, hasher) for customer_id in customer_ids(record)]


__all__ = [
    "ADDRESS_LENGTH",
    "Hasher",
    "NAMESPACE_PREFIX",
    "Sha512Hasher",
    "derive_address",
    "record_addresses",
]
