"""
Signer interface for transaction headers.

A signer is bound to one private key. Keys, public keys and signatures cross
this boundary as lowercase hex strings, which is how the ledger carries them
in transaction headers.
"""

from __future__ import annotations

import abc
from typing import Protocol, runtime_checkable

from smallbank_workload.errors import SigningError


@runtime_checkable
class Signer(Protocol):
    """
    Common interface of all signing backends.

    Attributes
    ----------
    algorithm : str
        Registry name of the signature scheme.
    public_key : str
        Hex public key matching the private key the signer was built with.
    """

    algorithm: str
    public_key: str

    def sign(self, data: bytes) -> str:
        """Return the hex signature of `data`."""
        ...


class AbstractSigner(abc.ABC):
    """
    ABC helper for class-based signers.

    Subclasses set `algorithm` and `private_key_size` and implement the
    key-specific methods.
    """

    algorithm: str
    private_key_size: int
    public_key: str

    @abc.abstractmethod
    def sign(self, data: bytes) -> str:  # pragma: no cover - interface only
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def verify(cls, data: bytes, signature: str, public_key: str) -> bool:  # pragma: no cover
        """Check `signature` over `data`; malformed public keys raise `SigningError`."""
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def generate_private_key(cls) -> str:  # pragma: no cover - interface only
        """Return a fresh random private key as hex."""
        raise NotImplementedError

    @classmethod
    def parse_private_key(cls, private_key: str) -> bytes:
        """Decode a hex private key and check its length."""
        try:
            raw = bytes.fromhex(private_key.strip())
        except (ValueError, AttributeError) as exc:
            raise SigningError(f"{cls.algorithm} private key is not valid hex") from exc
        if len(raw) != cls.private_key_size:
            raise SigningError(
                f"{cls.algorithm} private key must be {cls.private_key_size} bytes, got {len(raw)}"
            )
        return raw


__all__ = ["AbstractSigner", "Signer"]
