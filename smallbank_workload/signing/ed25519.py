"""Ed25519 signer over raw 32-byte keys."""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from smallbank_workload.errors import SigningError
from smallbank_workload.signing.abstract import AbstractSigner


class Ed25519Signer(AbstractSigner):
    algorithm: str = "ed25519"
    private_key_size: int = 32

    def __init__(self, private_key: str) -> None:
        try:
            self._key = Ed25519PrivateKey.from_private_bytes(self.parse_private_key(private_key))
        except ValueError as exc:
            raise SigningError(f"cannot load ed25519 private key: {exc}") from exc
        self.public_key = (
            self._key.public_key()
            .public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
            .hex()
        )

    def sign(self, data: bytes) -> str:
        return self._key.sign(data).hex()

    @classmethod
    def verify(cls, data: bytes, signature: str, public_key: str) -> bool:
        try:
            verifying_key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key))
        except ValueError as exc:
            raise SigningError(f"invalid ed25519 public key: {exc}") from exc
        try:
            verifying_key.verify(bytes.fromhex(signature), data)
        except (InvalidSignature, ValueError):
            return False
        return True

    @classmethod
    def generate_private_key(cls) -> str:
        key = Ed25519PrivateKey.generate()
        return key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        ).hex()


__all__ = ["Ed25519Signer"]
