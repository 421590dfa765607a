"""
secp256k1 signer compatible with the ledger's default signing context.

Signatures are ECDSA over the SHA-256 digest of the message, serialized as
the 64-byte compact `r || s` form with `s` normalized to the lower half of the
curve order. Public keys are 33-byte compressed points.
"""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from smallbank_workload.errors import SigningError
from smallbank_workload.signing.abstract import AbstractSigner

CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_HALF_ORDER = CURVE_ORDER // 2
_SCALAR_SIZE = 32


class Secp256k1Signer(AbstractSigner):
    algorithm: str = "secp256k1"
    private_key_size: int = _SCALAR_SIZE

    def __init__(self, private_key: str) -> None:
        secret = int.from_bytes(self.parse_private_key(private_key), "big")
        if not 0 < secret < CURVE_ORDER:
            raise SigningError("secp256k1 private key is outside the curve order")
        try:
            self._key = ec.derive_private_key(secret, ec.SECP256K1())
        except (ValueError, UnsupportedAlgorithm) as exc:
            raise SigningError(f"cannot load secp256k1 private key: {exc}") from exc
        self.public_key = (
            self._key.public_key()
            .public_bytes(serialization.Encoding.X962, serialization.PublicFormat.CompressedPoint)
            .hex()
        )

    def sign(self, data: bytes) -> str:
        try:
            der = self._key.sign(data, ec.ECDSA(hashes.SHA256()))
        except (ValueError, UnsupportedAlgorithm) as exc:
            raise SigningError(f"secp256k1 signing failed: {exc}") from exc
        r, s = decode_dss_signature(der)
        if s > _HALF_ORDER:
            s = CURVE_ORDER - s
        return (r.to_bytes(_SCALAR_SIZE, "big") + s.to_bytes(_SCALAR_SIZE, "big")).hex()

    @classmethod
    def verify(cls, data: bytes, signature: str, public_key: str) -> bool:
        try:
            point = bytes.fromhex(public_key)
            verifying_key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), point)
        except ValueError as exc:
            raise SigningError(f"invalid secp256k1 public key: {exc}") from exc
        try:
            raw = bytes.fromhex(signature)
        except ValueError:
            return False
        if len(raw) != 2 * _SCALAR_SIZE:
            return False
        r = int.from_bytes(raw[:_SCALAR_SIZE], "big")
        s = int.from_bytes(raw[_SCALAR_SIZE:], "big")
        if not (0 < r < CURVE_ORDER and 0 < s <= _HALF_ORDER):
            return False
        try:
            verifying_key.verify(encode_dss_signature(r, s), data, ec.ECDSA(hashes.SHA256()))
        except InvalidSignature:
            return False
        return True

    @classmethod
    def generate_private_key(cls) -> str:
        key = ec.generate_private_key(ec.SECP256K1())
        return key.private_numbers().private_value.to_bytes(_SCALAR_SIZE, "big").hex()


__all__ = ["CURVE_ORDER", "Secp256k1Signer"]
