"""
Registry of signing algorithms.

Usage:
    from smallbank_workload.signing import create_signer

    signer = create_signer("secp256k1", private_key_hex)
    signature = signer.sign(header_bytes)
"""

from __future__ import annotations

from typing import Dict, List, Type

from smallbank_workload.errors import SigningError
from smallbank_workload.signing.abstract import AbstractSigner
from smallbank_workload.signing.ed25519 import Ed25519Signer
from smallbank_workload.signing.secp256k1 import Secp256k1Signer

DEFAULT_ALGORITHM = "secp256k1"


def _signer_classes() -> Dict[str, Type[AbstractSigner]]:
    """Registry of available signers."""
    return {
        Secp256k1Signer.algorithm: Secp256k1Signer,
        Ed25519Signer.algorithm: Ed25519Signer,
    }


def available_algorithms() -> List[str]:
    """List available signing algorithm names."""
    return sorted(_signer_classes().keys())


def _resolve_algorithm(name: str) -> Type[AbstractSigner]:
    classes = _signer_classes()
    key = name.strip().lower()
    if key not in classes:
        raise SigningError(
            f"Unknown signing algorithm '{name}'. Available: {', '.join(available_algorithms())}"
        )
    return classes[key]


def create_signer(algorithm: str, private_key: str) -> AbstractSigner:
    return _resolve_algorithm(algorithm)(private_key)


def generate_private_key(algorithm: str = DEFAULT_ALGORITHM) -> str:
    return _resolve_algorithm(algorithm).generate_private_key()


def verify_signature(algorithm: str, public_key: str, data: bytes, signature: str) -> bool:
    return _resolve_algorithm(algorithm).verify(data, signature, public_key)


__all__ = [
    "DEFAULT_ALGORITHM",
    "available_algorithms",
    "create_signer",
    "generate_private_key",
    "verify_signature",
]
