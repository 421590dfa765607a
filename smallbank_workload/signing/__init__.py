"""
Signing package for the Smallbank workload generator.

Re-exports the signer interface, the concrete backends and the algorithm
registry so callers can import from `smallbank_workload.signing` directly.
"""

from smallbank_workload.signing.abstract import AbstractSigner, Signer
from smallbank_workload.signing.ed25519 import Ed25519Signer
from smallbank_workload.signing.registry import (
    DEFAULT_ALGORITHM,
    available_algorithms,
    create_signer,
    generate_private_key,
    verify_signature,
)
from smallbank_workload.signing.secp256k1 import Secp256k1Signer

__all__ = [
    # Interfaces
    "AbstractSigner",
    "Signer",
    # Backends
    "Ed25519Signer",
    "Secp256k1Signer",
    # Registry
    "DEFAULT_ALGORITHM",
    "available_algorithms",
    "create_signer",
    "generate_private_key",
    "verify_signature",
]
