"""
Smallbank workload generator - playlists of signed ledger transactions.

This package produces benchmark workloads for a Smallbank transaction family:

- Seeded generation of account creations followed by a random operation mix
- Editable YAML playlists (write and read)
- Content-addressed state addresses for every referenced account
- Protobuf-encoded, signed transaction envelopes in a length-delimited stream
- Reading such streams back, with digest and signature verification
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "Apache-2.0"

# Public API exports
from smallbank_workload.addressing import derive_address, record_addresses
from smallbank_workload.config import Settings, get_settings
from smallbank_workload.domain.models import (
    Amalgamate,
    CreateAccount,
    DepositChecking,
    SendPayment,
    TransactionRecord,
    TransactSavings,
    WorkloadPlan,
    WriteCheck,
)
from smallbank_workload.envelope import (
    EnvelopeBuilder,
    TransactionEnvelope,
    read_envelopes,
    verify_envelope,
)
from smallbank_workload.generator import SmallbankGenerator, generate
from smallbank_workload.pipeline import (
    RunSummary,
    extract_playlist,
    generate_playlist,
    process_playlist,
)
from smallbank_workload.playlist import decode, dump_playlist, encode, load_playlist
from smallbank_workload.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "Amalgamate",
    "CreateAccount",
    "DepositChecking",
    "SendPayment",
    "TransactSavings",
    "TransactionRecord",
    "WorkloadPlan",
    "WriteCheck",
    # Generation and playlists
    "SmallbankGenerator",
    "decode",
    "dump_playlist",
    "encode",
    "generate",
    "load_playlist",
    # Addressing and envelopes
    "EnvelopeBuilder",
    "TransactionEnvelope",
    "derive_address",
    "read_envelopes",
    "record_addresses",
    "verify_envelope",
    # Pipeline
    "RunSummary",
    "extract_playlist",
    "generate_playlist",
    "process_playlist",
    # Logging
    "configure_logging",
    "get_logger",
]
