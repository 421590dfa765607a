"""
Utilities package for the Smallbank workload generator.

Exports shared helpers for logging and profiling. Keep this package
lightweight and free of domain-specific logic.
"""

from smallbank_workload.utils.logging import configure_logging, get_logger
from smallbank_workload.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
