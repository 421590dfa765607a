"""
Error taxonomy for the Smallbank workload generator.

Every component raises a subclass of `SmallbankWorkloadError` and lets it
propagate; nothing retries. Errors raised while handling a specific playlist
entry carry its position in `index` so the CLI can point at the offending
record.
"""

from __future__ import annotations

from typing import Optional


class SmallbankWorkloadError(Exception):
    """Base class with a stable error code and optional record index."""

    code: str = "SMALLBANK"

    def __init__(self, message: str, *, index: Optional[int] = None) -> None:
        self.message = message
        self.index = index
        super().__init__(message)

    def at_index(self, index: int) -> "SmallbankWorkloadError":
        """Attach the record index if none was recorded yet and return self."""
        if self.index is None:
            self.index = index
        return self

    def __str__(self) -> str:
        if self.index is None:
            return f"[{self.code}] {self.message}"
        return f"[{self.code}] record {self.index}: {self.message}"


class InvalidConfiguration(SmallbankWorkloadError, ValueError):
    code = "INVALID_CONFIGURATION"


class PlaylistIOError(SmallbankWorkloadError):
    code = "IO"


class EncodeError(SmallbankWorkloadError):
    code = "ENCODE"


class DecodeError(SmallbankWorkloadError):
    code = "DECODE"


class MissingTransactionType(DecodeError):
    code = "MISSING_TRANSACTION_TYPE"

    def __init__(self, *, index: Optional[int] = None) -> None:
        super().__init__("No transaction_type specified", index=index)


class UnknownTransactionType(DecodeError):
    code = "UNKNOWN_TRANSACTION_TYPE"

    def __init__(self, name: object, *, index: Optional[int] = None) -> None:
        self.name = name
        super().__init__(f"unknown transaction_type: {name}", index=index)


class MissingField(DecodeError):
    code = "MISSING_FIELD"

    def __init__(self, field: str, *, index: Optional[int] = None) -> None:
        self.field = field
        super().__init__(f"missing field '{field}'", index=index)


class TypeMismatch(DecodeError):
    code = "TYPE_MISMATCH"

    def __init__(self, field: str, detail: str = "", *, index: Optional[int] = None) -> None:
        self.field = field
        message = f"field '{field}' has the wrong type"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, index=index)


class FieldOutOfRange(DecodeError):
    code = "FIELD_OUT_OF_RANGE"

    def __init__(self, field: str, detail: str = "", *, index: Optional[int] = None) -> None:
        self.field = field
        message = f"field '{field}' is out of range"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, index=index)


class InvalidRecord(DecodeError):
    code = "INVALID_RECORD"


class SigningError(SmallbankWorkloadError):
    code = "SIGNING"


__all__ = [
    "DecodeError",
    "EncodeError",
    "FieldOutOfRange",
    "InvalidConfiguration",
    "InvalidRecord",
    "MissingField",
    "MissingTransactionType",
    "PlaylistIOError",
    "SigningError",
    "SmallbankWorkloadError",
    "TypeMismatch",
    "UnknownTransactionType",
]
