"""
YAML playlist codec.

A playlist is a top-level YAML sequence; each element is a mapping with a
`transaction_type` key followed by the fields of that transaction type:

    - transaction_type: deposit_checking
      customer_id: 5
      amount: 50

`encode`/`decode` convert between records and plain Python structures;
`dump_playlist`/`load_playlist` add the YAML text layer (PyYAML safe
dumper/loader).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import IO, Any, Dict, Iterable, Iterator, List

import yaml
from pydantic import ValidationError

from smallbank_workload.domain.models import RECORD_TYPES, TransactionRecord
from smallbank_workload.errors import (
    DecodeError,
    EncodeError,
    FieldOutOfRange,
    InvalidRecord,
    MissingField,
    MissingTransactionType,
    PlaylistIOError,
    TypeMismatch,
    UnknownTransactionType,
)
from smallbank_workload.utils.logging import get_logger

log = get_logger(__name__)

_RANGE_ERRORS = frozenset(
    {"greater_than", "greater_than_equal", "less_than", "less_than_equal"}
)


def encode_record(record: TransactionRecord) -> Dict[str, Any]:
    """Render one record as a mapping with `transaction_type` as the first key."""
    fields = record.model_dump()
    transaction_type = fields.pop("transaction_type")
    return {"transaction_type": transaction_type, **fields}


def iter_encode(records: Iterable[TransactionRecord]) -> Iterator[Dict[str, Any]]:
    for record in records:
        yield encode_record(record)


def encode(records: Iterable[TransactionRecord]) -> List[Dict[str, Any]]:
    return list(iter_encode(records))


def decode_record(item: Any, index: int = 0) -> TransactionRecord:
    """
    Convert one playlist element into a record.

    Raises
    ------
    MissingTransactionType
        The element has no (or a null) `transaction_type`.
    UnknownTransactionType
        `transaction_type` names no known operation.
    MissingField, TypeMismatch, FieldOutOfRange, InvalidRecord
        A field required by the operation is absent, mistyped, does not fit
        its integer width, or the record violates a cross-field rule.
    """
    if not isinstance(item, Mapping):
        raise DecodeError(
            f"playlist entries must be mappings, got {type(item).__name__}", index=index
        )
    transaction_type = item.get("transaction_type")
    if transaction_type is None:
        raise MissingTransactionType(index=index)
    if not isinstance(transaction_type, str):
        raise TypeMismatch("transaction_type", "expected a string", index=index)
    model = RECORD_TYPES.get(transaction_type)
    if model is None:
        raise UnknownTransactionType(transaction_type, index=index)

    fields = {key: value for key, value in item.items() if isinstance(key, str)}
    try:
        return model.model_validate(fields)  # type: ignore[return-value]
    except ValidationError as exc:
        raise _translate_validation_error(exc, index) from exc


def _translate_validation_error(exc: ValidationError, index: int) -> DecodeError:
    error = exc.errors()[0]
    location = error.get("loc") or ()
    if not location:
        return InvalidRecord(error.get("msg", str(exc)), index=index)
    field = str(location[0])
    if error["type"] == "missing":
        return MissingField(field, index=index)
    if error["type"] in _RANGE_ERRORS:
        return FieldOutOfRange(field, error.get("msg", ""), index=index)
    return TypeMismatch(field, error.get("msg", ""), index=index)


def decode(items: Any) -> List[TransactionRecord]:
    """Convert a parsed playlist (a sequence of mappings) into records."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise DecodeError(f"playlist must be a sequence, got {type(items).__name__}")
    return [decode_record(item, index) for index, item in enumerate(items)]


def dump_playlist(records: Iterable[TransactionRecord], stream: IO[str]) -> int:
    """
    Write records to `stream` as a YAML playlist and return how many were written.

    Each record is dumped as a one-element block sequence; consecutive chunks
    concatenate into the same text a single dump of the whole list produces,
    so the playlist never has to be held in memory.
    """
    count = 0
    try:
        for count, item in enumerate(iter_encode(records), start=1):
            yaml.safe_dump(
                [item], stream, sort_keys=False, default_flow_style=False, allow_unicode=True
            )
        if count == 0:
            yaml.safe_dump([], stream)
    except OSError as exc:
        raise PlaylistIOError(f"failed writing playlist: {exc}", index=count or None) from exc
    except yaml.YAMLError as exc:
        raise EncodeError(f"failed emitting YAML: {exc}", index=count or None) from exc
    log.debug("Playlist written", extra={"records": count})
    return count


def dumps_playlist(records: Iterable[TransactionRecord]) -> str:
    return yaml.safe_dump(
        encode(records), sort_keys=False, default_flow_style=False, allow_unicode=True
    )


def loads_playlist(text: str) -> List[TransactionRecord]:
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DecodeError(f"invalid YAML playlist: {exc}") from exc
    return decode(document)


def load_playlist(stream: IO[str]) -> List[TransactionRecord]:
    """Read and decode a YAML playlist from a text stream."""
    try:
        text = stream.read()
    except OSError as exc:
        raise PlaylistIOError(f"failed reading playlist: {exc}") from exc
    records = loads_playlist(text)
    log.debug("Playlist loaded", extra={"records": len(records)})
    return records


__all__ = [
    "decode",
    "decode_record",
    "dump_playlist",
    "dumps_playlist",
    "encode",
    "encode_record",
    "iter_encode",
    "load_playlist",
    "loads_playlist",
]
