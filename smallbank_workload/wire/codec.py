"""
Canonical binary encoding of records, headers and transactions.

`CanonicalEncoder` is the seam the envelope builder depends on; the protobuf
implementation is the one the ledger understands. Tests may substitute any
object satisfying the protocol.
"""

from __future__ import annotations

from typing import Dict, Protocol, Tuple, Type, assert_never, runtime_checkable

from google.protobuf import message as protobuf_message
from pydantic import BaseModel, ValidationError

from smallbank_workload.domain.headers import TransactionHeader
from smallbank_workload.domain.models import (
    Amalgamate,
    CreateAccount,
    DepositChecking,
    SendPayment,
    TransactionRecord,
    TransactSavings,
    WriteCheck,
)
from smallbank_workload.errors import DecodeError, EncodeError, InvalidRecord, UnknownTransactionType
from smallbank_workload.wire import messages as pb


@runtime_checkable
class CanonicalEncoder(Protocol):
    """Deterministic byte serialization for every message the pipeline emits."""

    def encode_payload(self, record: TransactionRecord) -> bytes:
        ...

    def decode_payload(self, data: bytes) -> TransactionRecord:
        ...

    def encode_header(self, header: TransactionHeader) -> bytes:
        ...

    def decode_header(self, data: bytes) -> TransactionHeader:
        ...

    def encode_transaction(self, header: bytes, header_signature: str, payload: bytes) -> bytes:
        ...

    def decode_transaction(self, data: bytes) -> Tuple[bytes, str, bytes]:
        ...


# payload type number -> (data field on the payload message, record model)
_DECODE_TABLE: Dict[int, Tuple[str, Type[BaseModel]]] = {
    pb.PayloadType.Value("CREATE_ACCOUNT"): ("create_account", CreateAccount),
    pb.PayloadType.Value("DEPOSIT_CHECKING"): ("deposit_checking", DepositChecking),
    pb.PayloadType.Value("WRITE_CHECK"): ("write_check", WriteCheck),
    pb.PayloadType.Value("TRANSACT_SAVINGS"): ("transact_savings", TransactSavings),
    pb.PayloadType.Value("SEND_PAYMENT"): ("send_payment", SendPayment),
    pb.PayloadType.Value("AMALGAMATE"): ("amalgamate", Amalgamate),
}


def _record_fields(record: TransactionRecord) -> Dict[str, object]:
    return record.model_dump(exclude={"transaction_type"})


class ProtobufEncoder:
    """Protobuf encoding compatible with the ledger's Smallbank transaction family."""

    def encode_payload(self, record: TransactionRecord) -> bytes:
        payload = pb.SmallbankTransactionPayload()
        match record:
            case CreateAccount():
                payload.payload_type = pb.PayloadType.Value("CREATE_ACCOUNT")
                data = payload.create_account
            case DepositChecking():
                payload.payload_type = pb.PayloadType.Value("DEPOSIT_CHECKING")
                data = payload.deposit_checking
            case WriteCheck():
                payload.payload_type = pb.PayloadType.Value("WRITE_CHECK")
                data = payload.write_check
            case TransactSavings():
                payload.payload_type = pb.PayloadType.Value("TRANSACT_SAVINGS")
                data = payload.transact_savings
            case SendPayment():
                payload.payload_type = pb.PayloadType.Value("SEND_PAYMENT")
                data = payload.send_payment
            case Amalgamate():
                payload.payload_type = pb.PayloadType.Value("AMALGAMATE")
                data = payload.amalgamate
            case _:
                assert_never(record)

        # Zero-valued fields are not serialized; mark the sub-message present anyway.
        data.SetInParent()
        try:
            for name, value in _record_fields(record).items():
                setattr(data, name, value)
            return payload.SerializeToString(deterministic=True)
        except (ValueError, TypeError, protobuf_message.EncodeError) as exc:
            raise EncodeError(f"cannot encode {record.transaction_type} payload: {exc}") from exc

    def decode_payload(self, data: bytes) -> TransactionRecord:
        payload = pb.SmallbankTransactionPayload()
        try:
            payload.ParseFromString(data)
        except protobuf_message.DecodeError as exc:
            raise DecodeError(f"malformed Smallbank payload: {exc}") from exc

        entry = _DECODE_TABLE.get(payload.payload_type)
        if entry is None:
            raise UnknownTransactionType(_payload_type_name(payload.payload_type))
        field_name, model = entry
        message = getattr(payload, field_name)
        fields = {
            name: getattr(message, name)
            for name in model.model_fields
            if name != "transaction_type"
        }
        try:
            return model.model_validate(fields)  # type: ignore[return-value]
        except ValidationError as exc:
            raise InvalidRecord(f"invalid {field_name} payload: {exc.errors()[0]['msg']}") from exc

    def encode_header(self, header: TransactionHeader) -> bytes:
        message = pb.TransactionHeader(
            batcher_public_key=header.batcher_public_key,
            dependencies=list(header.dependencies),
            family_name=header.family_name,
            family_version=header.family_version,
            inputs=list(header.inputs),
            nonce=header.nonce,
            outputs=list(header.outputs),
            payload_sha512=header.payload_sha512,
            signer_public_key=header.signer_public_key,
        )
        try:
            return message.SerializeToString(deterministic=True)
        except protobuf_message.EncodeError as exc:
            raise EncodeError(f"cannot encode transaction header: {exc}") from exc

    def decode_header(self, data: bytes) -> TransactionHeader:
        message = pb.TransactionHeader()
        try:
            message.ParseFromString(data)
        except protobuf_message.DecodeError as exc:
            raise DecodeError(f"malformed transaction header: {exc}") from exc
        return TransactionHeader(
            family_name=message.family_name,
            family_version=message.family_version,
            nonce=message.nonce,
            inputs=tuple(message.inputs),
            outputs=tuple(message.outputs),
            dependencies=tuple(message.dependencies),
            payload_sha512=message.payload_sha512,
            signer_public_key=message.signer_public_key,
            batcher_public_key=message.batcher_public_key,
        )

    def encode_transaction(self, header: bytes, header_signature: str, payload: bytes) -> bytes:
        message = pb.Transaction(header=header, header_signature=header_signature, payload=payload)
        try:
            return message.SerializeToString(deterministic=True)
        except protobuf_message.EncodeError as exc:
            raise EncodeError(f"cannot encode transaction: {exc}") from exc

    def decode_transaction(self, data: bytes) -> Tuple[bytes, str, bytes]:
        message = pb.Transaction()
        try:
            message.ParseFromString(data)
        except protobuf_message.DecodeError as exc:
            raise DecodeError(f"malformed transaction: {exc}") from exc
        return message.header, message.header_signature, message.payload


def _payload_type_name(value: int) -> str:
    try:
        return pb.PayloadType.Name(value)
    except ValueError:
        return str(value)


__all__ = ["CanonicalEncoder", "ProtobufEncoder"]
