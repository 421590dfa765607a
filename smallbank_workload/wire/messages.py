"""
Protobuf message classes for the Smallbank payload and the transaction envelope.

The schemas are declared here with `descriptor_pb2` instead of generated
`_pb2` modules. Field numbers and types match the ledger's `smallbank.proto`
and `transaction.proto`, which is what makes the serialized bytes
wire-compatible:

    message SmallbankTransactionPayload {
        enum PayloadType { PAYLOAD_TYPE_UNSET = 0; CREATE_ACCOUNT = 1; ... AMALGAMATE = 6; }
        PayloadType payload_type = 1;
        CreateAccountTransactionData create_account = 2;
        ...
        AmalgamateTransactionData amalgamate = 7;
    }

    message TransactionHeader {
        string batcher_public_key = 1;  repeated string dependencies = 2;
        string family_name = 3;         string family_version = 4;
        repeated string inputs = 5;     string nonce = 6;
        repeated string outputs = 7;    string payload_sha512 = 9;
        string signer_public_key = 10;
    }

    message Transaction { bytes header = 1; string header_signature = 2; bytes payload = 3; }
"""

from __future__ import annotations

from typing import Sequence, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.internal import enum_type_wrapper

_Field = descriptor_pb2.FieldDescriptorProto

# (name, number, type, label, type_name)
FieldSpec = Tuple[str, int, int, int, str]

PAYLOAD_TYPES = (
    ("PAYLOAD_TYPE_UNSET", 0),
    ("CREATE_ACCOUNT", 1),
    ("DEPOSIT_CHECKING", 2),
    ("WRITE_CHECK", 3),
    ("TRANSACT_SAVINGS", 4),
    ("SEND_PAYMENT", 5),
    ("AMALGAMATE", 6),
)

_PAYLOAD = "SmallbankTransactionPayload"


def _scalar(name: str, number: int, kind: int) -> FieldSpec:
    return (name, number, kind, _Field.LABEL_OPTIONAL, "")


def _repeated(name: str, number: int, kind: int) -> FieldSpec:
    return (name, number, kind, _Field.LABEL_REPEATED, "")


def _message(name: str, number: int, type_name: str) -> FieldSpec:
    return (name, number, _Field.TYPE_MESSAGE, _Field.LABEL_OPTIONAL, type_name)


_DATA_MESSAGES = {
    "CreateAccountTransactionData": [
        _scalar("customer_id", 1, _Field.TYPE_UINT32),
        _scalar("customer_name", 2, _Field.TYPE_STRING),
        _scalar("initial_savings_balance", 3, _Field.TYPE_UINT32),
        _scalar("initial_checking_balance", 4, _Field.TYPE_UINT32),
    ],
    "DepositCheckingTransactionData": [
        _scalar("customer_id", 1, _Field.TYPE_UINT32),
        _scalar("amount", 2, _Field.TYPE_UINT32),
    ],
    "WriteCheckTransactionData": [
        _scalar("customer_id", 1, _Field.TYPE_UINT32),
        _scalar("amount", 2, _Field.TYPE_UINT32),
    ],
    "TransactSavingsTransactionData": [
        _scalar("customer_id", 1, _Field.TYPE_UINT32),
        _scalar("amount", 2, _Field.TYPE_INT32),
    ],
    "SendPaymentTransactionData": [
        _scalar("source_customer_id", 1, _Field.TYPE_UINT32),
        _scalar("dest_customer_id", 2, _Field.TYPE_UINT32),
        _scalar("amount", 3, _Field.TYPE_UINT32),
    ],
    "AmalgamateTransactionData": [
        _scalar("source_customer_id", 1, _Field.TYPE_UINT32),
        _scalar("dest_customer_id", 2, _Field.TYPE_UINT32),
    ],
}

_PAYLOAD_FIELDS = [
    (
        "payload_type",
        1,
        _Field.TYPE_ENUM,
        _Field.LABEL_OPTIONAL,
        f".{_PAYLOAD}.PayloadType",
    ),
    _message("create_account", 2, f".{_PAYLOAD}.CreateAccountTransactionData"),
    _message("deposit_checking", 3, f".{_PAYLOAD}.DepositCheckingTransactionData"),
    _message("write_check", 4, f".{_PAYLOAD}.WriteCheckTransactionData"),
    _message("transact_savings", 5, f".{_PAYLOAD}.TransactSavingsTransactionData"),
    _message("send_payment", 6, f".{_PAYLOAD}.SendPaymentTransactionData"),
    _message("amalgamate", 7, f".{_PAYLOAD}.AmalgamateTransactionData"),
]

_HEADER_FIELDS = [
    _scalar("batcher_public_key", 1, _Field.TYPE_STRING),
    _repeated("dependencies", 2, _Field.TYPE_STRING),
    _scalar("family_name", 3, _Field.TYPE_STRING),
    _scalar("family_version", 4, _Field.TYPE_STRING),
    _repeated("inputs", 5, _Field.TYPE_STRING),
    _scalar("nonce", 6, _Field.TYPE_STRING),
    _repeated("outputs", 7, _Field.TYPE_STRING),
    _scalar("payload_sha512", 9, _Field.TYPE_STRING),
    _scalar("signer_public_key", 10, _Field.TYPE_STRING),
]

_TRANSACTION_FIELDS = [
    _scalar("header", 1, _Field.TYPE_BYTES),
    _scalar("header_signature", 2, _Field.TYPE_STRING),
    _scalar("payload", 3, _Field.TYPE_BYTES),
]


def _add_fields(message: descriptor_pb2.DescriptorProto, fields: Sequence[FieldSpec]) -> None:
    for name, number, kind, label, type_name in fields:
        field = message.field.add(name=name, number=number, type=kind, label=label)
        if type_name:
            field.type_name = type_name


def _smallbank_file() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(name="smallbank.proto", syntax="proto3")
    payload = proto.message_type.add(name=_PAYLOAD)
    payload_type = payload.enum_type.add(name="PayloadType")
    for name, number in PAYLOAD_TYPES:
        payload_type.value.add(name=name, number=number)
    for name, fields in _DATA_MESSAGES.items():
        _add_fields(payload.nested_type.add(name=name), fields)
    _add_fields(payload, _PAYLOAD_FIELDS)
    return proto


def _transaction_file() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(name="transaction.proto", syntax="proto3")
    _add_fields(proto.message_type.add(name="TransactionHeader"), _HEADER_FIELDS)
    _add_fields(proto.message_type.add(name="Transaction"), _TRANSACTION_FIELDS)
    return proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_smallbank_file().SerializeToString())
_pool.AddSerializedFile(_transaction_file().SerializeToString())

SmallbankTransactionPayload = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(_PAYLOAD)
)
TransactionHeader = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName("TransactionHeader")
)
Transaction = message_factory.GetMessageClass(_pool.FindMessageTypeByName("Transaction"))

PayloadType = enum_type_wrapper.EnumTypeWrapper(
    _pool.FindEnumTypeByName(f"{_PAYLOAD}.PayloadType")
)


__all__ = [
    "PAYLOAD_TYPES",
    "PayloadType",
    "SmallbankTransactionPayload",
    "Transaction",
    "TransactionHeader",
]
