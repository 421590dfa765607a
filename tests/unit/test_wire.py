from __future__ import annotations

import io

import pytest

from smallbank_workload.domain.headers import TransactionHeader
from smallbank_workload.domain.models import Amalgamate, DepositChecking
from smallbank_workload.errors import (
    DecodeError,
    EncodeError,
    InvalidRecord,
    UnknownTransactionType,
)
from smallbank_workload.wire import messages as pb
from smallbank_workload.wire.codec import CanonicalEncoder, ProtobufEncoder
from smallbank_workload.wire.framing import frame, iter_frames, read_delimited, write_delimited

HEADER = TransactionHeader(
    nonce="1500000000",
    inputs=("332514f05210c5b4263f0ec4c3995bdab458d8",),
    outputs=("332514f05210c5b4263f0ec4c3995bdab458d8",),
    payload_sha512="ab" * 64,
    signer_public_key="02" + "cd" * 32,
    batcher_public_key="02" + "cd" * 32,
)


@pytest.fixture
def encoder() -> ProtobufEncoder:
    return ProtobufEncoder()


def test_payload_type_numbers():
    assert [pb.PayloadType.Value(name) for name, _ in pb.PAYLOAD_TYPES] == list(range(7))
    assert pb.PayloadType.Name(6) == "AMALGAMATE"


def test_encoder_satisfies_protocol(encoder):
    assert isinstance(encoder, CanonicalEncoder)


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        (DepositChecking(customer_id=5, amount=50), "08021a0408051032"),
        (DepositChecking(customer_id=0, amount=50), "08021a021032"),
        (DepositChecking(customer_id=0, amount=0), "08021a00"),
        (Amalgamate(source_customer_id=0, dest_customer_id=1), "08063a021001"),
    ],
)
def test_known_payload_encodings(encoder, record, expected):
    assert encoder.encode_payload(record).hex() == expected


def test_payload_round_trip(encoder, sample_records):
    for record in sample_records:
        assert encoder.decode_payload(encoder.encode_payload(record)) == record


def test_payload_encoding_is_deterministic(encoder, sample_records):
    first = [encoder.encode_payload(record) for record in sample_records]
    second = [ProtobufEncoder().encode_payload(record) for record in sample_records]
    assert first == second


def test_out_of_range_value_fails_to_encode(encoder):
    record = DepositChecking.model_construct(customer_id=-1, amount=5)
    with pytest.raises(EncodeError):
        encoder.encode_payload(record)


@pytest.mark.parametrize(
    ("data", "name"),
    [(b"", "PAYLOAD_TYPE_UNSET"), (b"\x08\x09", "9")],
)
def test_unknown_payload_type(encoder, data, name):
    with pytest.raises(UnknownTransactionType) as exc_info:
        encoder.decode_payload(data)
    assert exc_info.value.name == name


def test_truncated_payload(encoder):
    with pytest.raises(DecodeError):
        encoder.decode_payload(b"\x0a\x05ab")


def test_decoded_payload_is_validated(encoder):
    # amalgamate with source == dest == 0
    with pytest.raises(InvalidRecord):
        encoder.decode_payload(bytes.fromhex("08063a00"))


def test_header_round_trip(encoder):
    data = encoder.encode_header(HEADER)
    assert encoder.decode_header(data) == HEADER
    assert encoder.encode_header(HEADER) == data


def test_header_uses_ledger_field_numbers(encoder):
    message = pb.TransactionHeader()
    message.ParseFromString(encoder.encode_header(HEADER))
    assert message.family_name == "smallbank"
    assert message.family_version == "1.0"
    assert list(message.inputs) == list(HEADER.inputs)
    assert message.DESCRIPTOR.fields_by_name["payload_sha512"].number == 9
    assert message.DESCRIPTOR.fields_by_name["signer_public_key"].number == 10


def test_transaction_round_trip(encoder):
    data = encoder.encode_transaction(b"header", "f00d", b"payload")
    assert encoder.decode_transaction(data) == (b"header", "f00d", b"payload")


def test_frame_prefix():
    assert frame(b"abc") == b"\x03abc"
    assert frame(b"x" * 300)[:2] == b"\xac\x02"
    assert frame(b"") == b"\x00"


def test_write_and_read_frames():
    stream = io.BytesIO()
    written = write_delimited(stream, b"first")
    written += write_delimited(stream, b"")
    written += write_delimited(stream, b"y" * 200)
    assert written == len(stream.getvalue())

    stream.seek(0)
    assert list(read_delimited(stream)) == [b"first", b"", b"y" * 200]


def test_empty_stream_has_no_frames():
    assert list(iter_frames(b"")) == []


def test_truncated_frame_reports_index():
    with pytest.raises(DecodeError) as exc_info:
        list(iter_frames(frame(b"ok") + b"\x05abc"))
    assert exc_info.value.index == 1


def test_truncated_length_prefix():
    with pytest.raises(DecodeError) as exc_info:
        list(iter_frames(b"\x80"))
    assert exc_info.value.index == 0
