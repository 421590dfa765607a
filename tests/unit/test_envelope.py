from __future__ import annotations

import hashlib
import io

import pytest

from smallbank_workload.addressing import derive_address
from smallbank_workload.domain.models import DepositChecking, SendPayment
from smallbank_workload.envelope import (
    EnvelopeBuilder,
    TransactionEnvelope,
    read_envelopes,
    verify_envelope,
)
from smallbank_workload.errors import DecodeError, SigningError
from smallbank_workload.signing import create_signer
from smallbank_workload.wire.codec import ProtobufEncoder
from smallbank_workload.wire.framing import frame

CUSTOMER_7_ADDRESS = "332514f05210c5b4263f0ec4c3995bdab458d8"


def test_sign_builds_expected_header(fake_signer, step_clock):
    builder = EnvelopeBuilder(fake_signer, clock=step_clock)
    envelope = builder.sign(DepositChecking(customer_id=7, amount=50))
    header = envelope.header

    assert header.family_name == "smallbank"
    assert header.family_version == "1.0"
    assert header.inputs == header.outputs == (CUSTOMER_7_ADDRESS,)
    assert header.dependencies == ()
    assert header.payload_sha512 == hashlib.sha512(envelope.payload).hexdigest()
    assert header.signer_public_key == header.batcher_public_key == fake_signer.public_key
    assert header.nonce == "1500000000"
    assert envelope.header_bytes == ProtobufEncoder().encode_header(header)
    assert envelope.header_signature == hashlib.sha256(envelope.header_bytes).hexdigest()
    assert fake_signer.signed == [envelope.header_bytes]


def test_two_party_addresses_keep_order(fake_signer, step_clock):
    builder = EnvelopeBuilder(fake_signer, clock=step_clock)
    envelope = builder.sign(SendPayment(source_customer_id=7, dest_customer_id=3, amount=12))
    assert envelope.header.inputs == (CUSTOMER_7_ADDRESS, derive_address(3))


def test_nonce_is_seconds_and_padded_nanos(fake_signer, step_clock):
    builder = EnvelopeBuilder(fake_signer, clock=step_clock)
    assert [builder.next_nonce() for _ in range(3)] == [
        "1500000000",
        "3000000000",
        "4500000000",
    ]


def test_nonce_strictly_increases_with_stalled_clock(fake_signer, frozen_clock):
    builder = EnvelopeBuilder(fake_signer, clock=frozen_clock)
    assert [builder.next_nonce() for _ in range(3)] == [
        "0000000000",
        "0000000001",
        "0000000002",
    ]


def test_identical_records_get_distinct_envelopes(fake_signer, frozen_clock):
    builder = EnvelopeBuilder(fake_signer, clock=frozen_clock)
    record = DepositChecking(customer_id=1, amount=10)
    first, second = builder.sign(record), builder.sign(record)
    assert first.payload == second.payload
    assert first.header_signature != second.header_signature


def test_stream_round_trip(fake_signer, step_clock, sample_records):
    builder = EnvelopeBuilder(fake_signer, clock=step_clock)
    envelopes = [builder.sign(record) for record in sample_records]
    stream = io.BytesIO()
    written = sum(envelope.write_to(stream) for envelope in envelopes)
    assert written == len(stream.getvalue())

    stream.seek(0)
    decoded = list(read_envelopes(stream))
    assert decoded == envelopes
    assert [envelope.record() for envelope in decoded] == sample_records


def test_read_envelopes_reports_bad_frame_index(fake_signer, step_clock):
    envelope = EnvelopeBuilder(fake_signer, clock=step_clock).sign(
        DepositChecking(customer_id=1, amount=10)
    )
    stream = io.BytesIO(frame(envelope.to_bytes()) + frame(b"\xff\xff"))
    with pytest.raises(DecodeError) as exc_info:
        list(read_envelopes(stream))
    assert exc_info.value.index == 1


@pytest.fixture
def signed(secp256k1_key):
    signer = create_signer("secp256k1", secp256k1_key)
    builder = EnvelopeBuilder(signer)
    return signer, builder.sign(SendPayment(source_customer_id=2, dest_customer_id=9, amount=30))


def test_verify_envelope_returns_record(signed):
    _, envelope = signed
    record = verify_envelope(envelope, "secp256k1")
    assert record == SendPayment(source_customer_id=2, dest_customer_id=9, amount=30)


def test_verify_rejects_tampered_payload(signed):
    _, envelope = signed
    payload = ProtobufEncoder().encode_payload(
        SendPayment(source_customer_id=2, dest_customer_id=9, amount=31)
    )
    tampered = envelope.model_copy(update={"payload": payload})
    with pytest.raises(DecodeError, match="payload digest"):
        verify_envelope(tampered, "secp256k1")


def test_verify_rejects_bad_signature(signed):
    _, envelope = signed
    signature = ("1" if envelope.header_signature[0] != "1" else "2") + envelope.header_signature[1:]
    tampered = envelope.model_copy(update={"header_signature": signature})
    with pytest.raises(SigningError):
        verify_envelope(tampered, "secp256k1")


def test_verify_rejects_foreign_family(signed):
    _, envelope = signed
    header = envelope.header.model_copy(update={"family_name": "intkey"})
    with pytest.raises(DecodeError, match="intkey"):
        verify_envelope(envelope.model_copy(update={"header": header}), "secp256k1")


def test_verify_rejects_mismatched_addresses(signed):
    signer, envelope = signed
    encoder = ProtobufEncoder()
    wrong = (derive_address(99),)
    header = envelope.header.model_copy(update={"inputs": wrong, "outputs": wrong})
    header_bytes = encoder.encode_header(header)
    forged = TransactionEnvelope(
        header=header,
        header_bytes=header_bytes,
        header_signature=signer.sign(header_bytes),
        payload=envelope.payload,
    )
    with pytest.raises(DecodeError, match="addresses"):
        verify_envelope(forged, "secp256k1")
