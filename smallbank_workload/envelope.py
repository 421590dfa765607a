"""
Signed transaction envelopes.

`EnvelopeBuilder.sign` turns a record into an envelope:

1. derive the state address of every customer the record references and
   declare them as both inputs and outputs;
2. canonically encode the record (the payload) and store its hex SHA-512 in
   the header;
3. set signer and batcher public keys to the signer's key;
4. stamp a nonce from the time elapsed since the builder was created;
5. encode the header and sign the header bytes.

Envelopes are written as length-delimited `Transaction` messages and can be
read back and verified with `read_envelopes`/`verify_envelope`.
"""

from __future__ import annotations

import time
from typing import IO, Callable, Iterator, Optional

from pydantic import BaseModel, Field

from smallbank_workload.addressing import Hasher, Sha512Hasher, record_addresses
from smallbank_workload.domain.headers import FAMILY_NAME, FAMILY_VERSION, TransactionHeader
from smallbank_workload.domain.models import TransactionRecord
from smallbank_workload.errors import DecodeError, SigningError, SmallbankWorkloadError
from smallbank_workload.signing import Signer, verify_signature
from smallbank_workload.utils.logging import get_logger
from smallbank_workload.wire.codec import CanonicalEncoder, ProtobufEncoder
from smallbank_workload.wire.framing import read_delimited, write_delimited

log = get_logger(__name__)

_NANOS_PER_SECOND = 1_000_000_000


class TransactionEnvelope(BaseModel):
    """A signed transaction: header, header signature and payload."""

    header: TransactionHeader
    header_bytes: bytes = Field(..., description="Canonical encoding of `header`; what was signed.")
    header_signature: str = Field(..., description="Hex signature over `header_bytes`.")
    payload: bytes = Field(..., description="Canonical encoding of the record.")

    model_config = {
        "frozen": True,
    }

    def to_bytes(self, encoder: Optional[CanonicalEncoder] = None) -> bytes:
        return (encoder or ProtobufEncoder()).encode_transaction(
            self.header_bytes, self.header_signature, self.payload
        )

    def write_to(self, stream: IO[bytes], encoder: Optional[CanonicalEncoder] = None) -> int:
        """Append this envelope to `stream` as one length-delimited frame."""
        return write_delimited(stream, self.to_bytes(encoder))

    def record(self, encoder: Optional[CanonicalEncoder] = None) -> TransactionRecord:
        return (encoder or ProtobufEncoder()).decode_payload(self.payload)


class EnvelopeBuilder:
    """
    Builds signed envelopes with a single signer acting as batcher too.

    Parameters
    ----------
    signer : Signer
        Signs header bytes; its public key goes into the header.
    encoder : CanonicalEncoder | None
        Defaults to the protobuf encoder.
    hasher : Hasher | None
        Digest used for addresses and the payload hash; SHA-512 by default.
    clock : Callable[[], int] | None
        Monotonic nanosecond clock used for nonces; `time.monotonic_ns` by default.
    """

    def __init__(
        self,
        signer: Signer,
        encoder: Optional[CanonicalEncoder] = None,
        hasher: Optional[Hasher] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.signer = signer
        self.encoder = encoder or ProtobufEncoder()
        self.hasher = hasher or Sha512Hasher()
        self._clock = clock or time.monotonic_ns
        self._start = self._clock()
        self._last_elapsed = -1

    def next_nonce(self) -> str:
        """
        Elapsed seconds followed by the zero-padded nanosecond remainder.

        Nonces strictly increase within one builder; there is no guarantee
        across builders or processes.
        """
        elapsed = self._clock() - self._start
        if elapsed <= self._last_elapsed:
            elapsed = self._last_elapsed + 1
        self._last_elapsed = elapsed
        seconds, nanos = divmod(elapsed, _NANOS_PER_SECOND)
        return f"{seconds}{nanos:09d}"

    def sign(self, record: TransactionRecord) -> TransactionEnvelope:
        addresses = tuple(record_addresses(record, self.hasher))
        payload = self.encoder.encode_payload(record)
        header = TransactionHeader(
            family_name=FAMILY_NAME,
            family_version=FAMILY_VERSION,
            nonce=self.next_nonce(),
            inputs=addresses,
            outputs=addresses,
            payload_sha512=self.hasher.digest(payload).hex(),
            signer_public_key=self.signer.public_key,
            batcher_public_key=self.signer.public_key,
        )
        header_bytes = self.encoder.encode_header(header)
        signature = self.signer.sign(header_bytes)
        log.debug(
            "Signed transaction",
            extra={"transaction_type": record.transaction_type, "nonce": header.nonce},
        )
        return TransactionEnvelope(
            header=header,
            header_bytes=header_bytes,
            header_signature=signature,
            payload=payload,
        )


def read_envelopes(
    stream: IO[bytes], encoder: Optional[CanonicalEncoder] = None
) -> Iterator[TransactionEnvelope]:
    """Parse a length-delimited stream of `Transaction` messages."""
    codec = encoder or ProtobufEncoder()
    for index, data in enumerate(read_delimited(stream)):
        try:
            header_bytes, signature, payload = codec.decode_transaction(data)
            header = codec.decode_header(header_bytes)
        except SmallbankWorkloadError as exc:
            raise exc.at_index(index)
        yield TransactionEnvelope(
            header=header,
            header_bytes=header_bytes,
            header_signature=signature,
            payload=payload,
        )


def verify_envelope(
    envelope: TransactionEnvelope,
    algorithm: str,
    encoder: Optional[CanonicalEncoder] = None,
    hasher: Optional[Hasher] = None,
) -> TransactionRecord:
    """
    Check an envelope end to end and return its record.

    Raises
    ------
    DecodeError
        Wrong family, payload digest mismatch, undecodable payload, or
        addresses that do not match the record.
    SigningError
        The header signature does not verify against the signer key.
    """
    digest = hasher or Sha512Hasher()
    header = envelope.header
    if header.family_name != FAMILY_NAME:
        raise DecodeError(f"unexpected transaction family '{header.family_name}'")
    if digest.digest(envelope.payload).hex() != header.payload_sha512:
        raise DecodeError("payload digest does not match payload_sha512")
    if not verify_signature(
        algorithm, header.signer_public_key, envelope.header_bytes, envelope.header_signature
    ):
        raise SigningError("header signature does not verify")
    record = envelope.record(encoder)
    expected = tuple(record_addresses(record, digest))
    if header.inputs != expected or header.outputs != expected:
        raise DecodeError("header addresses do not match the payload's customers")
    return record


__all__ = [
    "EnvelopeBuilder",
    "TransactionEnvelope",
    "read_envelopes",
    "verify_envelope",
]
