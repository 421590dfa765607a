"""
Length-delimited framing for envelope streams.

Each frame is a base-128 varint holding the byte length of the message,
followed by the message bytes; this is protobuf's `writeDelimitedTo` format.
"""

from __future__ import annotations

from typing import IO, Iterator

from google.protobuf import message as protobuf_message
from google.protobuf.internal.decoder import _DecodeVarint32
from google.protobuf.internal.encoder import _VarintBytes

from smallbank_workload.errors import DecodeError, PlaylistIOError


def frame(data: bytes) -> bytes:
    return _VarintBytes(len(data)) + data


def write_delimited(stream: IO[bytes], data: bytes) -> int:
    """Append one frame to `stream` and return the number of bytes written."""
    framed = frame(data)
    try:
        stream.write(framed)
    except OSError as exc:
        raise PlaylistIOError(f"failed writing frame: {exc}") from exc
    return len(framed)


def iter_frames(buffer: bytes) -> Iterator[bytes]:
    position = 0
    index = 0
    while position < len(buffer):
        try:
            size, start = _DecodeVarint32(buffer, position)
        except (IndexError, protobuf_message.DecodeError) as exc:
            raise DecodeError("truncated length prefix", index=index) from exc
        end = start + size
        if end > len(buffer):
            raise DecodeError(
                f"frame declares {size} bytes but only {len(buffer) - start} remain",
                index=index,
            )
        yield buffer[start:end]
        position = end
        index += 1


def read_delimited(stream: IO[bytes]) -> Iterator[bytes]:
    """Yield every frame in `stream`."""
    try:
        buffer = stream.read()
    except OSError as exc:
        raise PlaylistIOError(f"failed reading frames: {exc}") from exc
    yield from iter_frames(buffer)


__all__ = ["frame", "iter_frames", "read_delimited", "write_delimited"]
