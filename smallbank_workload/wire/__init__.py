"""
Wire package: protobuf schemas, canonical encoding and stream framing.

Keep this layer free of signing and generation logic.
"""

from smallbank_workload.wire.codec import CanonicalEncoder, ProtobufEncoder
from smallbank_workload.wire.framing import frame, iter_frames, read_delimited, write_delimited

__all__ = [
    "CanonicalEncoder",
    "ProtobufEncoder",
    "frame",
    "iter_frames",
    "read_delimited",
    "write_delimited",
]
