"""
Entry points tying generation, the YAML codec, and envelope signing together.

Usage (example from CLI):
    from smallbank_workload.pipeline import generate_playlist, process_playlist

    with open("playlist.yaml", "w") as out:
        generate_playlist(out, num_accounts=100, num_transactions=1_000, seed=42)

    with open("playlist.yaml") as src, open("batch.bin", "wb") as out:
        process_playlist(out, src, algorithm="secp256k1", private_key=key_hex)

Every run is fail-fast: the first error aborts it and carries the index of the
record that caused it. Output already written to the stream stays there.
"""

from __future__ import annotations

from collections import Counter
from typing import IO, Dict, Iterable, Iterator, List, NamedTuple, Optional, TypedDict

from smallbank_workload.domain.models import TransactionRecord
from smallbank_workload.envelope import EnvelopeBuilder, read_envelopes, verify_envelope
from smallbank_workload.errors import SmallbankWorkloadError
from smallbank_workload.generator import generate
from smallbank_workload.playlist import dump_playlist, load_playlist
from smallbank_workload.signing import DEFAULT_ALGORITHM, AbstractSigner, create_signer
from smallbank_workload.utils.logging import get_logger
from smallbank_workload.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


class RunSummary(TypedDict, total=False):
    """
    Metrics returned by every pipeline entry point.
    """

    operation: str
    records: int
    duration_seconds: float
    throughput_records_per_sec: float
    bytes_written: int
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    transaction_types: Dict[str, int]
    signer_public_key: str


def _round_float(value: float, decimals: int = 2) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _summarize(operation: str, stats: ProfileStats, counts: Counter) -> RunSummary:
    """Merge profiler stats and per-type counts, rounding floats for readability."""
    summary = RunSummary(
        operation=operation,
        records=stats.records,
        duration_seconds=_round_float(stats.duration_seconds, 4),
        throughput_records_per_sec=_round_float(stats.records_per_sec),
        peak_rss_bytes=stats.peak_rss_bytes,
        cpu_percent=_round_float(stats.cpu_percent, 1) if stats.cpu_percent else None,
        transaction_types=dict(sorted(counts.items())),
    )
    summary.update(stats.extra)  # type: ignore[typeddict-item]
    return summary


def _counting(records: Iterable[TransactionRecord], counts: Counter) -> Iterator[TransactionRecord]:
    for record in records:
        counts[record.transaction_type] += 1
        yield record


def generate_playlist(
    output: IO[str],
    num_accounts: int,
    num_transactions: int,
    seed: Optional[int] = None,
) -> RunSummary:
    """
    Generate a Smallbank workload and write it to `output` as a YAML playlist.

    The playlist holds `num_accounts` create_account entries followed by
    `num_transactions` randomly drawn operations. Passing `seed` makes the
    output byte-for-byte reproducible.
    """
    records = generate(num_accounts, num_transactions, seed)
    counts: Counter = Counter()
    log.info(
        "[CREATE START] Generating playlist",
        extra={"accounts": num_accounts, "transactions": num_transactions, "seed": seed},
    )
    with profile_block("create") as stats:
        stats.records = dump_playlist(_counting(records, counts), output)

    summary = _summarize("create", stats, counts)
    log.info(
        "[CREATE COMPLETE] Playlist written",
        extra={"records": summary["records"], "duration": summary["duration_seconds"]},
    )
    return summary


class SigningJob(NamedTuple):
    """A parsed playlist and the signer that will sign it."""

    records: List[TransactionRecord]
    signer: AbstractSigner


def prepare_signing(playlist_input: IO[str], algorithm: str, private_key: str) -> SigningJob:
    """
    Parse the whole playlist and load the key.

    Callers open their output only after this succeeds, so malformed input or
    a bad key never touches an existing batch file.
    """
    return SigningJob(load_playlist(playlist_input), create_signer(algorithm, private_key))


def process_playlist(
    output: IO[bytes],
    playlist_input: IO[str],
    algorithm: str,
    private_key: str,
) -> RunSummary:
    """
    Sign every record of a YAML playlist and write length-delimited transactions.
    """
    return sign_records(output, prepare_signing(playlist_input, algorithm, private_key))


def sign_records(output: IO[bytes], job: SigningJob) -> RunSummary:
    """Sign the records of a prepared job and append one frame per record to `output`."""
    records, signer = job
    builder = EnvelopeBuilder(signer)
    counts: Counter = Counter()
    log.info(
        "[PROCESS START] Signing playlist",
        extra={"records": len(records), "algorithm": signer.algorithm},
    )

    with profile_block("process") as stats:
        written = 0
        for index, record in enumerate(records):
            try:
                written += builder.sign(record).write_to(output)
            except SmallbankWorkloadError as exc:
                log.error(
                    "[PROCESS FAILED] Aborting at record",
                    extra={"index": index, "error": exc.code},
                )
                raise exc.at_index(index)
            counts[record.transaction_type] += 1
            stats.records += 1
        stats.extra["bytes_written"] = written
        stats.extra["signer_public_key"] = signer.public_key

    summary = _summarize("process", stats, counts)
    log.info(
        "[PROCESS COMPLETE] Transactions written",
        extra={"records": summary["records"], "bytes": written},
    )
    return summary


def extract_playlist(
    output: IO[str],
    batch_input: IO[bytes],
    algorithm: Optional[str] = None,
    verify: bool = True,
) -> RunSummary:
    """
    Convert a length-delimited transaction stream back into a YAML playlist.

    With `verify`, each envelope's payload digest, header signature and
    addresses are checked before its record is emitted.
    """
    scheme = algorithm or DEFAULT_ALGORITHM
    counts: Counter = Counter()

    def _records() -> Iterator[TransactionRecord]:
        for index, envelope in enumerate(read_envelopes(batch_input)):
            try:
                yield verify_envelope(envelope, scheme) if verify else envelope.record()
            except SmallbankWorkloadError as exc:
                raise exc.at_index(index)

    log.info("[EXTRACT START] Reading transactions", extra={"verify": verify})
    with profile_block("extract") as stats:
        stats.records = dump_playlist(_counting(_records(), counts), output)

    summary = _summarize("extract", stats, counts)
    log.info("[EXTRACT COMPLETE] Playlist written", extra={"records": summary["records"]})
    return summary


__all__ = [
    "RunSummary",
    "SigningJob",
    "extract_playlist",
    "generate_playlist",
    "prepare_signing",
    "process_playlist",
    "sign_records",
]
