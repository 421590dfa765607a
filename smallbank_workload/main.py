from __future__ import annotations

import contextlib
import json
import sys
from pathlib import Path
from typing import IO, Iterator, Optional

import typer

from smallbank_workload.config import get_settings
from smallbank_workload.errors import PlaylistIOError, SmallbankWorkloadError
from smallbank_workload.pipeline import (
    extract_playlist,
    generate_playlist,
    prepare_signing,
    sign_records,
)
from smallbank_workload.playlist import load_playlist
from smallbank_workload.reporter import print_playlist_summary, print_run_summary
from smallbank_workload.signing import available_algorithms, create_signer, generate_private_key
from smallbank_workload.utils.logging import configure_logging

app = typer.Typer(help="Generate and sign Smallbank benchmark workloads.")


@contextlib.contextmanager
def _open(path: Optional[Path], mode: str) -> Iterator[IO]:
    """Open `path`, or the matching standard stream when it is None or '-'."""
    if path is None or str(path) == "-":
        binary = "b" in mode
        if "r" in mode:
            yield sys.stdin.buffer if binary else sys.stdin
        else:
            stream = sys.stdout.buffer if binary else sys.stdout
            yield stream
            stream.flush()
        return
    try:
        handle = path.open(mode, encoding=None if "b" in mode else "utf-8")
    except OSError as exc:
        raise PlaylistIOError(f"cannot open {path}: {exc}") from exc
    with handle:
        yield handle


def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _fail(exc: SmallbankWorkloadError) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


def _resolve_private_key(key: Optional[str], key_file: Optional[Path]) -> str:
    if key and key_file:
        raise typer.BadParameter("use either --key or --key-file, not both")
    if key_file is not None:
        try:
            return key_file.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise PlaylistIOError(f"cannot read key file {key_file}: {exc}") from exc
    resolved = key or get_settings().private_key
    if not resolved:
        raise typer.BadParameter(
            "a private key is required (--key, --key-file or SMALLBANK_PRIVATE_KEY)"
        )
    return resolved


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"accounts={settings.num_accounts} transactions={settings.num_transactions} "
        f"seed={settings.seed} | algorithm={settings.signing_algorithm} "
        f"(available: {', '.join(available_algorithms())}) | "
        f"private_key={'set' if settings.private_key else 'unset'} | log_level={settings.log_level}"
    )


@app.command()
def create(
    accounts: Optional[int] = typer.Option(
        None, "--accounts", "-a", min=0, help="Number of accounts to create (default from settings)."
    ),
    transactions: Optional[int] = typer.Option(
        None,
        "--transactions",
        "-t",
        min=0,
        help="Number of operations after account creation (default from settings).",
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Random seed for a reproducible playlist."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Playlist file to write (default: stdout)."
    ),
    report: bool = typer.Option(False, "--report", help="Print a run summary to stderr."),
) -> None:
    """
    Generate a YAML playlist of Smallbank transactions.
    """
    _setup()
    settings = get_settings()
    num_accounts = settings.num_accounts if accounts is None else accounts
    num_transactions = settings.num_transactions if transactions is None else transactions
    effective_seed = settings.seed if seed is None else seed
    try:
        with _open(output, "w") as stream:
            summary = generate_playlist(stream, num_accounts, num_transactions, effective_seed)
    except SmallbankWorkloadError as exc:
        _fail(exc)
    if report:
        print_run_summary(summary)


@app.command()
def process(
    input_path: Optional[Path] = typer.Option(
        None, "--input", "-i", help="Playlist to sign (default: stdin)."
    ),
    output: Path = typer.Option(..., "--output", "-o", help="Binary transaction file to write."),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="Hex private key."),
    key_file: Optional[Path] = typer.Option(
        None, "--key-file", help="File containing the hex private key."
    ),
    algorithm: Optional[str] = typer.Option(
        None, "--algorithm", help="Signing algorithm (default from settings)."
    ),
    report: bool = typer.Option(False, "--report", help="Print a run summary to stderr."),
) -> None:
    """
    Sign a playlist into a length-delimited stream of transactions.
    """
    _setup()
    scheme = algorithm or get_settings().signing_algorithm
    try:
        private_key = _resolve_private_key(key, key_file)
        with _open(input_path, "r") as source:
            job = prepare_signing(source, scheme, private_key)
        with _open(output, "wb") as sink:
            summary = sign_records(sink, job)
    except SmallbankWorkloadError as exc:
        _fail(exc)
    if report:
        print_run_summary(summary)


@app.command()
def extract(
    input_path: Path = typer.Option(
        ..., "--input", "-i", help="Binary transaction file to read."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Playlist file to write (default: stdout)."
    ),
    algorithm: Optional[str] = typer.Option(
        None, "--algorithm", help="Signing algorithm used to verify signatures."
    ),
    verify: bool = typer.Option(
        True, "--verify/--no-verify", help="Check digests and signatures."
    ),
) -> None:
    """
    Convert a transaction file back into an editable YAML playlist.
    """
    _setup()
    scheme = algorithm or get_settings().signing_algorithm
    try:
        with _open(input_path, "rb") as source, _open(output, "w") as sink:
            extract_playlist(sink, source, algorithm=scheme, verify=verify)
    except SmallbankWorkloadError as exc:
        _fail(exc)


@app.command()
def keygen(
    algorithm: Optional[str] = typer.Option(
        None, "--algorithm", help="Signing algorithm (default from settings)."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the private key here instead of stdout."
    ),
) -> None:
    """
    Generate a random private key and print its public key to stderr.
    """
    _setup()
    scheme = algorithm or get_settings().signing_algorithm
    try:
        private_key = generate_private_key(scheme)
        public_key = create_signer(scheme, private_key).public_key
        with _open(output, "w") as sink:
            sink.write(private_key + "\n")
    except SmallbankWorkloadError as exc:
        _fail(exc)
    typer.echo(f"public key: {public_key}", err=True)


@app.command()
def summary(
    input_path: Optional[Path] = typer.Option(
        None, "--input", "-i", help="Playlist to summarize (default: stdin)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit counts as JSON."),
) -> None:
    """
    Show the transaction mix of a playlist.
    """
    _setup()
    try:
        with _open(input_path, "r") as source:
            records = load_playlist(source)
    except SmallbankWorkloadError as exc:
        _fail(exc)
    if as_json:
        counts: dict[str, int] = {}
        for record in records:
            counts[record.transaction_type] = counts.get(record.transaction_type, 0) + 1
        typer.echo(json.dumps({"records": len(records), "transaction_types": counts}, indent=2))
        return
    print_playlist_summary(records)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
