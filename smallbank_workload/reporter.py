from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from smallbank_workload.domain.models import RECORD_TYPES, TransactionRecord, customer_ids
from smallbank_workload.pipeline import RunSummary


def _type_rows(counts: Mapping[str, int]) -> Iterable[tuple[str, str, str]]:
    total = sum(counts.values())
    for name in RECORD_TYPES:
        count = counts.get(name, 0)
        share = f"{100 * count / total:.1f}" if total else "0.0"
        yield name, f"{count:,}", share


def print_run_summary(summary: RunSummary, console: Optional[Console] = None) -> None:
    """
    Render the metrics of one pipeline run as a rich table.

    Output goes to stderr by default so it never mixes with a playlist
    written to stdout.
    """
    console = console or Console(stderr=True)

    table = Table(
        title=f"Smallbank workload: {summary.get('operation', 'run')}",
        box=box.ROUNDED,
        caption="Counts of records handled in this run",
    )
    table.add_column("Transaction Type", style="cyan", no_wrap=True)
    table.add_column("Records", justify="right", style="magenta")
    table.add_column("Share %", justify="right", style="green")
    for row in _type_rows(summary.get("transaction_types", {})):
        table.add_row(*row)
    console.print(table)

    records = summary.get("records", 0)
    duration = summary.get("duration_seconds", 0.0)
    throughput = summary.get("throughput_records_per_sec", 0.0)
    line = f"{records:,} records in {duration:.2f}s ({throughput:,.2f} records/s)"
    mem_bytes = summary.get("peak_rss_bytes")
    if mem_bytes:
        line += f" | peak RSS {mem_bytes / (1024 * 1024):.2f} MB"
    if "bytes_written" in summary:
        line += f" | {summary['bytes_written']:,} bytes written"
    console.print(line)
    if summary.get("signer_public_key"):
        console.print(f"[dim]signer public key: {summary['signer_public_key']}[/dim]")


def print_playlist_summary(
    records: Iterable[TransactionRecord], console: Optional[Console] = None
) -> None:
    """Render the transaction mix and account coverage of a playlist."""
    console = console or Console()
    counts: Counter = Counter()
    accounts: set[int] = set()
    referenced: set[int] = set()
    for record in records:
        counts[record.transaction_type] += 1
        ids = customer_ids(record)
        if record.transaction_type == "create_account":
            accounts.update(ids)
        else:
            referenced.update(ids)

    if not counts:
        console.print("[yellow]Playlist is empty.[/yellow]")
        return

    table = Table(title="Playlist Summary", box=box.ROUNDED)
    table.add_column("Transaction Type", style="cyan", no_wrap=True)
    table.add_column("Records", justify="right", style="magenta")
    table.add_column("Share %", justify="right", style="green")
    for row in _type_rows(counts):
        table.add_row(*row)
    console.print(table)

    console.print(
        f"{sum(counts.values()):,} records | {len(accounts):,} accounts created | "
        f"{len(referenced):,} accounts referenced by operations"
    )
    missing = referenced - accounts
    if missing:
        console.print(
            f"[yellow]{len(missing):,} referenced accounts are never created "
            f"(e.g. {sorted(missing)[:5]})[/yellow]"
        )


__all__ = ["print_playlist_summary", "print_run_summary"]
