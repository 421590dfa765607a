"""
End-to-end tests of the command line: create -> process -> extract.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from smallbank_workload.config import get_settings
from smallbank_workload.generator import generate
from smallbank_workload.main import app
from smallbank_workload.playlist import dumps_playlist
from smallbank_workload.wire.framing import read_delimited

pytestmark = pytest.mark.integration

ACCOUNTS = 6
TRANSACTIONS = 30
SEED = 1234


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> CliRunner:
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("SMALLBANK_PRIVATE_KEY", raising=False)
    monkeypatch.delenv("SMALLBANK_SIGNING_ALGORITHM", raising=False)
    monkeypatch.chdir(tmp_path)
    return CliRunner()


@pytest.fixture
def playlist(runner: CliRunner, tmp_path: Path) -> Path:
    path = tmp_path / "playlist.yaml"
    result = runner.invoke(
        app,
        ["create", "-a", str(ACCOUNTS), "-t", str(TRANSACTIONS), "--seed", str(SEED), "-o", str(path)],
    )
    assert result.exit_code == 0, result.output
    return path


def test_create_writes_seeded_playlist(playlist: Path):
    expected = dumps_playlist(generate(ACCOUNTS, TRANSACTIONS, SEED))
    assert playlist.read_text(encoding="utf-8") == expected


def test_create_to_stdout(runner: CliRunner):
    result = runner.invoke(app, ["create", "-a", "2", "-t", "3", "--seed", "5"])
    assert result.exit_code == 0, result.output
    assert result.stdout == dumps_playlist(generate(2, 3, 5))


def test_round_trip_is_byte_identical(
    runner: CliRunner, playlist: Path, tmp_path: Path, secp256k1_key: str
):
    batch = tmp_path / "batch.bin"
    restored = tmp_path / "restored.yaml"

    result = runner.invoke(
        app, ["process", "-i", str(playlist), "-o", str(batch), "-k", secp256k1_key]
    )
    assert result.exit_code == 0, result.output
    with batch.open("rb") as stream:
        assert len(list(read_delimited(stream))) == ACCOUNTS + TRANSACTIONS

    result = runner.invoke(app, ["extract", "-i", str(batch), "-o", str(restored)])
    assert result.exit_code == 0, result.output
    assert restored.read_bytes() == playlist.read_bytes()


def test_keygen_then_process_with_key_file(runner: CliRunner, playlist: Path, tmp_path: Path):
    key_file = tmp_path / "signer.key"
    result = runner.invoke(app, ["keygen", "--algorithm", "ed25519", "-o", str(key_file)])
    assert result.exit_code == 0, result.output
    assert "public key:" in result.output
    assert len(key_file.read_text(encoding="utf-8").strip()) == 64

    batch = tmp_path / "batch.bin"
    result = runner.invoke(
        app,
        [
            "process",
            "-i",
            str(playlist),
            "-o",
            str(batch),
            "--key-file",
            str(key_file),
            "--algorithm",
            "ed25519",
        ],
    )
    assert result.exit_code == 0, result.output

    restored = tmp_path / "restored.yaml"
    result = runner.invoke(
        app, ["extract", "-i", str(batch), "-o", str(restored), "--algorithm", "ed25519"]
    )
    assert result.exit_code == 0, result.output
    assert restored.read_bytes() == playlist.read_bytes()


def test_private_key_from_environment(
    runner: CliRunner, playlist: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    secp256k1_key: str,
):
    monkeypatch.setenv("SMALLBANK_PRIVATE_KEY", secp256k1_key)
    # the playlist fixture already cached settings through `create`
    get_settings.cache_clear()
    result = runner.invoke(app, ["process", "-i", str(playlist), "-o", str(tmp_path / "b.bin")])
    assert result.exit_code == 0, result.output


def test_summary_json(runner: CliRunner, playlist: Path):
    result = runner.invoke(app, ["summary", "-i", str(playlist), "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["records"] == ACCOUNTS + TRANSACTIONS
    assert payload["transaction_types"]["create_account"] == ACCOUNTS


def test_summary_table(runner: CliRunner, playlist: Path):
    result = runner.invoke(app, ["summary", "-i", str(playlist)])
    assert result.exit_code == 0, result.output
    assert "Playlist Summary" in result.output
    assert f"{ACCOUNTS} accounts created" in result.output


def test_info_shows_defaults(runner: CliRunner):
    result = runner.invoke(app, ["info"])
    assert result.exit_code == 0, result.output
    assert "accounts=100" in result.output
    assert "private_key=unset" in result.output


def test_process_without_key_is_a_usage_error(runner: CliRunner, playlist: Path, tmp_path: Path):
    result = runner.invoke(app, ["process", "-i", str(playlist), "-o", str(tmp_path / "b.bin")])
    assert result.exit_code == 2


def test_process_with_invalid_key_fails(runner: CliRunner, playlist: Path, tmp_path: Path):
    result = runner.invoke(
        app, ["process", "-i", str(playlist), "-o", str(tmp_path / "b.bin"), "-k", "00" * 32]
    )
    assert result.exit_code == 1
    assert "[SIGNING]" in result.output


def test_create_rejects_single_account_with_transactions(runner: CliRunner, tmp_path: Path):
    result = runner.invoke(app, ["create", "-a", "1", "-t", "5", "-o", str(tmp_path / "p.yaml")])
    assert result.exit_code == 1
    assert "[INVALID_CONFIGURATION]" in result.output


def test_process_reports_bad_record_index(runner: CliRunner, tmp_path: Path, secp256k1_key: str):
    playlist = tmp_path / "bad.yaml"
    playlist.write_text(
        "- transaction_type: deposit_checking\n  customer_id: 1\n  amount: 5\n"
        "- transaction_type: overdraft\n  customer_id: 1\n",
        encoding="utf-8",
    )
    result = runner.invoke(
        app, ["process", "-i", str(playlist), "-o", str(tmp_path / "b.bin"), "-k", secp256k1_key]
    )
    assert result.exit_code == 1
    assert "[UNKNOWN_TRANSACTION_TYPE] record 1" in result.output


def test_extract_missing_file(runner: CliRunner, tmp_path: Path):
    result = runner.invoke(app, ["extract", "-i", str(tmp_path / "missing.bin")])
    assert result.exit_code == 1
    assert "[IO]" in result.output


@pytest.mark.parametrize(
    ("playlist_text", "key"),
    [
        ("- transaction_type: deposit_checking\n  customer_id: 1\n  amount: 5\n", "00" * 32),
        ("- transaction_type: overdraft\n  customer_id: 1\n", None),
    ],
)
def test_failed_process_keeps_existing_batch(
    runner: CliRunner, tmp_path: Path, secp256k1_key: str, playlist_text: str, key
):
    playlist = tmp_path / "input.yaml"
    playlist.write_text(playlist_text, encoding="utf-8")
    batch = tmp_path / "batch.bin"
    batch.write_bytes(b"previous good batch")

    result = runner.invoke(
        app, ["process", "-i", str(playlist), "-o", str(batch), "-k", key or secp256k1_key]
    )
    assert result.exit_code == 1
    assert batch.read_bytes() == b"previous good batch"
