"""Smoke tests for the CLI entry point."""
from __future__ import annotations

import json

import pandas as pd
import pytest

from cdr_pipeline import __main__
from cdr_pipeline.cli import main

HEADER = "StartTime;BillDuration;CallPrice;ANI;DNIS;CustomerIP;CallType;LRN"


def _write_inputs(tmp_path):
    input_dir = tmp_path / "cdrs"
    input_dir.mkdir()
    (input_dir / "20250113.CDR").write_text(
        "\n".join(
            [
                HEADER,
                "2025-01-13T10:00:00Z;60;0.05;(555) 123-4567;911;10.0.0.1;Outbound;",
                "2025-01-13T10:05:00Z;30;0.02;+1-212-555-0000;411;10.0.0.1;Outbound;",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    return input_dir


def test_cli_smoke_processes_a_directory(tmp_path) -> None:
    input_dir = _write_inputs(tmp_path)
    export_path = tmp_path / "cleaned.csv"
    ledger_path = tmp_path / "ledger.json"

    exit_code = main(
        [
            str(input_dir),
            "--backup-dir",
            str(tmp_path / "bak"),
            "--export",
            str(export_path),
            "--ledger",
            str(ledger_path),
        ]
    )

    assert exit_code == 0
    frame = pd.read_csv(export_path, dtype=str)
    assert list(frame["ANI"]) == ["5551234567", "2125550000"]
    assert list(frame["DNIS"]) == ["911", "411"]
    assert (tmp_path / "bak" / "processed_20250113.json").exists()
    assert len(json.loads(ledger_path.read_text(encoding="utf-8"))) == 2


def test_cli_uses_configuration_file(tmp_path) -> None:
    input_dir = _write_inputs(tmp_path)
    (input_dir / "20250113.CDR").rename(input_dir / "20250113.csv")
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "file_pattern": "*.csv",
                "backup_dir": str(tmp_path / "bak"),
                "store": {
                    "class": "cdr_pipeline.store.JsonLedgerStore",
                    "options": {"path": str(tmp_path / "ledger.json")},
                },
                "notifiers": [{"class": "cdr_pipeline.notify.LoggingNotifier"}],
            }
        ),
        encoding="utf-8",
    )

    exit_code = main([str(input_dir), "--config", str(config_path), "--mode", "concurrent"])

    assert exit_code == 0
    assert (tmp_path / "bak" / "processed_20250113.json").exists()
    assert (tmp_path / "ledger.json").exists()


def test_cli_reports_failures(tmp_path) -> None:
    exit_code = main([str(tmp_path / "missing.CDR")])

    assert exit_code == 1


def test_cli_rejects_bad_configuration(tmp_path) -> None:
    exit_code = main([str(tmp_path), "--config", str(tmp_path / "missing.yaml")])

    assert exit_code == 1


def test_module_entry_point_delegates_to_cli(tmp_path) -> None:
    """The package entry point should behave like the CLI."""

    input_dir = _write_inputs(tmp_path)
    export_path = tmp_path / "cleaned.json"

    exit_code = __main__.main([str(input_dir), "--export", str(export_path)])

    assert exit_code == 0
    rows = json.loads(export_path.read_text(encoding="utf-8"))
    assert rows[0]["StartTime"] == "2025-01-13T02:00:00.000Z"


def test_module_entry_point_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main([])

    captured = capsys.readouterr()
    assert "python -m cdr_pipeline" in captured.out
    assert exit_code == 2


@pytest.mark.parametrize(
    "config",
    [
        {"local_timezone": "Mars/Olympus"},
        {"notifiers": ["cdr_pipeline.notify.LoggingNotifier"]},
        {"notifiers": {"class": "cdr_pipeline.notify.LoggingNotifier"}},
    ],
)
def test_cli_exits_with_error_for_invalid_configuration_values(tmp_path, config) -> None:
    input_dir = _write_inputs(tmp_path)
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(config), encoding="utf-8")

    exit_code = main([str(input_dir), "--config", str(config_path)])

    assert exit_code == 1
