from __future__ import annotations

import json
from pathlib import Path

from docxgen.cli import main as cli_main

"""Row isolation: a row that cannot be stamped is logged and skipped."""


def _strict_template(make_template) -> Path:
    return make_template(["{{ Id }}: {{ Name }} ({{ City }})"], name="strict.docx")


def test_skip_mode_continues_after_failed_row(make_workbook, make_template, temp_workdir: Path, capsys):
    data = make_workbook({
        "Data": [
            ["Id", "Name", "City"],
            ["P1", "Ann", None],  # City missing -> strict rendering fails
            ["P2", "Ben", "Osaka"],
        ]
    })
    out = temp_workdir / "generated"

    code = cli_main([
        "-t", str(_strict_template(make_template)), "-d", str(data), "-c", "Id", "-o", str(out),
        "--strict-placeholders", "--on-row-error", "skip", "--error-log-dir", "logs",
    ])

    assert code == 2
    assert [p.name for p in out.iterdir()] == ["P2.docx"]
    captured = capsys.readouterr().out
    assert "ERROR row 2 (P1) failed" in captured
    assert "failed=1" in captured

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    record = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert record["entity"] == "P1"
    assert record["error_type"] == "STAMP_ERROR"


def test_abort_mode_stops_run(make_workbook, make_template, temp_workdir: Path, capsys):
    data = make_workbook({
        "Data": [
            ["Id", "Name", "City"],
            ["P1", "Ann", None],
            ["P2", "Ben", "Osaka"],
        ]
    })
    out = temp_workdir / "generated"

    code = cli_main([
        "-t", str(_strict_template(make_template)), "-d", str(data), "-c", "Id", "-o", str(out),
        "--strict-placeholders",
    ])

    assert code == 1
    assert list(out.iterdir()) == []
    assert "ERROR generation: row 2 (P1)" in capsys.readouterr().out
