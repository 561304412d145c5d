from __future__ import annotations

from datetime import datetime
from pathlib import Path

from docxgen.cli import main as cli_main

"""End-to-end run: real workbook, real template, real documents on disk."""


def test_full_run_generates_documents(make_workbook, template_file: Path, temp_workdir: Path, read_docx, capsys):
    data = make_workbook({
        "Summary": [["Total"], [3]],
        "Participants": [
            ["Id", "Name", "E-Mail", "Joined"],
            ["P1", "Ann", "ann@example.com", datetime(2024, 2, 3)],
            [2, "Ben", "ben@example.com", None],
            [None, None, None, None],
            ["P3", "Chloe", None, None],
        ],
    })
    out = temp_workdir / "generated"

    code = cli_main([
        "--template-file", str(template_file),
        "--data-file", str(data),
        "--sheet", "participants",
        "--entity-column", "Id",
        "--output-dir", str(out),
    ])

    assert code == 0
    # 数値セルは表示形式 ("2") でファイル名になる
    assert sorted(p.name for p in out.iterdir()) == ["2.docx", "P1.docx", "P3.docx"]
    text = read_docx(out / "P1.docx")
    assert "Participant P1" in text
    assert "Hello Ann" in text
    assert "Mail: ann@example.com" in text
    assert "Hello Ben" in read_docx(out / "2.docx")
    assert "SUMMARY rows=4 generated=3 skipped_blank=1" in capsys.readouterr().out


def test_rerun_without_replace_keeps_files(data_file: Path, template_file: Path, temp_workdir: Path, capsys):
    out = temp_workdir / "generated"
    args = ["-t", str(template_file), "-d", str(data_file), "-c", "Id", "-o", str(out)]

    assert cli_main(args) == 0
    first = {p.name: p.stat().st_mtime_ns for p in out.iterdir()}
    capsys.readouterr()

    assert cli_main(args) == 0
    second = {p.name: p.stat().st_mtime_ns for p in out.iterdir()}
    assert first == second
    assert "generated=0 skipped_blank=1 skipped_blank_key=1 skipped_existing=2" in capsys.readouterr().out


def test_replace_regenerates(data_file: Path, template_file: Path, temp_workdir: Path, read_docx):
    out = temp_workdir / "generated"
    out.mkdir()
    (out / "P1.docx").write_bytes(b"stale")

    assert cli_main(["-t", str(template_file), "-d", str(data_file), "-c", "Id", "-o", str(out), "-r"]) == 0
    assert "Hello Ann" in read_docx(out / "P1.docx")


def test_first_row_only(data_file: Path, template_file: Path, temp_workdir: Path):
    out = temp_workdir / "generated"
    assert cli_main(["-t", str(template_file), "-d", str(data_file), "-c", "Id", "-o", str(out), "-1"]) == 0
    assert [p.name for p in out.iterdir()] == ["P1.docx"]
