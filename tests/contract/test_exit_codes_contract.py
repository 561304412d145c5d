from __future__ import annotations

import zipfile
from pathlib import Path
from unittest.mock import patch

from docxgen.cli import main as cli_main
from docxgen.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL
from docxgen.services.stamper import StampError

"""Exit code contract: 0 completed, 1 fatal, 2 completed with failed rows."""


def test_exit_code_values():
    assert (EXIT_SUCCESS_ALL, EXIT_FATAL, EXIT_PARTIAL_FAILURE) == (0, 1, 2)


def test_exit_code_all_success(data_file: Path, template_file: Path, temp_workdir: Path):
    assert cli_main(["-t", str(template_file), "-d", str(data_file), "-c", "Id", "-o", "out"]) == 0


def test_exit_code_only_skipped_rows_is_success(make_workbook, template_file: Path, temp_workdir: Path):
    data = make_workbook({"Data": [["Id", "Name"], [None, "no key"]]})
    assert cli_main(["-t", str(template_file), "-d", str(data), "-c", "Id", "-o", "out"]) == 0


def test_exit_code_config_error(temp_workdir: Path, capsys):
    assert cli_main(["--config", "missing.yml"]) == 1
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_exit_code_load_error(template_file: Path, temp_workdir: Path, capsys):
    bad = temp_workdir / "data" / "bad.xlsx"
    bad.write_bytes(b"garbage")
    assert cli_main(["-t", str(template_file), "-d", str(bad), "-c", "Id"]) == 1
    assert "ERROR load:" in capsys.readouterr().out


def test_exit_code_sheet_not_found(data_file: Path, template_file: Path, temp_workdir: Path, capsys):
    assert cli_main(["-t", str(template_file), "-d", str(data_file), "-c", "Id", "-s", "Missing"]) == 1
    assert "ERROR sheet: sheet 'Missing' not found" in capsys.readouterr().out


def test_exit_code_missing_template(data_file: Path, temp_workdir: Path, capsys):
    assert cli_main(["-t", "missing.docx", "-d", str(data_file), "-c", "Id", "-o", "out"]) == 1
    assert "ERROR generation: cannot read template" in capsys.readouterr().out


def test_exit_code_output_dir_not_creatable(data_file: Path, template_file: Path, temp_workdir: Path, capsys):
    blocker = temp_workdir / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    code = cli_main(["-t", str(template_file), "-d", str(data_file), "-c", "Id", "-o", str(blocker / "out")])
    assert code == 1
    assert "ERROR output:" in capsys.readouterr().out


def test_exit_code_partial_failure(data_file: Path, template_file: Path, temp_workdir: Path):
    with patch("docxgen.services.stamper.DocxStamper.stamp", side_effect=[StampError("boom"), b"ok"]):
        code = cli_main([
            "-t", str(template_file), "-d", str(data_file), "-c", "Id", "-o", "out",
            "--on-row-error", "skip",
        ])
    assert code == 2


def test_exit_code_malformed_sheet_xml(data_file: Path, template_file: Path, temp_workdir: Path, capsys):
    bad = temp_workdir / "data" / "truncated.xlsx"
    with zipfile.ZipFile(data_file) as zin, zipfile.ZipFile(bad, "w") as zout:
        for item in zin.infolist():
            content = zin.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                content = content[: len(content) // 2]
            zout.writestr(item, content)

    assert cli_main(["-t", str(template_file), "-d", str(bad), "-c", "Id", "-o", "out"]) == 1
    assert "ERROR load: cannot load workbook" in capsys.readouterr().out
