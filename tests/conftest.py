# Shared pytest fixtures
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from docx import Document
from openpyxl import Workbook

from docxgen.logging.init import reset_logging

SheetRows = list[list[object]]


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "data").mkdir()
    (tmp_path / "out").mkdir()
    monkeypatch.chdir(tmp_path)
    # setenv -> delenv: .env 読み込みで設定された値もテスト後に元へ戻る
    monkeypatch.setenv("DOCXGEN_OUTPUT_DIR", "")
    monkeypatch.delenv("DOCXGEN_OUTPUT_DIR")
    return tmp_path


def write_workbook(path: Path, sheets: dict[str, SheetRows]) -> Path:
    """Write sheets (in order) with openpyxl; None leaves a cell empty."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def write_template(path: Path, paragraphs: list[str]) -> Path:
    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(str(path))
    return path


def docx_text(path: Path) -> str:
    return "\n".join(p.text for p in Document(str(path)).paragraphs)


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[..., Path]:
    def _make(sheets: dict[str, SheetRows], name: str = "data.xlsx") -> Path:
        return write_workbook(temp_workdir / "data" / name, sheets)
    return _make


@pytest.fixture()
def template_file(temp_workdir: Path) -> Path:
    return write_template(
        temp_workdir / "data" / "template.docx",
        ["Participant {{ Id }}", "Hello {{ Name }}", "Mail: {{ columns['E-Mail'] }}"],
    )


@pytest.fixture()
def participants_sheet() -> SheetRows:
    return [
        ["Id", "Name", "E-Mail"],
        ["P1", "Ann", "ann@example.com"],
        [None, None, None],  # blank row
        ["   ", "Ben", "ben@example.com"],  # blank key
        ["P4", "Chloe", None],
    ]


@pytest.fixture()
def data_file(make_workbook, participants_sheet: SheetRows) -> Path:
    return make_workbook({"Participants": participants_sheet})


@pytest.fixture()
def read_docx() -> Callable[[Path], str]:
    return docx_text


@pytest.fixture()
def make_template(temp_workdir: Path) -> Callable[..., Path]:
    def _make(paragraphs: list[str], name: str = "template.docx") -> Path:
        return write_template(temp_workdir / "data" / name, paragraphs)
    return _make
