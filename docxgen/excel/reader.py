from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl import load_workbook as _openpyxl_load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..models.row import Row
from .formatter import format_cell_value

"""Excel reader: workbook loading, sheet selection and row extraction.

The first row of the selected sheet is the header row. Each header cell is
keyed by the alphabetic part of its reference ("C1" -> "C") and every data
cell is aligned to its header through the same key. Cell values are the
displayed texts produced by excel.formatter.

Header resolution and row building are plain functions over SheetCell
sequences so they can be exercised without a workbook.
"""

__all__ = [
    "LoadError",
    "SheetNotFoundError",
    "SheetCell",
    "SheetData",
    "column_key",
    "load_workbook",
    "select_sheet",
    "resolve_header",
    "build_row",
    "read_sheet",
    "read_rows",
    "sheet_preview",
]

logger = logging.getLogger(__name__)


class LoadError(Exception):
    """Raised when the data file cannot be read as an xlsx workbook."""


class SheetNotFoundError(Exception):
    """Raised when a requested sheet name has no case-insensitive match."""


@dataclass(frozen=True)
class SheetCell:
    reference: str  # "C7"
    text: str  # 表示文字列


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]  # ヘッダ名 (シート上の列順)
    rows: list[Row]


def column_key(reference: str) -> str:
    """Leading alphabetic run of a cell reference ("AB12" -> "AB")."""
    key = []
    for ch in reference:
        if not ch.isalpha():
            break
        key.append(ch)
    return "".join(key)


def load_workbook(path: Path) -> Workbook:
    """Load an xlsx workbook with cached formula results.

    Raises:
        LoadError: file missing, unreadable, not a zip package or malformed
    """
    try:
        return _openpyxl_load_workbook(path, data_only=True)
    # SyntaxError: 壊れたシート XML (ElementTree.ParseError / lxml XMLSyntaxError)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError, SyntaxError) as e:
        raise LoadError(f"cannot load workbook {path}: {e}") from e


def select_sheet(workbook: Workbook, sheet_name: str | None = None) -> Worksheet:
    """Pick the worksheet to process.

    No name (None / blank) selects the first worksheet in workbook order.
    Otherwise the first worksheet whose title matches case-insensitively.

    Raises:
        SheetNotFoundError: no worksheet matches (or the workbook has none)
    """
    sheets = workbook.worksheets
    if sheet_name is None or not sheet_name.strip():
        if not sheets:
            raise SheetNotFoundError("workbook contains no worksheets")
        return sheets[0]

    wanted = sheet_name.casefold()
    for ws in sheets:
        if ws.title.casefold() == wanted:
            return ws
    available = ", ".join(repr(ws.title) for ws in sheets)
    raise SheetNotFoundError(f"sheet '{sheet_name}' not found (available: {available})")


def resolve_header(cells: Iterable[SheetCell]) -> dict[str, str]:
    """Map column key -> header name for the header row cells."""
    names: dict[str, str] = {}
    for cell in cells:
        key = column_key(cell.reference)
        if not key:
            logger.warning("header cell reference '%s' has no column letters; column ignored", cell.reference)
            continue
        if not cell.text.strip():
            logger.warning("header cell %s is blank; column ignored", cell.reference)
            continue
        names[key] = cell.text
    return names


def build_row(row_number: int, cells: Iterable[SheetCell], column_names: dict[str, str]) -> Row:
    """Build a Row from populated data cells using the header mapping."""
    values: dict[str, str] = {}
    for cell in cells:
        name = column_names.get(column_key(cell.reference))
        if name is None:
            logger.debug("row %d: cell %s has no header column; value dropped", row_number, cell.reference)
            continue
        values[name] = cell.text
    return Row(row_number=row_number, values=values)


def _populated_cells(source_row: Iterable[Any]) -> list[SheetCell]:
    cells: list[SheetCell] = []
    for cell in source_row:
        # 値なしセルは Row に含めない (sparse)
        if cell.value is None or cell.value == "":
            continue
        cells.append(SheetCell(reference=cell.coordinate, text=format_cell_value(cell)))
    return cells


def read_sheet(worksheet: Worksheet) -> SheetData:
    """Convert a worksheet into header names and ordered Rows.

    Steps:
    1. First sheet row -> header mapping (resolve_header)
    2. Every following row -> Row (build_row); empty rows yield blank Rows
    """
    # 先頭の空行はシートデータに含まれない: 最初に値を持つ行をヘッダとする
    source_rows = list(worksheet.iter_rows(min_row=worksheet.min_row))
    if not source_rows:
        return SheetData(sheet_name=worksheet.title, columns=[], rows=[])

    column_names = resolve_header(_populated_cells(source_rows[0]))
    rows: list[Row] = []
    for source_row in source_rows[1:]:
        populated = _populated_cells(source_row)
        row_number = source_row[0].row if source_row else -1
        rows.append(build_row(row_number, populated, column_names))

    logger.debug(
        "sheet '%s': %d columns, %d data rows", worksheet.title, len(column_names), len(rows)
    )
    return SheetData(sheet_name=worksheet.title, columns=list(column_names.values()), rows=rows)


def read_rows(path: Path, sheet_name: str | None = None) -> SheetData:
    """Load the workbook at path, select the sheet and read its rows."""
    workbook = load_workbook(path)
    try:
        worksheet = select_sheet(workbook, sheet_name)
        return read_sheet(worksheet)
    finally:
        workbook.close()


def sheet_preview(sheet_data: SheetData, limit: int = 5) -> pd.DataFrame:
    """Tabular preview of the first rows (absent cells shown as empty)."""
    records = [row.values for row in sheet_data.rows[:limit]]
    df = pd.DataFrame(records, columns=sheet_data.columns)
    return df.fillna("")
