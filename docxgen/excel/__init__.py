"""Spreadsheet access: workbook loading, sheet selection, row extraction."""

from .formatter import format_cell_value, format_value
from .reader import (
    LoadError,
    SheetCell,
    SheetData,
    SheetNotFoundError,
    build_row,
    column_key,
    load_workbook,
    read_rows,
    read_sheet,
    resolve_header,
    select_sheet,
    sheet_preview,
)

__all__ = [
    "LoadError",
    "SheetNotFoundError",
    "SheetCell",
    "SheetData",
    "build_row",
    "column_key",
    "format_cell_value",
    "format_value",
    "load_workbook",
    "read_rows",
    "read_sheet",
    "resolve_header",
    "select_sheet",
    "sheet_preview",
]
