from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Row model for the docx generator.

A Row is one data line of the selected worksheet after header resolution.
Values are the *displayed* cell texts (see excel.formatter), keyed by the
header name of their column. Cells without a value are absent (sparse).
"""

__all__ = [
    "Row",
]


@dataclass(frozen=True)
class Row:
    """Logical representation of a single spreadsheet data row.

    row_number is the 1-based sheet row number, kept for log lines and the
    error log only. Templates never see it.
    """
    row_number: int  # シート上の行番号 (header = 1)
    values: dict[str, str] = field(default_factory=dict)  # column name -> displayed text

    def column(self, name: str) -> str | None:
        return self.values.get(name)

    @property
    def is_blank(self) -> bool:
        return not self.values

    def as_context(self) -> dict[str, Any]:
        """Build the template rendering context.

        Every column whose name is a valid identifier is exposed as a
        top-level variable (``{{ Name }}``). The full mapping is available as
        ``columns`` (and ``column``) for names with spaces or punctuation:
        ``{{ columns['First Name'] }}``. A sheet column literally named
        ``columns`` or ``column`` takes precedence over the alias.
        """
        mapping = dict(self.values)
        context: dict[str, Any] = {"columns": mapping, "column": mapping}
        context.update((k, v) for k, v in self.values.items() if k.isidentifier())
        return context

    def __str__(self) -> str:
        body = ", ".join(
            f'{{ "column": "{k}" , "value": "{v}" }}' for k, v in self.values.items()
        )
        return f'"row": {{{body}}}'
