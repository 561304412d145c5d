from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for isolated row failures.

When the pipeline runs with ``on_row_error=skip`` every failed row is written
as one JSON line to the error log. The key set is fixed; consumers may rely
on it.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: data file name
        sheet: worksheet title
        row: sheet row number (1-based). -1 when the row is unknown
        entity: entity column value of the row ("" when unknown)
        error_type: error classification in UPPER_SNAKE_CASE
        message: error description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int
    entity: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, entity: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            entity=entity,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
