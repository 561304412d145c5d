"""Domain models for the docx generator.

Rows read from the data sheet, per-row outcomes and the aggregated run
result, and the error records written for isolated row failures.
"""

from .error_record import ErrorRecord
from .processing_result import RowOutcome, RowStatus, RunResult
from .row import Row

__all__ = [
    # Sheet data
    "Row",
    # Processing results
    "RowOutcome",
    "RowStatus",
    "RunResult",
    "ErrorRecord",
]
