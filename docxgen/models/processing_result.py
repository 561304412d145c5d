from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

"""Per-row outcome and run result models for the docx generator.

Each row handled by the pipeline ends in exactly one RowStatus. The pipeline
collects the tagged RowOutcome values into a RunResult which feeds the
SUMMARY line and the CLI exit code.
"""


class RowStatus(Enum):
    """Final state of a single row.

    - GENERATED: document written
    - SKIPPED_BLANK: row had no populated cells
    - SKIPPED_BLANK_KEY: entity column empty / whitespace / absent, or not a
      usable file name (path separator, "." or "..")
    - SKIPPED_EXISTING: output already present and replace disabled
    - FAILED: stamping or writing failed (only recorded when rows are isolated)
    """
    GENERATED = "generated"
    SKIPPED_BLANK = "skipped_blank"
    SKIPPED_BLANK_KEY = "skipped_blank_key"
    SKIPPED_EXISTING = "skipped_existing"
    FAILED = "failed"


@dataclass(frozen=True)
class RowOutcome:
    row_number: int
    status: RowStatus
    output_path: Path | None = None
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated result of one generation run."""
    generated: int
    skipped_blank: int
    skipped_blank_key: int
    skipped_existing: int
    failed: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    stopped_early: bool = False  # first-row-only で打ち切った場合 True
    outcomes: list[RowOutcome] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return (
            self.generated
            + self.skipped_blank
            + self.skipped_blank_key
            + self.skipped_existing
            + self.failed
        )

    @staticmethod
    def from_outcomes(
        outcomes: list[RowOutcome],
        start_time: datetime,
        end_time: datetime,
        stopped_early: bool = False,
    ) -> RunResult:
        counts = {status: 0 for status in RowStatus}
        for outcome in outcomes:
            counts[outcome.status] += 1
        return RunResult(
            generated=counts[RowStatus.GENERATED],
            skipped_blank=counts[RowStatus.SKIPPED_BLANK],
            skipped_blank_key=counts[RowStatus.SKIPPED_BLANK_KEY],
            skipped_existing=counts[RowStatus.SKIPPED_EXISTING],
            failed=counts[RowStatus.FAILED],
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - start_time).total_seconds(),
            stopped_early=stopped_early,
            outcomes=list(outcomes),
        )
