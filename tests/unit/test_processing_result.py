from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from docxgen.models.processing_result import RowOutcome, RowStatus, RunResult

START = datetime(2025, 1, 1, tzinfo=UTC)


def test_from_outcomes_counts_each_status():
    outcomes = [
        RowOutcome(2, RowStatus.GENERATED, Path("out/P1.docx")),
        RowOutcome(3, RowStatus.SKIPPED_BLANK),
        RowOutcome(4, RowStatus.SKIPPED_BLANK_KEY),
        RowOutcome(5, RowStatus.SKIPPED_EXISTING, Path("out/P4.docx")),
        RowOutcome(6, RowStatus.FAILED, Path("out/P5.docx"), "boom"),
        RowOutcome(7, RowStatus.GENERATED, Path("out/P6.docx")),
    ]
    result = RunResult.from_outcomes(outcomes, START, START + timedelta(seconds=3))

    assert result.generated == 2
    assert result.skipped_blank == 1
    assert result.skipped_blank_key == 1
    assert result.skipped_existing == 1
    assert result.failed == 1
    assert result.total_rows == len(outcomes)
    assert result.elapsed_seconds == pytest.approx(3.0)
    assert result.outcomes == outcomes
    assert result.stopped_early is False


def test_from_outcomes_copies_list():
    outcomes = [RowOutcome(2, RowStatus.GENERATED)]
    result = RunResult.from_outcomes(outcomes, START, START, stopped_early=True)
    outcomes.append(RowOutcome(3, RowStatus.FAILED))

    assert result.total_rows == 1
    assert result.stopped_early is True


def test_empty_run():
    result = RunResult.from_outcomes([], START, START)
    assert result.total_rows == 0
    assert result.elapsed_seconds == 0
