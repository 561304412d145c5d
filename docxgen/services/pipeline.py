from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import GenerationSettings
from ..excel.reader import SheetData, read_rows
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.processing_result import RowOutcome, RowStatus, RunResult
from ..models.row import Row
from .output_policy import OutputAction, decide_output
from .progress import ProgressTracker
from .stamper import DocxStamper, StampError

"""Generation pipeline: one document per eligible spreadsheet row.

Flow:
1. load workbook -> select sheet -> read rows (all rows in memory)
2. read template bytes once
3. per row: output policy decision -> stamp -> exclusive write
4. aggregate RowOutcome values into a RunResult

Row failures (stamping or writing) either abort the run (on_row_error=abort,
the default) or are logged, written to the error log and skipped
(on_row_error=skip). Load, sheet and template errors are always fatal.
"""

__all__ = [
    "GenerationError",
    "run_generation",
    "generate_rows",
]

logger = logging.getLogger(__name__)

_SKIP_STATUS = {
    OutputAction.SKIP_BLANK_ROW: RowStatus.SKIPPED_BLANK,
    OutputAction.SKIP_BLANK_KEY: RowStatus.SKIPPED_BLANK_KEY,
    OutputAction.SKIP_UNSAFE_KEY: RowStatus.SKIPPED_BLANK_KEY,
    OutputAction.SKIP_EXISTING: RowStatus.SKIPPED_EXISTING,
}


class GenerationError(Exception):
    """Fatal error that stops the generation run."""


class _RowFailure(Exception):
    def __init__(self, error_type: str, message: str) -> None:
        super().__init__(message)
        self.error_type = error_type


def _read_template(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise GenerationError(f"cannot read template {path}: {e}") from e


def _write_document(row: Row, stamper: DocxStamper, template_bytes: bytes, output: Path) -> None:
    logger.info("Generating output file '%s'. %s", output, row)
    try:
        document = stamper.stamp(template_bytes, row)
    except StampError as e:
        raise _RowFailure("STAMP_ERROR", str(e)) from e
    try:
        # "xb": 既存ファイルは上書きしない (replace 時は policy 側で削除済み)
        with output.open("xb") as f:
            f.write(document)
    except OSError as e:
        raise _RowFailure("WRITE_ERROR", f"cannot write {output}: {e}") from e


def generate_rows(
    sheet: SheetData,
    settings: GenerationSettings,
    template_bytes: bytes,
    stamper: DocxStamper,
    error_log: ErrorLogBuffer | None = None,
) -> tuple[list[RowOutcome], bool]:
    """Process already-read rows; returns (outcomes, stopped_early).

    Raises:
        GenerationError: a row failed and on_row_error is "abort"
        OutputPolicyError: output dir / existing file could not be prepared
    """
    isolate = settings.on_row_error == "skip"
    outcomes: list[RowOutcome] = []
    stopped_early = False

    with ProgressTracker(len(sheet.rows)) as progress:
        for row in sheet.rows:
            progress.start_row(row.column(settings.entity_column))
            decision = decide_output(
                row,
                settings.entity_column,
                settings.output_dir,
                settings.replace,
                settings.extension,
            )
            if not decision.generate:
                outcomes.append(RowOutcome(row.row_number, _SKIP_STATUS[decision.action], decision.path))
                progress.finish_row()
                continue

            if decision.path is None:
                raise GenerationError(f"row {row.row_number}: no output path for generated document")
            try:
                _write_document(row, stamper, template_bytes, decision.path)
            except _RowFailure as e:
                if not isolate:
                    raise GenerationError(f"row {row.row_number} ({decision.entity}): {e}") from e
                logger.error("row %d (%s) failed: %s", row.row_number, decision.entity, e)
                outcomes.append(RowOutcome(row.row_number, RowStatus.FAILED, decision.path, str(e)))
                if error_log is not None:
                    error_log.append(
                        ErrorRecord.create(
                            file=settings.data_file.name,
                            sheet=sheet.sheet_name,
                            row=row.row_number,
                            entity=decision.entity or "",
                            error_type=e.error_type,
                            message=str(e),
                        )
                    )
            else:
                outcomes.append(RowOutcome(row.row_number, RowStatus.GENERATED, decision.path))
            finally:
                progress.finish_row()

            if settings.first_row_only:
                stopped_early = True
                logger.debug("first-row-only: stopping after row %d", row.row_number)
                break

            progress.set_postfix(rows=len(outcomes))

    return outcomes, stopped_early


def run_generation(settings: GenerationSettings, stamper: DocxStamper | None = None) -> RunResult:
    """Run the whole generation for the configured data file and template.

    Raises:
        LoadError: data file unreadable / malformed
        SheetNotFoundError: requested sheet missing
        GenerationError: template unreadable, or a row failed in abort mode
        OutputPolicyError: output directory / existing output not writable
    """
    start_time = datetime.now(UTC)
    logger.info(
        "Generating docx files. Data file = %s, Template = %s, Output Directory = %s",
        settings.data_file,
        settings.template_file,
        settings.output_dir,
    )
    if stamper is None:
        stamper = DocxStamper(strict_placeholders=settings.strict_placeholders)

    sheet = read_rows(settings.data_file, settings.sheet)
    template_bytes = _read_template(settings.template_file)
    error_log = ErrorLogBuffer(settings.error_log_dir)

    try:
        outcomes, stopped_early = generate_rows(sheet, settings, template_bytes, stamper, error_log)
    finally:
        path = error_log.flush()
        if path is not None:
            logger.warning("row errors written to %s", path)

    end_time = datetime.now(UTC)
    return RunResult.from_outcomes(outcomes, start_time, end_time, stopped_early)
