from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..models.row import Row

"""Output path policy: decides per row whether a document is generated.

Order of checks:
1. blank row (no populated cells)       -> skip (DEBUG)
2. blank entity column value            -> skip (WARNING, row contents logged)
   entity value with a path separator    -> skip (WARNING), counted as blank key
3. output dir created (idempotent)
4. replace=True  -> existing file removed, generate
   replace=False -> existing file kept, skip (INFO)
"""

__all__ = [
    "DEFAULT_EXTENSION",
    "OutputAction",
    "OutputDecision",
    "OutputPolicyError",
    "decide_output",
    "normalize_extension",
]

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".docx"

# entity 値はファイル名としてのみ使う: output_dir の外へ出る値は拒否
_PATH_SEPARATORS = ("/", "\\")
_RESERVED_NAMES = (".", "..")


class OutputPolicyError(Exception):
    """Raised when the output directory or an existing output cannot be prepared."""


class OutputAction(Enum):
    GENERATE = "generate"
    SKIP_BLANK_ROW = "skip_blank_row"
    SKIP_BLANK_KEY = "skip_blank_key"
    SKIP_UNSAFE_KEY = "skip_unsafe_key"
    SKIP_EXISTING = "skip_existing"


@dataclass(frozen=True)
class OutputDecision:
    action: OutputAction
    path: Path | None = None
    entity: str | None = None

    @property
    def generate(self) -> bool:
        return self.action is OutputAction.GENERATE


def normalize_extension(extension: str) -> str:
    ext = extension.strip()
    if not ext:
        return DEFAULT_EXTENSION
    return ext if ext.startswith(".") else f".{ext}"


def decide_output(
    row: Row,
    entity_column: str,
    output_dir: Path,
    replace: bool,
    extension: str = DEFAULT_EXTENSION,
) -> OutputDecision:
    """Decide what to do with a row and prepare its output path.

    Raises:
        OutputPolicyError: output dir creation or existing file removal failed
    """
    if row.is_blank:
        logger.debug("Skipping row %d because it's empty.", row.row_number)
        return OutputDecision(OutputAction.SKIP_BLANK_ROW)

    entity = row.column(entity_column)
    if entity is None or not entity.strip():
        logger.warning("Skipping row as column '%s' is empty. - %s", entity_column, row)
        return OutputDecision(OutputAction.SKIP_BLANK_KEY)

    if any(sep in entity for sep in _PATH_SEPARATORS) or entity.strip() in _RESERVED_NAMES:
        logger.warning(
            "Skipping row as column '%s' value '%s' is not a valid file name. - %s",
            entity_column,
            entity,
            row,
        )
        return OutputDecision(OutputAction.SKIP_UNSAFE_KEY, entity=entity)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputPolicyError(f"cannot create output directory {output_dir}: {e}") from e

    path = output_dir / f"{entity}{normalize_extension(extension)}"
    if replace:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise OutputPolicyError(f"cannot remove existing output {path}: {e}") from e
    elif path.exists():
        logger.info("File %s exists.. skipping.", path)
        return OutputDecision(OutputAction.SKIP_EXISTING, path=path, entity=entity)

    return OutputDecision(OutputAction.GENERATE, path=path, entity=entity)
