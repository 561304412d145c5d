from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

"""Logging initialization with labeled prefixes.

All output goes to stdout as ``LABEL message`` lines
(DEBUG|INFO|WARN|ERROR|CRITICAL|SUMMARY). Modules log through
``logging.getLogger(__name__)``; records propagate up to the ``docxgen``
logger configured here.

Verbosity is a plain function of the -v/-q count (verbosity_levels) and is
applied separately (apply_verbosity), so the mapping can be tested without
touching logger state.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "LIBRARY_LOGGERS",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "VerbosityLevels",
    "apply_verbosity",
    "get_logger",
    "log_summary",
    "reset_logging",
    "setup_logging",
    "verbosity_levels",
]

APP_LOGGER_NAME = "docxgen"
LIBRARY_LOGGERS = ("docxtpl", "docx", "openpyxl", "jinja2")

# SUMMARY は WARNING より上: 既定の verbosity でも集計行を出す
SUMMARY_LEVEL = 35

# Global logger instance
_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter producing ``LABEL message`` lines."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        message = f"{level_label} {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


@dataclass(frozen=True)
class VerbosityLevels:
    app: int
    libraries: int


# count -> (docxgen, libraries). Counts beyond the table clamp to its ends.
_VERBOSITY_TABLE: dict[int, VerbosityLevels] = {
    -1: VerbosityLevels(app=logging.ERROR, libraries=logging.ERROR),
    0: VerbosityLevels(app=logging.WARNING, libraries=logging.ERROR),
    1: VerbosityLevels(app=logging.INFO, libraries=logging.ERROR),
    2: VerbosityLevels(app=logging.DEBUG, libraries=logging.ERROR),
    3: VerbosityLevels(app=logging.DEBUG, libraries=logging.INFO),
    4: VerbosityLevels(app=logging.DEBUG, libraries=logging.DEBUG),
}


def verbosity_levels(count: int) -> VerbosityLevels:
    """Map a verbosity count (number of -v minus number of -q) to log levels."""
    clamped = max(min(_VERBOSITY_TABLE), min(max(_VERBOSITY_TABLE), count))
    return _VERBOSITY_TABLE[clamped]


def setup_logging() -> logging.Logger:
    """Configure the application logger once and return it.

    Default level is WARNING (verbosity 0); the CLI calls apply_verbosity
    after parsing its flags.
    """
    global _logger

    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(logging.WARNING)

    # Clear any existing handlers to avoid duplication
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate output
    logger.propagate = False

    _logger = logger
    return logger


def apply_verbosity(levels: VerbosityLevels) -> None:
    """Set application and third-party logger levels."""
    get_logger().setLevel(levels.app)
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(levels.libraries)


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _logger = None
