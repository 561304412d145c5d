from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Configuration loading and settings resolution.

Sources, highest precedence first:
1. command line options
2. YAML config file (``--config`` or ``config/docxgen.yml`` when present)
3. environment (``DOCXGEN_OUTPUT_DIR``; ``.env`` is loaded by the CLI)
4. built-in defaults

The YAML file is validated against config_schema.json shipped next to this
module; unknown keys are rejected.
"""

__all__ = [
    "ConfigError",
    "GenerationSettings",
    "DEFAULT_CONFIG_PATH",
    "ON_ROW_ERROR_CHOICES",
    "default_output_dir",
    "load_config",
    "resolve_settings",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/docxgen.yml")
OUTPUT_DIR_ENV = "DOCXGEN_OUTPUT_DIR"
ON_ROW_ERROR_CHOICES = ("abort", "skip")

_REQUIRED = ("template_file", "data_file", "entity_column")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class GenerationSettings:
    template_file: Path
    data_file: Path
    entity_column: str
    output_dir: Path
    sheet: str | None = None  # None = 先頭シート
    replace: bool = False
    first_row_only: bool = False
    on_row_error: str = "abort"  # abort | skip
    strict_placeholders: bool = False
    extension: str = ".docx"
    error_log_dir: Path = Path("./logs")


def default_output_dir(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    value = env.get(OUTPUT_DIR_ENV)
    if value:
        return Path(value)
    return Path(tempfile.gettempdir()) / "output"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> dict[str, Any]:
    """Read and validate a YAML config file, returning its settings."""
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)
    return data


def resolve_settings(
    cli_values: Mapping[str, Any],
    file_values: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> GenerationSettings:
    """Merge CLI values (None = not given) over config file values.

    Raises:
        ConfigError: a required setting is missing or a value is invalid
    """
    file_values = file_values or {}

    def pick(key: str, default: Any = None) -> Any:
        value = cli_values.get(key)
        if value is not None:
            return value
        value = file_values.get(key)
        return default if value is None else value

    missing = [key for key in _REQUIRED if not pick(key)]
    if missing:
        options = ", ".join("--" + key.replace("_", "-") for key in missing)
        raise ConfigError(f"missing required setting(s): {options}")

    on_row_error = pick("on_row_error", "abort")
    if on_row_error not in ON_ROW_ERROR_CHOICES:
        raise ConfigError(f"on_row_error must be one of {ON_ROW_ERROR_CHOICES}, got {on_row_error!r}")

    output_dir = pick("output_dir")
    sheet = pick("sheet")
    return GenerationSettings(
        template_file=Path(pick("template_file")),
        data_file=Path(pick("data_file")),
        entity_column=str(pick("entity_column")),
        output_dir=Path(output_dir) if output_dir else default_output_dir(environ),
        sheet=sheet if sheet and str(sheet).strip() else None,
        replace=bool(pick("replace", False)),
        first_row_only=bool(pick("first_row_only", False)),
        on_row_error=on_row_error,
        strict_placeholders=bool(pick("strict_placeholders", False)),
        extension=str(pick("extension", ".docx")),
        error_log_dir=Path(pick("error_log_dir", "./logs")),
    )
