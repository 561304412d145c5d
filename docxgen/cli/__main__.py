from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from docxgen import __version__
from docxgen.config.loader import (
    DEFAULT_CONFIG_PATH,
    ON_ROW_ERROR_CHOICES,
    ConfigError,
    load_config,
    resolve_settings,
)
from docxgen.excel.reader import LoadError, SheetNotFoundError, read_rows, sheet_preview
from docxgen.logging.init import apply_verbosity, log_summary, setup_logging, verbosity_levels
from docxgen.services.output_policy import OutputPolicyError
from docxgen.services.pipeline import GenerationError, run_generation
from docxgen.services.summary import render_summary_line

"""CLI entrypoint.

Generates one docx per spreadsheet row:

    docxgen -t template.docx -d data.xlsx -c ParticipantId -o out/ -v

Exit codes: 0 completed, 1 fatal error, 2 completed with failed rows
(only possible with --on-row-error skip).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path) -> None:
    """Load .env without overriding variables already set in the process."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="docxgen",
        description="Generates docx files based on an xlsx for data and a template in docx",
    )
    p.add_argument("-t", "--template-file", type=Path, help="template file")
    p.add_argument("-d", "--data-file", type=Path, help="data file")
    p.add_argument(
        "-r", "--replace", action=argparse.BooleanOptionalAction, default=None,
        help="replace output files if they exist (default: no)",
    )
    p.add_argument(
        "-1", "--first-row-only", action=argparse.BooleanOptionalAction, default=None,
        help="only generate one document (default: no)",
    )
    p.add_argument("-s", "--sheet", help="name of the sheet to use (default: first sheet of workbook)")
    p.add_argument("-c", "--entity-column", help="entity column (name), used to name the output file")
    p.add_argument("-o", "--output-dir", type=Path, help="dir to output the files (default: <tmp>/output)")
    p.add_argument("--config", type=Path, help=f"YAML config file (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument(
        "--on-row-error", choices=ON_ROW_ERROR_CHOICES, default=None,
        help="abort the run or skip the row when a document fails (default: abort)",
    )
    p.add_argument(
        "--strict-placeholders", action="store_true", default=None,
        help="fail a row when a template placeholder has no value",
    )
    p.add_argument("--extension", help="output file extension (default: .docx)")
    p.add_argument("--error-log-dir", type=Path, help="directory for row error logs (default: ./logs)")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet header & first rows then exit")
    p.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Verbose mode. Multiple -v options increase the verbosity.",
    )
    p.add_argument("-q", "--quiet", action="count", default=0, help="Decrease verbosity.")
    p.add_argument("--version", action="version", version=f"docxgen {__version__}")
    return p.parse_args(argv)


def _cli_values(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "template_file": args.template_file,
        "data_file": args.data_file,
        "sheet": args.sheet,
        "entity_column": args.entity_column,
        "output_dir": args.output_dir,
        "replace": args.replace,
        "first_row_only": args.first_row_only,
        "on_row_error": args.on_row_error,
        "strict_placeholders": args.strict_placeholders,
        "extension": args.extension,
        "error_log_dir": args.error_log_dir,
    }


def _config_file_values(args: argparse.Namespace) -> dict[str, Any]:
    if args.config is not None:
        return load_config(args.config)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return {}


def _inspect_data(args: argparse.Namespace, file_values: dict[str, Any]) -> int:
    """Print header & first rows of the selected sheet (only the data file is required)."""
    data_file = args.data_file or file_values.get("data_file")
    if not data_file:
        raise ConfigError("missing required setting(s): --data-file")
    data_file = Path(data_file)
    sheet = read_rows(data_file, args.sheet or file_values.get("sheet"))
    print(f"FILE: {data_file.name}")
    print(f"SHEET: {sheet.sheet_name} cols={sheet.columns} rows={len(sheet.rows)}")
    preview = sheet_preview(sheet)
    if not preview.empty:
        print(preview.to_string(index=False))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # argv=[] (テストからの呼び出し) で sys.argv が混入しないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    apply_verbosity(verbosity_levels(args.verbose - args.quiet))
    _load_env_file(Path(".env"))

    try:
        file_values = _config_file_values(args)
        if args.inspect_data:
            return _inspect_data(args, file_values)
        settings = resolve_settings(_cli_values(args), file_values)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    except (LoadError, SheetNotFoundError) as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL

    try:
        result = run_generation(settings)
    except LoadError as e:
        logger.error(f"load: {e}")
        return EXIT_FATAL
    except SheetNotFoundError as e:
        logger.error(f"sheet: {e}")
        return EXIT_FATAL
    except OutputPolicyError as e:
        logger.error(f"output: {e}")
        return EXIT_FATAL
    except GenerationError as e:
        logger.error(f"generation: {e}")
        return EXIT_FATAL

    # log_summary が "SUMMARY " を付与する
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
