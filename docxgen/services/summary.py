from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering for a generation run."""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a RunResult.

    Format:
    SUMMARY rows={n} generated={g} skipped_blank={a} skipped_blank_key={b}
    skipped_existing={c} failed={f} elapsed_sec={s}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     generated=3, skipped_blank=1, skipped_blank_key=0, skipped_existing=2,
        ...     failed=0, start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY rows=6 generated=3 skipped_blank=1 skipped_blank_key=0 skipped_existing=2 failed=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY rows={result.total_rows} "
        f"generated={result.generated} "
        f"skipped_blank={result.skipped_blank} "
        f"skipped_blank_key={result.skipped_blank_key} "
        f"skipped_existing={result.skipped_existing} "
        f"failed={result.failed} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
