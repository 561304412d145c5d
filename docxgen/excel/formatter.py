from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

"""Displayed-value formatting for spreadsheet cells.

Templates receive cell texts exactly as a spreadsheet application shows them,
not the raw typed values openpyxl returns: ``42.0`` with format ``General``
is ``42``, ``0.256`` with ``0.0%`` is ``25.6%``, a datetime with
``dd.mm.yyyy`` is ``03.02.2024``.

Only the subset of the number format language found in real data sheets is
handled: digit placeholders (0 # ?), thousands separators, percent,
scientific notation, quoted / escaped literals, bracketed colors and currency
tags, and the usual date/time tokens. Anything else falls back to the
General rendering.
"""

__all__ = [
    "format_cell_value",
    "format_value",
]

GENERAL = "General"

_SECTION_SPLIT = re.compile(r';(?=(?:[^"]*"[^"]*")*[^"]*$)')
_BRACKET = re.compile(r"\[([^\]]*)\]")
_DATE_TOKEN = re.compile(
    r'(?i)(yyyy|yy|mmmmm|mmmm|mmm|mm|m|dddd|ddd|dd|d|hh|h|ss|s|am/pm|a/p|\.0+|"[^"]*"|\\.|.)'
)
_DATE_PARTS = ("y", "m", "d", "h", "s")
_PLACEHOLDERS = "0#?"


def format_cell_value(cell: Any) -> str:
    """Render an openpyxl cell as displayed text."""
    return format_value(cell.value, getattr(cell, "number_format", GENERAL) or GENERAL)


def format_value(value: Any, number_format: str = GENERAL) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return value
    if isinstance(value, timedelta):
        return _format_elapsed(value)
    if isinstance(value, (datetime, date, time)):
        return _format_datetime(_as_datetime(value), number_format)
    if isinstance(value, (int, float, Decimal)):
        return _format_number(value, number_format)
    return str(value)


# ---------------------------------------------------------------------------
# numbers
# ---------------------------------------------------------------------------

def _format_general(value: int | float | Decimal) -> str:
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        value = float(value)
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    text = f"{value:.10g}"
    if "e" in text:
        mantissa, exp = text.split("e")
        exponent = int(exp)
        return f"{mantissa}E{'+' if exponent >= 0 else '-'}{abs(exponent):02d}"
    return text


def _pick_section(value: int | float | Decimal, number_format: str) -> tuple[str, bool]:
    """Return (section, negative) for the value.

    A second section formats negatives without the sign (the section carries
    its own sign or parentheses); a third one formats zero.
    """
    sections = _SECTION_SPLIT.split(number_format)
    negative = value < 0
    if negative and len(sections) > 1 and sections[1]:
        return sections[1], False
    if value == 0 and len(sections) > 2 and sections[2]:
        return sections[2], False
    return sections[0], negative


def _strip_brackets(section: str) -> str:
    def repl(match: re.Match[str]) -> str:
        inner = match.group(1)
        # [$€-407] -> €
        if inner.startswith("$"):
            return '"' + inner[1:].split("-", 1)[0] + '"'
        return ""
    return _BRACKET.sub(repl, section)


def _tokenize_number_format(section: str) -> list[tuple[str, str]]:
    """Split a section into ("lit", text) and ("fmt", char) tokens."""
    tokens: list[tuple[str, str]] = []
    i = 0
    while i < len(section):
        ch = section[i]
        if ch == '"':
            end = section.find('"', i + 1)
            end = len(section) if end == -1 else end
            tokens.append(("lit", section[i + 1:end]))
            i = end + 1
            continue
        if ch == "\\" and i + 1 < len(section):
            tokens.append(("lit", section[i + 1]))
            i += 2
            continue
        if ch == "_" and i + 1 < len(section):
            tokens.append(("lit", " "))
            i += 2
            continue
        if ch == "*" and i + 1 < len(section):
            i += 2
            continue
        if ch in _PLACEHOLDERS or ch in ".,%":
            tokens.append(("fmt", ch))
        elif ch in "Ee" and i + 1 < len(section) and section[i + 1] in "+-":
            tokens.append(("fmt", ch + section[i + 1]))
            i += 2
            continue
        else:
            tokens.append(("lit", ch))
        i += 1
    return tokens


def _format_number(value: int | float | Decimal, number_format: str) -> str:
    if number_format.strip() in ("", GENERAL, "@"):
        return _format_general(value)

    section, negative = _pick_section(value, number_format)
    section = _strip_brackets(section)
    magnitude = Decimal(str(abs(value)))

    if GENERAL.lower() in section.lower():
        idx = section.lower().index(GENERAL.lower())
        prefix = _literal_text(section[:idx])
        suffix = _literal_text(section[idx + len(GENERAL):])
        text = _format_general(abs(value))
        return f"{'-' if negative else ''}{prefix}{text}{suffix}"

    tokens = _tokenize_number_format(section)
    digit_positions = [i for i, (kind, ch) in enumerate(tokens) if kind == "fmt" and ch in _PLACEHOLDERS]
    if not digit_positions:
        # 数値プレースホルダ無し: リテラルのみ表示
        if section.strip() == "@" or not section.strip():
            return _format_general(value)
        return "".join(ch for _, ch in tokens)

    first, last = digit_positions[0], digit_positions[-1]
    pattern = [ch for kind, ch in tokens[first:last + 1] if kind == "fmt"]
    prefix = "".join(ch if kind == "lit" or ch == "%" else "" for kind, ch in tokens[:first])
    suffix = "".join(ch if kind == "lit" or ch == "%" else "" for kind, ch in tokens[last + 1:])

    if any(ch == "%" for kind, ch in tokens if kind == "fmt"):
        magnitude *= 100

    if any(ch.upper() in ("E+", "E-") for ch in pattern):
        body = _format_scientific(magnitude, pattern)
    else:
        body = _format_fixed(magnitude, pattern)

    sign = "-" if negative and body.strip("0.,") else ""
    return f"{sign}{prefix}{body}{suffix}"


def _format_fixed(magnitude: Decimal, pattern: list[str]) -> str:
    if "." in pattern:
        point = pattern.index(".")
        int_part, frac_part = pattern[:point], pattern[point + 1:]
    else:
        int_part, frac_part = pattern, []
    max_decimals = sum(1 for ch in frac_part if ch in _PLACEHOLDERS)
    min_decimals = sum(1 for ch in frac_part if ch == "0")
    min_int_digits = sum(1 for ch in int_part if ch == "0")
    grouping = "," in int_part

    quantum = Decimal(1).scaleb(-max_decimals)
    rounded = magnitude.quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{rounded:.{max_decimals}f}"
    int_digits, _, frac_digits = text.partition(".")

    while len(frac_digits) > min_decimals and frac_digits.endswith("0"):
        frac_digits = frac_digits[:-1]

    if int_digits == "0" and min_int_digits == 0:
        int_digits = ""
    int_digits = int_digits.zfill(min_int_digits)
    if grouping and int_digits:
        int_digits = f"{int(int_digits):,}".rjust(min_int_digits, "0")

    if "." in pattern and (frac_digits or max_decimals):
        return f"{int_digits}.{frac_digits}"
    return int_digits


def _format_scientific(magnitude: Decimal, pattern: list[str]) -> str:
    e_index = next(i for i, ch in enumerate(pattern) if ch.upper() in ("E+", "E-"))
    mantissa_pattern = pattern[:e_index]
    exp_digits = max(1, sum(1 for ch in pattern[e_index + 1:] if ch in _PLACEHOLDERS))
    decimals = 0
    if "." in mantissa_pattern:
        decimals = sum(1 for ch in mantissa_pattern[mantissa_pattern.index(".") + 1:] if ch in _PLACEHOLDERS)
    mantissa, exp = f"{magnitude:.{decimals}E}".split("E")
    exponent = int(exp)
    sign = "-" if exponent < 0 else ("+" if pattern[e_index].endswith("+") else "")
    return f"{mantissa}E{sign}{abs(exponent):0{exp_digits}d}"


def _literal_text(fragment: str) -> str:
    return "".join(ch for _, ch in _tokenize_number_format(fragment))


# ---------------------------------------------------------------------------
# dates and times
# ---------------------------------------------------------------------------

def _as_datetime(value: datetime | date | time) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    # 時刻のみのセルは Excel の基準日 (1899-12-31) 扱い
    return datetime.combine(date(1899, 12, 31), value)


def _format_elapsed(value: timedelta) -> str:
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{sign}{hours}:{minutes:02d}:{seconds:02d}"


def _format_datetime(value: datetime, number_format: str) -> str:
    section = _SECTION_SPLIT.split(number_format)[0]
    section = _BRACKET.sub("", section)
    tokens = _DATE_TOKEN.findall(section)
    kinds = [_date_kind(tok) for tok in tokens]
    if not any(kind in _DATE_PARTS for kind in kinds):
        if value.time() == time():
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")

    twelve_hour = any(tok.lower() in ("am/pm", "a/p") for tok in tokens)
    out: list[str] = []
    for i, tok in enumerate(tokens):
        kind = kinds[i]
        low = tok.lower()
        if kind == "m":
            is_minute = _neighbour_kind(kinds, i, -1) == "h" or _neighbour_kind(kinds, i, 1) == "s"
            if is_minute and len(low) <= 2:
                out.append(f"{value.minute:02d}" if len(low) == 2 else str(value.minute))
            else:
                out.append(_render_month(value, len(low)))
        elif kind == "y":
            out.append(f"{value.year:04d}" if len(low) == 4 else f"{value.year % 100:02d}")
        elif kind == "d":
            out.append(_render_day(value, len(low)))
        elif kind == "h":
            hour = value.hour
            if twelve_hour:
                hour = hour % 12 or 12
            out.append(f"{hour:02d}" if len(low) == 2 else str(hour))
        elif kind == "s":
            out.append(f"{value.second:02d}" if len(low) == 2 else str(value.second))
        elif kind == "frac":
            digits = len(tok) - 1
            out.append("." + f"{value.microsecond:06d}"[:digits])
        elif low == "am/pm":
            out.append("AM" if value.hour < 12 else "PM")
        elif low == "a/p":
            out.append("A" if value.hour < 12 else "P")
        elif tok.startswith('"'):
            out.append(tok[1:-1])
        elif tok.startswith("\\"):
            out.append(tok[1:])
        else:
            out.append(tok)
    return "".join(out)


def _date_kind(token: str) -> str:
    low = token.lower()
    if low in ("am/pm", "a/p"):
        return "ampm"
    if low.startswith(".") and len(low) > 1 and set(low[1:]) == {"0"}:
        return "frac"
    if low and low[0] in _DATE_PARTS and set(low) == {low[0]}:
        return low[0]
    return "lit"


def _neighbour_kind(kinds: list[str], index: int, step: int) -> str | None:
    i = index + step
    while 0 <= i < len(kinds):
        if kinds[i] in _DATE_PARTS:
            return kinds[i]
        i += step
    return None


def _render_month(value: datetime, width: int) -> str:
    if width == 1:
        return str(value.month)
    if width == 2:
        return f"{value.month:02d}"
    if width == 3:
        return value.strftime("%b")
    if width == 5:
        return value.strftime("%B")[0]
    return value.strftime("%B")


def _render_day(value: datetime, width: int) -> str:
    if width == 1:
        return str(value.day)
    if width == 2:
        return f"{value.day:02d}"
    if width == 3:
        return value.strftime("%a")
    return value.strftime("%A")
