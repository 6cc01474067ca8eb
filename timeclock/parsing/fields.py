from __future__ import annotations

import math
import re
import warnings
from datetime import date, datetime, time, timedelta
from typing import Any

import pandas as pd

from ..models.time_value import Time

"""Field parsers for raw spreadsheet cells.

Cells arrive heterogeneous: pandas gives Timestamp / datetime.time for
formatted cells, ints and floats for numeric ones, strings for the rest.
Every parser here returns None on failure and never raises; downstream
classification treats a missing value as its own case.
"""

__all__ = [
    "parse_date",
    "parse_time",
    "parse_edit_time",
    "parse_leave_hours",
    "parse_leave_hours_strict",
    "format_time",
    "cell_text",
]

# 엑셀 시리얼 날짜 기준일 (1900 윤년 버그 보정 포함)
EXCEL_EPOCH = date(1899, 12, 30)

_SERIAL_RE = re.compile(r"^\d{5}$")

# (pattern, group order) - 순서대로 시도, 처음 매칭된 패턴만 사용
_DATE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), "ymd"),    # 2025-09-01
    (re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"), "ymd"),    # 2025/09/01
    (re.compile(r"^(\d{4})\.(\d{1,2})\.(\d{1,2})$"), "ymd"),  # 2025.09.01
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), "mdy"),    # 09/01/2025
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), "mdy"),    # 09-01-2025
    (re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$"), "mdy"),  # 09.01.2025
    (re.compile(r"^(\d{4})(\d{2})(\d{2})$"), "ymd"),          # 20250901
    (re.compile(r"^(\d{2})(\d{2})(\d{2})$"), "yymd"),         # 250901
]

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DAY_FRACTION_RE = re.compile(r"^0?\.\d+$|^\d+\.\d+$")
_FOUR_DIGIT_RE = re.compile(r"^(\d{2})(\d{2})$")
_THREE_DIGIT_RE = re.compile(r"^(\d)(\d{2})$")
_EDIT_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_LEADING_NUMBER_RE = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)")


def cell_text(value: Any) -> str:
    """Render a raw cell as trimmed text ('' for empty cells).

    Integral floats lose their '.0' so 45901.0 reads like the sheet shows it.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _is_blank(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return isinstance(value, str) and value.strip() == ""


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(value: Any) -> date | None:
    """Parse a date cell. See module docstring for the failure contract.

    Resolution order, first match wins:
    1. structured datetime/date value
    2. 5-digit spreadsheet serial (days since 1899-12-30)
    3. literal patterns (Y-M-D family, M/D/Y family, YYYYMMDD, YYMMDD)
    4. generic parse via pandas, accepted only if it yields a real date
    """
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = cell_text(value)

    if _SERIAL_RE.match(text):
        return EXCEL_EPOCH + timedelta(days=int(text))

    for pattern, order in _DATE_PATTERNS:
        m = pattern.match(text)
        if not m:
            continue
        a, b, c = (int(g) for g in m.groups())
        if order == "ymd":
            return _safe_date(a, b, c)
        if order == "mdy":
            return _safe_date(c, a, b)
        # YYMMDD -> 20YY
        return _safe_date(2000 + a, b, c)

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def _valid_time(hours: int, minutes: int) -> Time | None:
    if 0 <= hours < 24 and 0 <= minutes < 60:
        return Time(hours=hours, minutes=minutes)
    return None


def _from_day_fraction(fraction: float) -> Time | None:
    # 0.375 -> 09:00. 날짜 시리얼(45901.375)이면 소수부만 사용
    fraction = fraction - math.floor(fraction) if fraction >= 1 else fraction
    total = fraction * 24
    hours = math.floor(total)
    minutes = math.floor((total - hours) * 60 + 0.5)
    if minutes == 60:
        hours, minutes = hours + 1, 0
    return _valid_time(hours % 24, minutes)


def parse_time(value: Any) -> Time | None:
    """Parse a clock-in/clock-out cell into a Time.

    Resolution order:
    1. structured datetime / time value
    2. string containing a 'T' separator (full timestamp)
    3. H:MM or H:MM:SS (seconds dropped)
    4. decimal day fraction (spreadsheet time serial)
    5. HHMM
    6. HMM
    """
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return Time(hours=value.hour, minutes=value.minute)
    if isinstance(value, time):
        return Time(hours=value.hour, minutes=value.minute)

    text = cell_text(value)

    if "T" in text:
        try:
            ts = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            ts = None
        if ts is not None:
            return Time(hours=ts.hour, minutes=ts.minute)

    m = _CLOCK_RE.match(text)
    if m:
        return _valid_time(int(m.group(1)), int(m.group(2)))

    if _DAY_FRACTION_RE.match(text):
        return _from_day_fraction(float(text))

    m = _FOUR_DIGIT_RE.match(text)
    if m:
        return _valid_time(int(m.group(1)), int(m.group(2)))

    m = _THREE_DIGIT_RE.match(text)
    if m:
        return _valid_time(int(m.group(1)), int(m.group(2)))

    return None


def parse_edit_time(text: str | None) -> Time | None:
    """Strict H:MM parser for user edits. No fallback to the cell grammar."""
    if text is None:
        return None
    stripped = text.strip()
    if stripped in ("", "-"):
        return None
    m = _EDIT_TIME_RE.match(stripped)
    if not m:
        return None
    return _valid_time(int(m.group(1)), int(m.group(2)))


def parse_leave_hours_strict(text: str | None) -> float | None:
    """Leave value for an edit: 0.0 when blank, None when not numeric.

    Only the leading number counts ("4h" -> 4.0).
    """
    if text is None or text.strip() == "":
        return 0.0
    m = _LEADING_NUMBER_RE.match(text.strip())
    if not m:
        return None
    return float(m.group(1))


def parse_leave_hours(text: str | None) -> float:
    """Leading-number float parse of an edited leave value; 0.0 on failure."""
    value = parse_leave_hours_strict(text)
    return 0.0 if value is None else value


def format_time(value: Time | None) -> str:
    if value is None:
        return "-"
    return str(value)
