from __future__ import annotations

import math
from datetime import date
from typing import Any

from ..models.attendance import AttendanceStatus, ClassifiedRecord
from ..models.holiday_calendar import HolidayCalendar
from ..models.summary import MonthlySummary
from ..parsing.fields import format_time

"""Presentation helpers for the summary and the per-record table.

Everything here is pure formatting; the rendering layer decides where the
strings go.
"""

__all__ = [
    "WEEKDAY_LABELS",
    "format_hours_korean",
    "format_hours_hhmm",
    "format_date_korean",
    "render_summary_line",
    "record_rows",
]

WEEKDAY_LABELS = ("월", "화", "수", "목", "금", "토", "일")


def _split_hours(hours: float) -> tuple[int, int]:
    absolute = abs(hours)
    whole = math.floor(absolute)
    minutes = math.floor((absolute - whole) * 60 + 0.5)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return whole, minutes


def format_hours_korean(hours: float | None) -> str:
    """2.5 -> '2시간 30분', -1.5 -> '-1시간 30분', 0 -> '0시간 0분'."""
    if hours is None:
        return "0시간 0분"
    whole, minutes = _split_hours(hours)
    parts = []
    if whole > 0:
        parts.append(f"{whole}시간")
    if minutes > 0:
        parts.append(f"{minutes}분")
    text = " ".join(parts) or "0시간 0분"
    return f"-{text}" if hours < 0 and parts else text


def format_hours_hhmm(hours: float | None) -> str:
    """2.5 -> '02:30', -1.5 -> '-01:30'."""
    if hours is None:
        return "00:00"
    whole, minutes = _split_hours(hours)
    text = f"{whole:02d}:{minutes:02d}"
    return f"-{text}" if hours < 0 else text


def format_date_korean(day: date) -> str:
    """2025-09-01 -> '2025. 09. 01. (월)'."""
    return f"{day.year}. {day.month:02d}. {day.day:02d}. ({WEEKDAY_LABELS[day.weekday()]})"


def _fmt(value: float | int) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(summary: MonthlySummary) -> str:
    """Single SUMMARY line with every scalar total.

    Format:
    SUMMARY work_days={n} required_h={r} normal_h={l} shortage_h={s} state={state}
    total_h={t} break_h={b} overtime_h={o} leave_days={d} records={count}
    """
    return (
        f"SUMMARY work_days={summary.normal_work_days} "
        f"required_h={_fmt(summary.required_work_hours)} "
        f"normal_h={_fmt(summary.regular_hours)} "
        f"shortage_h={_fmt(summary.shortage_hours)} "
        f"state={summary.shortage_state} "
        f"total_h={_fmt(summary.total_work_hours)} "
        f"break_h={_fmt(summary.total_break_hours)} "
        f"overtime_h={_fmt(summary.overtime_hours)} "
        f"leave_days={_fmt(summary.annual_leave_days)} "
        f"records={len(summary.detailed_data)}"
    )


def _hours_cell(value: float) -> str:
    return f"{value:.2f}시간" if value > 0 else "-"


def record_rows(records: tuple[ClassifiedRecord, ...] | list[ClassifiedRecord], calendar: HolidayCalendar) -> list[dict[str, Any]]:
    """Per-record display rows.

    ``holiday`` is None on weekends (no toggle). ``note`` shows only 근무예정;
    ``end_auto`` marks an auto-filled clock-out (미완료, kept after later edits).
    """
    rows: list[dict[str, Any]] = []
    for index, r in enumerate(records):
        rows.append(
            {
                "index": index,
                "date": format_date_korean(r.date),
                "start": format_time(r.start_time),
                "end": format_time(r.end_time),
                "end_auto": r.record.end_time is None and r.auto_end_time is not None,
                "work": _hours_cell(r.work_hours),
                "break": _hours_cell(r.break_hours),
                "leave": _fmt(r.annual_leave_hours) if r.annual_leave_hours > 0 else "0",
                "actual": _hours_cell(r.actual_work_hours),
                "holiday": None if calendar.is_weekend(r.date) else calendar.is_holiday(r.date),
                "status": r.status.value,
                "note": r.status.value if r.status is AttendanceStatus.SCHEDULED else "",
                "weekend": calendar.is_weekend(r.date),
            }
        )
    return rows
