from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.attendance import ClassifiedRecord
from ..models.holiday_calendar import HolidayCalendar
from ..models.summary import MonthlySummary
from .classifier import STANDARD_DAY_HOURS

"""Aggregator: classified records -> MonthlySummary.

Accumulation runs at full float precision; hour totals are rounded to two
decimals only when the summary object is built.
"""

__all__ = [
    "round_hours",
    "count_normal_work_days",
    "summarize",
    "refold",
]

logger = logging.getLogger(__name__)


def round_hours(value: float) -> float:
    """Round half away from zero to 2 decimals (matches the sheet formulas)."""
    scaled = abs(value) * 100
    rounded = int(scaled + 0.5) / 100
    return -rounded if value < 0 else rounded


def count_normal_work_days(records: Sequence[ClassifiedRecord], calendar: HolidayCalendar) -> int:
    """Records dated on a weekday that is not a public holiday."""
    return sum(1 for r in records if calendar.is_workday(r.date))


def _fold(records: Sequence[ClassifiedRecord], normal_work_days: int) -> MonthlySummary:
    total_work = 0.0
    total_break = 0.0
    overtime = 0.0
    leave_days = 0.0
    table_actual = 0.0
    for r in records:
        total_work += r.work_hours
        total_break += r.break_hours
        overtime += r.overtime_hours
        leave_days += r.leave_days
        if r.actual_work_hours > 0:
            table_actual += r.actual_work_hours

    required = normal_work_days * STANDARD_DAY_HOURS
    shortage = table_actual - required
    logger.debug(
        f"fold: table_actual={table_actual:.2f} required={required:.2f} shortage={shortage:.2f} "
        f"normal_work_days={normal_work_days}"
    )
    return MonthlySummary(
        total_work_hours=round_hours(total_work),
        total_break_hours=round_hours(total_break),
        regular_hours=round_hours(table_actual),
        overtime_hours=round_hours(overtime),
        annual_leave_days=round_hours(leave_days),
        shortage_hours=round_hours(shortage),
        normal_work_days=normal_work_days,
        required_work_hours=required,
        detailed_data=tuple(records),
    )


def summarize(records: Sequence[ClassifiedRecord], calendar: HolidayCalendar) -> MonthlySummary:
    """Full aggregation: work-day count from the calendar, then the fold."""
    return _fold(records, count_normal_work_days(records, calendar))


def refold(
    summary: MonthlySummary,
    records: Sequence[ClassifiedRecord],
    calendar: HolidayCalendar | None = None,
) -> MonthlySummary:
    """Re-run the fold over the current records after an edit.

    ``normal_work_days`` / ``required_work_hours`` are carried over from
    ``summary`` unless a calendar is given, in which case they are recounted.
    """
    if calendar is None:
        return _fold(records, summary.normal_work_days)
    refreshed = _fold(records, count_normal_work_days(records, calendar))
    if refreshed.normal_work_days != summary.normal_work_days:
        logger.info(f"normal work days {summary.normal_work_days} -> {refreshed.normal_work_days}")
    return refreshed
