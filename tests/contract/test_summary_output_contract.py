from __future__ import annotations

import re
from datetime import date

from timeclock.models.attendance import AttendanceRecord
from timeclock.models.holiday_calendar import HolidayCalendar
from timeclock.models.summary import MonthlySummary
from timeclock.models.time_value import Time
from timeclock.services.aggregator import summarize
from timeclock.services.classifier import ClassificationContext, classify_records
from timeclock.services.summary import render_summary_line

"""SUMMARY line format contract.

One line, fixed key order, numbers without trailing zeros.
"""

NUM = r"-?[0-9]+(?:\.[0-9]{1,2})?"
SUMMARY_PATTERN = re.compile(
    rf"^SUMMARY\s+work_days=([0-9]+)\s+required_h=({NUM})\s+normal_h=({NUM})\s+"
    rf"shortage_h=({NUM})\s+state=(surplus|shortage|balanced)\s+total_h=({NUM})\s+"
    rf"break_h=({NUM})\s+overtime_h=({NUM})\s+leave_days=({NUM})\s+records=([0-9]+)$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY work_days=22 required_h=176 normal_h=170.5 shortage_h=-5.5 state=shortage "
        "total_h=198 break_h=22 overtime_h=1.25 leave_days=0.5 records=22"
    )
    assert SUMMARY_PATTERN.match(line)


def test_rendered_line_matches_contract():
    cal = HolidayCalendar()
    ctx = ClassificationContext(calendar=cal, today=date(2025, 10, 17))
    records = classify_records(
        [
            AttendanceRecord(date=date(2025, 9, 1), start_time=Time(9, 0), end_time=Time(18, 20)),
            AttendanceRecord(date=date(2025, 9, 2), start_time=Time(9, 0)),
            AttendanceRecord(date=date(2025, 9, 3), note="반차"),
            AttendanceRecord(date=date(2025, 9, 6), start_time=Time(10, 0), end_time=Time(12, 10)),
        ],
        ctx,
    )
    line = render_summary_line(summarize(records, cal))
    m = SUMMARY_PATTERN.match(line)
    assert m, line
    assert m.group(1) == "3"
    assert m.group(10) == "4"


def test_state_follows_shortage_sign():
    def _summary(shortage: float) -> MonthlySummary:
        return MonthlySummary(0, 0, 0, 0, 0, shortage, 0, 0)

    states = [SUMMARY_PATTERN.match(render_summary_line(_summary(v))).group(5) for v in (1.5, -0.25, 0)]
    assert states == ["surplus", "shortage", "balanced"]
