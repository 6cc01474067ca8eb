from __future__ import annotations

from datetime import date

import pytest

from timeclock.models.attendance import AttendanceRecord, AttendanceStatus
from timeclock.models.holiday_calendar import HolidayCalendar
from timeclock.models.time_value import Time
from timeclock.services.classifier import (
    RULES,
    ClassificationContext,
    calculate_break_time,
    calculate_work_hours,
    classify_record,
    evaluate,
    extract_leave_source_hours,
)

WEEKDAY = date(2025, 9, 3)  # Wed
SATURDAY = date(2025, 9, 6)
FUTURE_WEEKDAY = date(2025, 10, 20)  # Mon, after TODAY
TODAY = date(2025, 10, 17)


def _ctx(holidays: set[date] | None = None) -> ClassificationContext:
    return ClassificationContext(calendar=HolidayCalendar(dates=set(holidays or ())), today=TODAY)


def _record(day: date = WEEKDAY, start: str | None = None, end: str | None = None, **kw) -> AttendanceRecord:
    def t(s: str | None) -> Time | None:
        if s is None:
            return None
        h, m = s.split(":")
        return Time(int(h), int(m))

    return AttendanceRecord(date=day, start_time=t(start), end_time=t(end), **kw)


@pytest.mark.parametrize("work,expected", [(0, 0.0), (4.49, 0.5), (4.5, 1.0), (10, 1.0)])
def test_calculate_break_time(work, expected):
    assert calculate_break_time(work) == expected


def test_work_hours_wrap_past_midnight():
    assert calculate_work_hours(Time(22, 0), Time(6, 0)) == 8.0
    assert calculate_work_hours(Time(9, 0), Time(18, 30)) == 9.5
    assert calculate_work_hours(Time(9, 0), None) == 0.0


def test_full_weekday():
    r = classify_record(_record(start="09:00", end="18:00"), _ctx())
    assert r.status is AttendanceStatus.NORMAL
    assert (r.work_hours, r.break_hours, r.actual_work_hours) == (9.0, 1.0, 8.0)
    assert (r.regular_hours, r.overtime_hours) == (8.0, 0.0)


def test_weekday_overtime_split():
    r = classify_record(_record(start="09:00", end="21:00"), _ctx())
    assert r.actual_work_hours == 11.0
    assert (r.regular_hours, r.overtime_hours) == (8.0, 3.0)


def test_short_day_half_hour_break():
    r = classify_record(_record(start="09:00", end="13:00"), _ctx())
    assert (r.work_hours, r.break_hours, r.actual_work_hours) == (4.0, 0.5, 3.5)


def test_night_shift_wraps():
    r = classify_record(_record(start="22:00", end="06:00"), _ctx())
    assert r.work_hours == 8.0
    assert r.actual_work_hours == 7.0


def test_incomplete_record_gets_auto_end():
    r = classify_record(_record(start="09:00"), _ctx())
    assert r.status is AttendanceStatus.INCOMPLETE
    assert r.end_time == Time(18, 0)
    assert r.record.end_time is None
    assert (r.work_hours, r.break_hours, r.actual_work_hours) == (9.0, 1.0, 8.0)
    assert r.regular_hours == 8.0


def test_incomplete_auto_end_wraps_midnight():
    r = classify_record(_record(start="20:30"), _ctx())
    assert r.auto_end_time == Time(5, 30)


def test_weekend_without_times_is_day_off():
    r = classify_record(_record(day=SATURDAY), _ctx())
    assert r.status is AttendanceStatus.DAY_OFF
    assert r.actual_work_hours == 0.0


def test_weekend_clock_in_only_is_day_off():
    r = classify_record(_record(day=SATURDAY, start="09:00"), _ctx())
    assert r.status is AttendanceStatus.DAY_OFF


def test_weekend_work_counts_as_overtime():
    r = classify_record(_record(day=SATURDAY, start="10:00", end="15:00"), _ctx())
    assert r.status is AttendanceStatus.HOLIDAY_WORK
    assert r.actual_work_hours == 4.0
    assert (r.regular_hours, r.overtime_hours) == (0.0, 4.0)


def test_public_holiday_work():
    r = classify_record(_record(start="09:00", end="18:00"), _ctx({WEEKDAY}))
    assert r.status is AttendanceStatus.HOLIDAY_WORK
    assert r.overtime_hours == 8.0


def test_future_weekday_is_scheduled():
    r = classify_record(_record(day=FUTURE_WEEKDAY), _ctx())
    assert r.status is AttendanceStatus.SCHEDULED
    assert (r.work_hours, r.break_hours, r.actual_work_hours) == (9.0, 1.0, 8.0)
    assert r.regular_hours == 8.0


def test_future_holiday_is_day_off_not_scheduled():
    r = classify_record(_record(day=FUTURE_WEEKDAY), _ctx({FUTURE_WEEKDAY}))
    assert r.status is AttendanceStatus.DAY_OFF


def test_today_is_not_future():
    r = classify_record(_record(day=TODAY), _ctx())
    assert r.status is AttendanceStatus.ABSENT


def test_past_weekday_without_times_is_absent():
    r = classify_record(_record(), _ctx())
    assert r.status is AttendanceStatus.ABSENT
    assert r.actual_work_hours == 0.0


def test_clock_out_only_is_absent():
    r = classify_record(_record(end="18:00"), _ctx())
    assert r.status is AttendanceStatus.ABSENT


@pytest.mark.parametrize(
    "text,hours",
    [
        ("완료 ( 연차 8.00h )", 8.0),
        ("완료(연차 4)", 4.0),
        ("연차 8h", 8.0),
        ("8h 연차", 8.0),
        ("4.00", 4.0),
        ("  2 ", 2.0),
    ],
)
def test_extract_leave_source_hours(text, hours):
    assert extract_leave_source_hours(text) == hours


@pytest.mark.parametrize("text", ["", "   ", "0", "완료", "승인대기"])
def test_extract_leave_source_hours_no_value(text):
    assert extract_leave_source_hours(text) is None


def test_leave_source_wins_over_status_column():
    record = _record(leave_source_text="완료 ( 연차 8.00h )", status="연차 4")
    state = evaluate(record, _ctx())
    assert state.leave_hours == 8.0
    assert state.stopped_by is None  # status-leave never ran

    r = classify_record(record, _ctx())
    assert r.status is AttendanceStatus.LEAVE
    assert r.annual_leave_hours == 8.0
    assert r.leave_days == 1.0
    assert r.actual_work_hours == 8.0


def test_leave_source_merges_with_worked_time():
    r = classify_record(_record(start="09:00", end="13:00", leave_source_text="연차 4h"), _ctx())
    # 3.5h worked (4h - 0.5h break) + 4h leave
    assert r.actual_work_hours == 7.5
    assert r.annual_leave_hours == 4.0
    assert r.leave_days == 0.5
    assert r.status is AttendanceStatus.NORMAL


def test_leave_source_on_scheduled_day_keeps_leave_only():
    r = classify_record(_record(day=FUTURE_WEEKDAY, leave_source_text="4"), _ctx())
    assert r.status is AttendanceStatus.SCHEDULED
    assert r.actual_work_hours == 4.0


def test_unmatched_leave_source_falls_back_to_status_column():
    r = classify_record(_record(leave_source_text="완료", status="연차 4"), _ctx())
    assert r.status is AttendanceStatus.LEAVE
    assert r.annual_leave_hours == 4.0
    assert r.leave_days == 0.5
    assert r.actual_work_hours == 0.0


def test_status_column_leave_returns_early():
    record = _record(start="09:00", end="18:00", status="완료 ( 연차 8.00h )")
    state = evaluate(record, _ctx())
    assert state.stopped_by == "status-leave"
    r = classify_record(record, _ctx())
    assert r.status is AttendanceStatus.LEAVE
    assert r.work_hours == 0.0
    assert r.actual_work_hours == 0.0
    assert r.annual_leave_hours == 8.0


def test_status_column_bare_leave_defaults_to_eight_hours():
    r = classify_record(_record(status="연차"), _ctx())
    assert r.annual_leave_hours == 8.0
    assert r.leave_days == 1.0


def test_note_leave_without_number_counts_one_day():
    r = classify_record(_record(note="여름 휴가"), _ctx())
    assert r.status is AttendanceStatus.LEAVE
    assert r.annual_leave_hours == 8.0
    assert r.leave_days == 1.0
    assert r.actual_work_hours == 0.0


def test_note_leave_with_number():
    r = classify_record(_record(note="연차 2시간"), _ctx())
    assert r.annual_leave_hours == 2.0
    assert r.leave_days == 0.25


def test_note_leave_is_case_insensitive():
    r = classify_record(_record(note="Annual leave"), _ctx())
    assert r.status is AttendanceStatus.LEAVE


@pytest.mark.parametrize(
    "note,status",
    [("병가", AttendanceStatus.SICK), ("외근 (고객사)", AttendanceStatus.OFF_SITE)],
)
def test_note_absence_statuses(note, status):
    r = classify_record(_record(start="09:00", end="18:00", note=note), _ctx())
    assert r.status is status
    assert r.actual_work_hours == 0.0
    assert r.work_hours == 0.0


def test_half_day_note():
    r = classify_record(_record(note="오후 반차"), _ctx())
    assert r.status is AttendanceStatus.HALF_DAY
    assert r.annual_leave_hours == 4.0
    assert r.leave_days == 0.5


def test_edited_leave_replaces_detection():
    record = _record(leave_source_text="완료 ( 연차 8.00h )", annual_leave_hours=2.0, leave_edited=True)
    r = classify_record(record, _ctx())
    assert r.annual_leave_hours == 2.0
    assert r.actual_work_hours == 2.0


def test_rule_table_order():
    names = [rule.name for rule in RULES]
    assert names.index("leave-source") < names.index("status-leave") < names.index("note-leave")
    assert names.index("note-absence") < names.index("rest-day-off") < names.index("full-day")
    assert names[-1] == "leave-merge"
