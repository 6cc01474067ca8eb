from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date

from ..models.attendance import AttendanceRecord, AttendanceStatus, ClassifiedRecord
from ..models.holiday_calendar import HolidayCalendar
from ..models.time_value import Time

"""Attendance classifier: one AttendanceRecord -> one ClassifiedRecord.

The day's status is decided by an ordered rule table. Every rule is a
(predicate, handler) pair; the handler returns a RuleOutcome describing what
it decided, and the engine folds outcomes into a RuleState in table order.
An outcome with ``short_circuit`` ends evaluation for that record.

Order (first ones win where they overlap):

  edited-leave      user-entered leave hours (skips leave detection)
  leave-source      H열 "완료 ( 연차 8.00h )" style annotation, falls through
  status-leave      상태 열 "연차 N" / "완료 ( 연차 Nh )" / "연차", stops
  note-leave        비고 "연차" / "휴가" / "annual", stops
  note-absence      비고 "병가" / "반차" / "외근", stops
  rest-day-off      weekend or holiday without both times -> 휴무, stops
  full-day          clock-in and clock-out
  clock-in-only     clock-out filled in as clock-in + 9h
  scheduled         future workday with no times
  no-record         anything else -> 연차 (if leave hours) or 결근
  leave-merge       worked time + detected leave hours
"""

__all__ = [
    "STANDARD_DAY_HOURS",
    "ClassificationContext",
    "RuleOutcome",
    "RuleState",
    "Rule",
    "RULES",
    "calculate_work_hours",
    "calculate_break_time",
    "base_hours",
    "split_regular_overtime",
    "extract_leave_source_hours",
    "evaluate",
    "classify_record",
    "classify_records",
]

logger = logging.getLogger(__name__)

STANDARD_DAY_HOURS = 8.0
AUTO_SHIFT_HOURS = 9  # 퇴근 누락 시 출근 + 9시간
HALF_DAY_HOURS = 4.0

# H열 연차 표기, 순서대로 시도
LEAVE_SOURCE_PATTERNS = [
    re.compile(r"완료\s*\(\s*연차\s*(\d+(?:\.\d+)?)h?\s*\)", re.IGNORECASE),  # 완료 ( 연차 8.00h )
    re.compile(r"완료\s*\(\s*연차\s*(\d+(?:\.\d+)?)\s*\)", re.IGNORECASE),  # 완료 ( 연차 8 )
    re.compile(r"연차\s*(\d+(?:\.\d+)?)h?", re.IGNORECASE),  # 연차 8h
    re.compile(r"(\d+(?:\.\d+)?)h?\s*연차", re.IGNORECASE),  # 8h 연차
]
_BARE_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)?)$")

_STATUS_LEAVE_RE = re.compile(r"연차\s*(\d+(?:\.\d+)?)")
_STATUS_COMPLETE_RE = re.compile(r"완료\s*\(\s*연차\s*(\d+(?:\.\d+)?)h?\s*\)")
_NOTE_LEAVE_KEYWORDS = ("연차", "휴가", "annual")
_NOTE_LEAVE_HOURS_RE = re.compile(r"연차\s*(\d+(?:\.\d+)?)")


@dataclass(frozen=True)
class ClassificationContext:
    """Everything the rules read besides the record itself."""
    calendar: HolidayCalendar
    today: date

    def is_rest_day(self, day: date) -> bool:
        return self.calendar.is_rest_day(day)


@dataclass(frozen=True)
class RuleOutcome:
    """What a rule decided. None fields leave the running state unchanged."""
    status: AttendanceStatus | None = None
    leave_hours: float | None = None
    leave_days: float = 0.0  # 누적 (더해짐)
    work_hours: float | None = None
    break_hours: float | None = None
    actual_work_hours: float | None = None
    auto_end_time: Time | None = None
    short_circuit: bool = False


@dataclass(frozen=True)
class RuleState:
    status: AttendanceStatus = AttendanceStatus.NORMAL
    leave_hours: float | None = None  # None: 연차 신호 없음
    leave_days: float = 0.0
    work_hours: float = 0.0
    break_hours: float = 0.0
    actual_work_hours: float = 0.0
    auto_end_time: Time | None = None
    stopped_by: str | None = None

    @property
    def leave(self) -> float:
        return self.leave_hours or 0.0

    def apply(self, rule_name: str, outcome: RuleOutcome) -> RuleState:
        changes: dict[str, object] = {"leave_days": self.leave_days + outcome.leave_days}
        for name in ("status", "leave_hours", "work_hours", "break_hours", "actual_work_hours", "auto_end_time"):
            value = getattr(outcome, name)
            if value is not None:
                changes[name] = value
        if outcome.short_circuit:
            changes["stopped_by"] = rule_name
        return replace(self, **changes)


Predicate = Callable[[AttendanceRecord, ClassificationContext, RuleState], bool]
Handler = Callable[[AttendanceRecord, ClassificationContext, RuleState], RuleOutcome]


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: Predicate
    handler: Handler


# ---------------------------------------------------------------------------
# hour arithmetic
# ---------------------------------------------------------------------------

def calculate_work_hours(start: Time | None, end: Time | None) -> float:
    """Elapsed hours between clock-in and clock-out, wrapping past midnight."""
    if start is None or end is None:
        return 0.0
    minutes = end.total_minutes - start.total_minutes
    if minutes < 0:
        minutes += 24 * 60
    return minutes / 60


def calculate_break_time(work_hours: float) -> float:
    """Break deduction: none for 0h, 0.5h under 4.5h, 1h from 4.5h."""
    if work_hours == 0:
        return 0.0
    if work_hours >= 4.5:
        return 1.0
    return 0.5


def base_hours(start: Time | None, end: Time | None) -> tuple[float, float, float]:
    """(work, break, worked-minus-break) for a pair of times; zeros if either is missing."""
    if start is None or end is None:
        return 0.0, 0.0, 0.0
    work = calculate_work_hours(start, end)
    brk = calculate_break_time(work)
    return work, brk, max(0.0, work - brk)


def split_regular_overtime(status: AttendanceStatus, rest_day: bool, actual: float) -> tuple[float, float]:
    """Per-record (regular, overtime) contribution."""
    if status in (AttendanceStatus.NORMAL, AttendanceStatus.INCOMPLETE, AttendanceStatus.HOLIDAY_WORK):
        if rest_day:
            return 0.0, actual
        return min(actual, STANDARD_DAY_HOURS), max(0.0, actual - STANDARD_DAY_HOURS)
    if status is AttendanceStatus.SCHEDULED:
        return actual, 0.0
    return 0.0, 0.0


def extract_leave_source_hours(text: str) -> float | None:
    """Leave hours from the leave-source annotation, or None when nothing matches."""
    value = text.strip()
    if not value:
        return None
    for pattern in LEAVE_SOURCE_PATTERNS:
        m = pattern.search(value)
        if m:
            return float(m.group(1))
    m = _BARE_NUMBER_RE.match(value)
    if m and float(m.group(1)) > 0:
        return float(m.group(1))
    return None


# ---------------------------------------------------------------------------
# leave rules
# ---------------------------------------------------------------------------

def _edited_leave(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    hours = record.annual_leave_hours
    return RuleOutcome(
        status=AttendanceStatus.LEAVE if hours > 0 else None,
        leave_hours=hours,
        leave_days=hours / STANDARD_DAY_HOURS,
    )


def _has_leave_source(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return state.leave_hours is None and extract_leave_source_hours(record.leave_source_text) is not None


def _leave_source(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    hours = extract_leave_source_hours(record.leave_source_text) or 0.0
    return RuleOutcome(
        status=AttendanceStatus.LEAVE,
        leave_hours=hours,
        leave_days=hours / STANDARD_DAY_HOURS,
    )


def _has_status_leave(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return state.leave_hours is None and "연차" in record.status.lower()


def _status_leave(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    status = record.status.lower()
    hours = STANDARD_DAY_HOURS
    complete = _STATUS_COMPLETE_RE.search(status)
    plain = _STATUS_LEAVE_RE.search(status)
    if complete:
        hours = float(complete.group(1))
    elif plain:
        hours = float(plain.group(1))
    return RuleOutcome(
        status=AttendanceStatus.LEAVE,
        leave_hours=hours,
        leave_days=hours / STANDARD_DAY_HOURS,
        short_circuit=True,
    )


def _has_note_leave(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    note = record.note.lower()
    return state.leave_hours is None and any(k in note for k in _NOTE_LEAVE_KEYWORDS)


def _note_leave(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    m = _NOTE_LEAVE_HOURS_RE.search(record.note.lower())
    if m:
        hours = float(m.group(1))
        days = hours / STANDARD_DAY_HOURS
    else:
        # 시간 표기가 없으면 1일
        hours = STANDARD_DAY_HOURS
        days = 1.0
    return RuleOutcome(status=AttendanceStatus.LEAVE, leave_hours=hours, leave_days=days, short_circuit=True)


def _has_note_absence(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    note = record.note.lower()
    return "병가" in note or "반차" in note or "외근" in note


def _note_absence(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    note = record.note.lower()
    if "병가" in note:
        return RuleOutcome(status=AttendanceStatus.SICK, short_circuit=True)
    if "반차" in note:
        hours = record.annual_leave_hours if record.leave_edited else HALF_DAY_HOURS
        return RuleOutcome(status=AttendanceStatus.HALF_DAY, leave_hours=hours, leave_days=0.5, short_circuit=True)
    return RuleOutcome(status=AttendanceStatus.OFF_SITE, short_circuit=True)


# ---------------------------------------------------------------------------
# time rules (predicates are mutually exclusive)
# ---------------------------------------------------------------------------

def _both_times(record: AttendanceRecord) -> bool:
    return record.start_time is not None and record.end_time is not None


def _is_rest_day_off(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return ctx.is_rest_day(record.date) and not _both_times(record)


def _rest_day_off(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    return RuleOutcome(status=AttendanceStatus.DAY_OFF, short_circuit=True)


def _is_full_day(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return _both_times(record)


def _full_day(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    work, brk, base = base_hours(record.start_time, record.end_time)
    status = AttendanceStatus.HOLIDAY_WORK if ctx.is_rest_day(record.date) else AttendanceStatus.NORMAL
    return RuleOutcome(
        status=status,
        work_hours=work,
        break_hours=brk,
        actual_work_hours=base + state.leave,
    )


def _is_clock_in_only(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return record.start_time is not None and record.end_time is None


def _clock_in_only(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    start = record.start_time
    if start is None:
        return RuleOutcome()
    work = float(AUTO_SHIFT_HOURS)
    brk = calculate_break_time(work)
    return RuleOutcome(
        status=AttendanceStatus.INCOMPLETE,
        work_hours=work,
        break_hours=brk,
        actual_work_hours=max(0.0, work - brk) + state.leave,
        auto_end_time=start.plus_hours(AUTO_SHIFT_HOURS),
    )


def _is_scheduled(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return (
        record.start_time is None
        and record.end_time is None
        and record.date > ctx.today
        and not ctx.is_rest_day(record.date)
    )


def _scheduled(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    # 근무 8시간 + 휴게 1시간
    return RuleOutcome(
        status=AttendanceStatus.SCHEDULED,
        work_hours=9.0,
        break_hours=1.0,
        actual_work_hours=STANDARD_DAY_HOURS + state.leave,
    )


def _is_no_record(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return record.start_time is None and not _is_scheduled(record, ctx, state)


def _no_record(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    leave = state.leave
    return RuleOutcome(
        status=AttendanceStatus.LEAVE if leave > 0 else AttendanceStatus.ABSENT,
        actual_work_hours=leave,
    )


def _has_leave_to_merge(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return state.leave > 0


def _leave_merge(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> RuleOutcome:
    end = record.end_time if record.end_time is not None else state.auto_end_time
    if record.start_time is not None and end is not None:
        work, brk, base = base_hours(record.start_time, end)
        return RuleOutcome(work_hours=work, break_hours=brk, actual_work_hours=base + state.leave)
    return RuleOutcome(actual_work_hours=state.leave)


def _always(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return True


def _leave_edited(record: AttendanceRecord, ctx: ClassificationContext, state: RuleState) -> bool:
    return record.leave_edited


RULES: tuple[Rule, ...] = (
    Rule("edited-leave", _leave_edited, _edited_leave),
    Rule("leave-source", _has_leave_source, _leave_source),
    Rule("status-leave", _has_status_leave, _status_leave),
    Rule("note-leave", _has_note_leave, _note_leave),
    Rule("note-absence", _has_note_absence, _note_absence),
    Rule("rest-day-off", _is_rest_day_off, _rest_day_off),
    Rule("full-day", _is_full_day, _full_day),
    Rule("clock-in-only", _is_clock_in_only, _clock_in_only),
    Rule("scheduled", _is_scheduled, _scheduled),
    Rule("no-record", _is_no_record, _no_record),
    Rule("leave-merge", _has_leave_to_merge, _leave_merge),
)


def evaluate(record: AttendanceRecord, ctx: ClassificationContext, rules: Iterable[Rule] = RULES) -> RuleState:
    """Run the rule table over one record and return the final state."""
    state = RuleState()
    for rule in rules:
        if not rule.predicate(record, ctx, state):
            continue
        state = state.apply(rule.name, rule.handler(record, ctx, state))
        if state.stopped_by is not None:
            break
    return state


def classify_record(record: AttendanceRecord, ctx: ClassificationContext) -> ClassifiedRecord:
    """Classify one record against the holiday calendar and reference date."""
    state = evaluate(record, ctx)
    regular, overtime = split_regular_overtime(
        state.status, ctx.is_rest_day(record.date), state.actual_work_hours
    )
    logger.debug(
        f"{record.date.isoformat()} status={state.status.value} work={state.work_hours:.2f} "
        f"break={state.break_hours:.2f} leave={state.leave:.2f} actual={state.actual_work_hours:.2f} "
        f"stopped_by={state.stopped_by}"
    )
    return ClassifiedRecord(
        record=record,
        status=state.status,
        work_hours=state.work_hours,
        break_hours=state.break_hours,
        actual_work_hours=state.actual_work_hours,
        annual_leave_hours=state.leave,
        leave_days=state.leave_days,
        regular_hours=regular,
        overtime_hours=overtime,
        auto_end_time=state.auto_end_time,
    )


def classify_records(
    records: Iterable[AttendanceRecord],
    ctx: ClassificationContext,
    on_record: Callable[[ClassifiedRecord], None] | None = None,
) -> list[ClassifiedRecord]:
    """Classify a batch in order; ``on_record`` is called after each one (progress hook)."""
    out: list[ClassifiedRecord] = []
    for record in records:
        classified = classify_record(record, ctx)
        out.append(classified)
        if on_record is not None:
            on_record(classified)
    return out
