from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from pathlib import Path

from ..excel.reader import RawRow
from ..models.attendance import AttendanceStatus, ClassifiedRecord
from ..models.column_map import ColumnMap
from ..models.config_models import AppConfig
from ..models.holiday_calendar import HolidayCalendar
from ..models.issue_record import IssueRecord
from ..models.summary import MonthlySummary
from ..parsing.fields import parse_edit_time, parse_leave_hours_strict
from .aggregator import refold
from .classifier import ClassificationContext, base_hours, classify_record, split_regular_overtime
from .orchestrator import IngestResult, ingest_file, ingest_rows

"""Incremental recompute: single-record edits without re-ingestion.

AttendanceSession holds the current classified records, the summary and
the holiday calendar. Each edit builds a new ClassifiedRecord from the old
one plus the change, swaps it into the record tuple, then refolds the
summary over every record.

On a holiday toggle the work-day count (and so the required hours) is kept
from the last full ingestion unless
``recompute.refresh_work_days_on_holiday_toggle`` is enabled.
"""

__all__ = [
    "EditRejected",
    "HolidayToggleError",
    "TIME_FIELDS",
    "recompute_record",
    "AttendanceSession",
]

logger = logging.getLogger(__name__)

TIME_FIELDS = {
    "start_time": "start_time",
    "start": "start_time",
    "end_time": "end_time",
    "end": "end_time",
}


class EditRejected(ValueError):
    """An edit value could not be applied; session state is unchanged."""


class HolidayToggleError(EditRejected):
    """Holiday flag requested for a record that has no toggle (weekends)."""


def recompute_record(record: ClassifiedRecord, ctx: ClassificationContext) -> ClassifiedRecord:
    """Re-derive base hours and status for one record, keeping its leave hours.

    Both times present -> 정상 (휴일근무 on rest days); otherwise the day has
    no worked time and becomes 연차 when leave hours remain, 휴무 on a rest
    day, else 결근.
    """
    leave = record.annual_leave_hours
    work, brk, base = base_hours(record.start_time, record.end_time)
    rest_day = ctx.is_rest_day(record.date)
    if record.start_time is not None and record.end_time is not None:
        status = AttendanceStatus.HOLIDAY_WORK if rest_day else AttendanceStatus.NORMAL
    elif leave > 0:
        status = AttendanceStatus.LEAVE
    elif rest_day:
        status = AttendanceStatus.DAY_OFF
    else:
        status = AttendanceStatus.ABSENT
    actual = base + leave
    regular, overtime = split_regular_overtime(status, rest_day, actual)
    return replace(
        record,
        status=status,
        work_hours=work,
        break_hours=brk,
        actual_work_hours=actual,
        regular_hours=regular,
        overtime_hours=overtime,
    )


class AttendanceSession:
    """Current attendance state for one uploaded workbook.

    ``load``/``load_rows`` replace the state only when ingestion succeeds, so
    a failed upload leaves the previous result in place.
    """

    def __init__(self, calendar: HolidayCalendar, today: date, config: AppConfig | None = None) -> None:
        self.calendar = calendar
        self.today = today
        self.config = config or AppConfig()
        self.records: tuple[ClassifiedRecord, ...] = ()
        self.summary: MonthlySummary | None = None
        self.column_map: ColumnMap | None = None
        self.issues: list[IssueRecord] = []
        self.source_name = ""

    @property
    def context(self) -> ClassificationContext:
        return ClassificationContext(calendar=self.calendar, today=self.today)

    # -- ingestion ---------------------------------------------------------

    def _adopt(self, result: IngestResult) -> IngestResult:
        self.records = result.records
        self.summary = result.summary
        self.column_map = result.column_map
        self.issues = list(result.issues)
        self.source_name = result.source_name
        return result

    def load(self, path: Path, *, show_progress: bool = False) -> IngestResult:
        result = ingest_file(
            path,
            self.calendar,
            self.today,
            leave_source_column=self.config.leave_source_column,
            show_progress=show_progress,
        )
        return self._adopt(result)

    def load_rows(self, rows: list[RawRow], source_name: str = "") -> IngestResult:
        result = ingest_rows(
            rows,
            self.calendar,
            self.today,
            leave_source_column=self.config.leave_source_column,
            source_name=source_name,
        )
        return self._adopt(result)

    # -- edits ---------------------------------------------------------------

    def _record_at(self, index: int) -> ClassifiedRecord:
        if self.summary is None:
            raise EditRejected("no attendance data loaded")
        if not 0 <= index < len(self.records):
            raise EditRejected(f"record index out of range: {index}")
        return self.records[index]

    def _commit(self, index: int, updated: ClassifiedRecord, *, recount_work_days: bool = False) -> ClassifiedRecord:
        if self.summary is None:
            raise EditRejected("no attendance data loaded")
        records = list(self.records)
        records[index] = updated
        self.records = tuple(records)
        self.summary = refold(self.summary, self.records, self.calendar if recount_work_days else None)
        logger.debug(
            f"{updated.date.isoformat()} recomputed: status={updated.status.value} "
            f"actual={updated.actual_work_hours:.2f} regular_total={self.summary.regular_hours} "
            f"shortage={self.summary.shortage_hours}"
        )
        return updated

    def edit_time(self, index: int, field: str, text: str | None) -> ClassifiedRecord:
        """Replace clock-in or clock-out with a strict ``H:MM`` value.

        Blank or '-' clears the field. Any other non-H:MM input raises
        EditRejected and nothing changes.
        """
        current = self._record_at(index)
        if field not in TIME_FIELDS:
            raise EditRejected(f"not an editable time field: {field}")
        attr = TIME_FIELDS[field]
        value = parse_edit_time(text)
        if value is None and text is not None and text.strip() not in ("", "-"):
            raise EditRejected(f"시간 형식이 올바르지 않습니다 (HH:MM): {text!r}")

        source = replace(current.record, times_edited=True, **{attr: value})
        auto_end = None if attr == "end_time" else current.auto_end_time
        updated = recompute_record(replace(current, record=source, auto_end_time=auto_end), self.context)
        logger.info(f"{updated.date.isoformat()} {attr} -> {value if value is not None else '-'}")
        return self._commit(index, updated)

    def edit_leave_hours(self, index: int, text: str | None) -> ClassifiedRecord:
        """Replace the record's leave hours; actual = base hours + leave."""
        current = self._record_at(index)
        hours = parse_leave_hours_strict(text)
        if hours is None:
            raise EditRejected(f"연차시간은 숫자로 입력해야 합니다: {text!r}")

        source = replace(current.record, annual_leave_hours=hours, leave_edited=True)
        updated = recompute_record(
            replace(current, record=source, annual_leave_hours=hours, leave_days=hours / 8),
            self.context,
        )
        logger.info(f"{updated.date.isoformat()} leave hours -> {hours}")
        return self._commit(index, updated)

    def is_holiday(self, index: int) -> bool | None:
        """Holiday flag for a record; None for weekends (no toggle shown)."""
        record = self._record_at(index)
        if self.calendar.is_weekend(record.date):
            return None
        return self.calendar.is_holiday(record.date)

    def toggle_holiday(self, index: int, flag: bool) -> ClassifiedRecord:
        """Mark or unmark a weekday record's date as a public holiday.

        A flag equal to the current membership changes nothing. Otherwise a
        record touched by an edit is re-derived the way the edit paths derive
        it (recompute_record); an untouched record is reclassified.

        Raises:
            HolidayToggleError: the record falls on a weekend
            ProtectedHolidayError: un-marking a default holiday (flag stays on)
        """
        current = self._record_at(index)
        day = current.date
        if self.calendar.is_weekend(day):
            raise HolidayToggleError(f"{day.isoformat()} is a weekend; no holiday flag")
        if flag == self.calendar.is_holiday(day):
            logger.debug(f"{day.isoformat()} holiday already {'on' if flag else 'off'}")
            return current
        if flag:
            self.calendar.add(day)
        else:
            self.calendar.remove(day)
        logger.info(f"{day.isoformat()} holiday -> {'on' if flag else 'off'} (total {len(self.calendar)})")

        if current.record.leave_edited or current.record.times_edited:
            updated = recompute_record(current, self.context)
        else:
            updated = classify_record(current.record, self.context)
        return self._commit(
            index,
            updated,
            recount_work_days=self.config.recompute.refresh_work_days_on_holiday_toggle,
        )
