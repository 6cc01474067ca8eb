from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from .time_value import Time

"""Attendance domain models.

AttendanceRecord is one parsed sheet row (raw texts kept as-is).
ClassifiedRecord is the classifier's view of that row: status plus the
derived hour figures. Both are frozen; edits build new instances with
dataclasses.replace so the aggregate can always be refolded from the
current sequence.
"""

__all__ = [
    "AttendanceStatus",
    "AttendanceRecord",
    "ClassifiedRecord",
]


class AttendanceStatus(StrEnum):
    """Classified day status. Values are the labels shown to users."""
    NORMAL = "정상"
    LEAVE = "연차"
    SICK = "병가"
    HALF_DAY = "반차"
    OFF_SITE = "외근"
    HOLIDAY_WORK = "휴일근무"
    DAY_OFF = "휴무"
    INCOMPLETE = "미완료"
    SCHEDULED = "근무예정"
    ABSENT = "결근"


@dataclass(frozen=True)
class AttendanceRecord:
    """One sheet row that yielded a parseable date."""
    date: date
    start_time: Time | None = None
    end_time: Time | None = None
    note: str = ""
    status: str = ""  # 상태 열 원문 (분류 전)
    annual_leave_hours: float = 0.0
    leave_source_text: str = ""  # H열 원문
    row_number: int = -1  # 빈 행 제외 후 행 번호 (1 = 헤더)
    leave_edited: bool = False  # 사용자가 연차시간을 직접 입력한 경우
    times_edited: bool = False  # 출퇴근 시간을 사용자가 수정한 경우


@dataclass(frozen=True)
class ClassifiedRecord:
    """AttendanceRecord plus classifier output.

    ``auto_end_time`` is set only for incomplete days (clock-in without
    clock-out) where the end was filled in as start + 9h.
    """
    record: AttendanceRecord
    status: AttendanceStatus
    work_hours: float = 0.0
    break_hours: float = 0.0
    actual_work_hours: float = 0.0
    annual_leave_hours: float = 0.0
    leave_days: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    auto_end_time: Time | None = None

    @property
    def date(self) -> date:
        return self.record.date

    @property
    def start_time(self) -> Time | None:
        return self.record.start_time

    @property
    def end_time(self) -> Time | None:
        """Effective clock-out: recorded value, else the auto-filled one."""
        if self.record.end_time is not None:
            return self.record.end_time
        return self.auto_end_time

    @property
    def note(self) -> str:
        return self.record.note
