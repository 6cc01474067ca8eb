"""Domain models for the attendance summary tool.

Records, the holiday calendar context, the monthly summary and configuration
types used throughout the application.
"""

from .attendance import AttendanceRecord, AttendanceStatus, ClassifiedRecord
from .column_map import LEAVE_SOURCE_COLUMN, ColumnMap
from .config_models import AppConfig, HolidayApiConfig, RecomputeConfig
from .holiday_calendar import HolidayCalendar, ProtectedHolidayError
from .issue_record import IssueRecord
from .summary import MonthlySummary
from .time_value import Time

__all__ = [
    # Configuration models
    "AppConfig",
    "HolidayApiConfig",
    "RecomputeConfig",
    # Attendance models
    "AttendanceRecord",
    "AttendanceStatus",
    "ClassifiedRecord",
    "ColumnMap",
    "LEAVE_SOURCE_COLUMN",
    "HolidayCalendar",
    "ProtectedHolidayError",
    "IssueRecord",
    "MonthlySummary",
    "Time",
]
