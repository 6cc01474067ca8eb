from __future__ import annotations

from dataclasses import dataclass

from .attendance import ClassifiedRecord

"""MonthlySummary: aggregate figures for one month of attendance."""

__all__ = [
    "MonthlySummary",
]


@dataclass(frozen=True)
class MonthlySummary:
    """Aggregated month totals.

    Hour fields are rounded to 2 decimals when the summary is built;
    ``detailed_data`` carries the records the totals were folded from.
    ``regular_hours`` is the table total of actual work hours (displayed as
    정상 근무시간), not the per-record regular/overtime split.
    """
    total_work_hours: float
    total_break_hours: float
    regular_hours: float
    overtime_hours: float
    annual_leave_days: float
    shortage_hours: float  # 양수 = 여유, 음수 = 부족
    normal_work_days: int
    required_work_hours: float
    detailed_data: tuple[ClassifiedRecord, ...] = ()

    @property
    def shortage_state(self) -> str:
        if self.shortage_hours > 0:
            return "surplus"
        if self.shortage_hours < 0:
            return "shortage"
        return "balanced"

    def totals(self) -> dict[str, float | int | str]:
        """Scalar fields only (no per-record data)."""
        return {
            "total_work_hours": self.total_work_hours,
            "total_break_hours": self.total_break_hours,
            "regular_hours": self.regular_hours,
            "overtime_hours": self.overtime_hours,
            "annual_leave_days": self.annual_leave_days,
            "shortage_hours": self.shortage_hours,
            "shortage_state": self.shortage_state,
            "normal_work_days": self.normal_work_days,
            "required_work_hours": self.required_work_hours,
        }
