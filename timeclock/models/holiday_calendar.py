from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

"""HolidayCalendar: the mutable set of public holidays for the session.

Passed explicitly to the classifier and aggregator. A protected subset
(the built-in default table) can never be removed by a user toggle.
"""

__all__ = [
    "HolidayCalendar",
    "ProtectedHolidayError",
]


class ProtectedHolidayError(ValueError):
    """Raised when removal of a protected default holiday is attempted."""


@dataclass
class HolidayCalendar:
    dates: set[date] = field(default_factory=set)
    protected: frozenset[date] = frozenset()
    source: str = "empty"  # "api" | "fallback" | "empty"

    @classmethod
    def from_dates(
        cls, dates: Iterable[date], protected: Iterable[date] = (), source: str = "fallback"
    ) -> HolidayCalendar:
        return cls(dates=set(dates), protected=frozenset(protected), source=source)

    def __contains__(self, day: object) -> bool:
        return day in self.dates

    def __len__(self) -> int:
        return len(self.dates)

    @staticmethod
    def is_weekend(day: date) -> bool:
        return day.weekday() >= 5

    def is_holiday(self, day: date) -> bool:
        return day in self.dates

    def is_rest_day(self, day: date) -> bool:
        """Weekend or public holiday."""
        return self.is_weekend(day) or self.is_holiday(day)

    def is_workday(self, day: date) -> bool:
        return not self.is_rest_day(day)

    def is_protected(self, day: date) -> bool:
        return day in self.protected

    def add(self, day: date) -> None:
        self.dates.add(day)

    def remove(self, day: date) -> None:
        if day in self.protected:
            raise ProtectedHolidayError("기본 공휴일은 해제할 수 없습니다.")
        self.dates.discard(day)

    def copy(self) -> HolidayCalendar:
        return HolidayCalendar(dates=set(self.dates), protected=self.protected, source=self.source)
