from __future__ import annotations

from dataclasses import dataclass

"""Wall-clock time value used for clock-in / clock-out cells.

No timezone, no date component. Minutes since midnight is the only arithmetic
the classifier needs.
"""

__all__ = [
    "Time",
]


@dataclass(frozen=True)
class Time:
    """Hour/minute pair (hours 0-23, minutes 0-59)."""
    hours: int
    minutes: int

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    def plus_hours(self, hours: int) -> Time:
        """Shift by whole hours, wrapping past midnight."""
        h = self.hours + hours
        if h >= 24:
            h -= 24
        return Time(hours=h, minutes=self.minutes)

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}"
