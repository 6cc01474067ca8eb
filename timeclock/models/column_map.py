from __future__ import annotations

from dataclasses import dataclass

"""ColumnMap model: semantic column role -> zero-based sheet column index."""

__all__ = [
    "ColumnMap",
    "LEAVE_SOURCE_COLUMN",
]

# H열 (0부터 세면 7번)
LEAVE_SOURCE_COLUMN = 7


@dataclass(frozen=True)
class ColumnMap:
    """Resolved column roles for one sheet.

    A role is None only when the header row is too short for its positional
    fallback; the record builder reads such a role as an empty cell.
    """
    date: int | None
    start: int | None
    end: int | None
    note: int | None
    status: int | None
    leave_source: int = LEAVE_SOURCE_COLUMN

    def as_dict(self) -> dict[str, int | None]:
        return {
            "date": self.date,
            "start": self.start,
            "end": self.end,
            "note": self.note,
            "status": self.status,
            "leave_source": self.leave_source,
        }
