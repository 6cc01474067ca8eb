from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.attendance import AttendanceRecord
from ..models.column_map import ColumnMap
from ..models.issue_record import IssueRecord
from ..parsing.fields import cell_text, parse_date, parse_time

"""Record builder: raw rows + ColumnMap -> AttendanceRecords for one month.

The first row is the header. Rows whose date cell does not parse are dropped
(and reported); the remaining records are filtered to the month and year of
the first parsed record.
"""

__all__ = [
    "BuildResult",
    "build_records",
]

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    records: list[AttendanceRecord]
    issues: list[IssueRecord] = field(default_factory=list)
    dropped_other_month: int = 0


def _cell(row: Sequence[Any], index: int | None) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def build_records(rows: Sequence[Sequence[Any]], column_map: ColumnMap, file_name: str = "") -> BuildResult:
    """Turn data rows (header included at index 0) into AttendanceRecords.

    Args:
        rows: non-blank sheet rows, header first
        column_map: resolved column roles
        file_name: workbook name, only used in issue records

    Returns:
        BuildResult with month-filtered records and non-fatal parse issues
    """
    records: list[AttendanceRecord] = []
    issues: list[IssueRecord] = []

    for offset, row in enumerate(rows[1:], start=2):
        if not row:
            continue
        raw_date = _cell(row, column_map.date)
        day = parse_date(raw_date)
        if day is None:
            issues.append(IssueRecord.create(file_name, offset, "date", "DATE_UNPARSEABLE", raw_date))
            logger.debug(f"row {offset}: date not parseable {raw_date!r} -> skipped")
            continue

        start = parse_time(_cell(row, column_map.start))
        end = parse_time(_cell(row, column_map.end))
        for role, raw, parsed in (
            ("start", _cell(row, column_map.start), start),
            ("end", _cell(row, column_map.end), end),
        ):
            if parsed is None and cell_text(raw) not in ("", "-"):
                issues.append(IssueRecord.create(file_name, offset, role, "TIME_UNPARSEABLE", raw))

        records.append(
            AttendanceRecord(
                date=day,
                start_time=start,
                end_time=end,
                note=cell_text(_cell(row, column_map.note)),
                status=cell_text(_cell(row, column_map.status)),
                leave_source_text=cell_text(_cell(row, column_map.leave_source)),
                row_number=offset,
            )
        )

    if not records:
        return BuildResult(records=[], issues=issues)

    # 첫 레코드의 연/월만 남김
    first = records[0].date
    in_month = [r for r in records if r.date.year == first.year and r.date.month == first.month]
    dropped = len(records) - len(in_month)
    if dropped:
        logger.info(f"filtered to {first.year}-{first.month:02d}: dropped {dropped} record(s) from other months")
    return BuildResult(records=in_month, issues=issues, dropped_other_month=dropped)
