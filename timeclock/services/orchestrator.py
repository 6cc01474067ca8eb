from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from ..excel.reader import RawRow, WorkbookError, drop_blank_rows, read_first_sheet
from ..models.attendance import ClassifiedRecord
from ..models.column_map import LEAVE_SOURCE_COLUMN, ColumnMap
from ..models.holiday_calendar import HolidayCalendar
from ..models.issue_record import IssueRecord
from ..models.summary import MonthlySummary
from ..parsing.columns import infer_columns
from .aggregator import summarize
from .classifier import ClassificationContext, classify_records
from .progress import ProgressTracker
from .record_builder import build_records

"""Ingestion pipeline.

raw sheet -> blank-row filter -> column inference -> record builder ->
classifier -> aggregator. Failures surface as a single IngestError carrying
the message shown to the user; nothing is returned in that case so the
caller's previous result stays in place.
"""

__all__ = [
    "IngestError",
    "IngestResult",
    "MSG_NOT_ENOUGH_ROWS",
    "MSG_NO_RECORDS",
    "ingest_rows",
    "ingest_file",
]

logger = logging.getLogger(__name__)

MSG_NOT_ENOUGH_ROWS = "데이터가 충분하지 않습니다. 헤더와 최소 1행의 데이터가 필요합니다."
MSG_NO_RECORDS = "근태 데이터를 찾을 수 없습니다. 파일 형식을 확인해주세요."


class IngestError(Exception):
    """Fatal ingestion failure. ``str(e)`` is the user-facing message."""


@dataclass(frozen=True)
class IngestResult:
    column_map: ColumnMap
    records: tuple[ClassifiedRecord, ...]
    summary: MonthlySummary
    issues: list[IssueRecord] = field(default_factory=list)
    source_name: str = ""


def ingest_rows(
    rows: list[RawRow],
    calendar: HolidayCalendar,
    today: date,
    *,
    leave_source_column: int = LEAVE_SOURCE_COLUMN,
    source_name: str = "",
    show_progress: bool = False,
) -> IngestResult:
    """Run the pipeline on already-decoded rows.

    Args:
        rows: sheet rows as decoded (blank rows allowed, header first)
        calendar: holiday context read by the classifier and aggregator
        today: reference date for scheduled (future) days
        leave_source_column: fixed leave-annotation column index
        source_name: workbook name for logs and issue records
        show_progress: draw a tqdm bar on TTYs

    Raises:
        IngestError: fewer than two usable rows, or no record with a valid date
    """
    usable = drop_blank_rows(rows)
    logger.debug(f"rows: total={len(rows)} non_blank={len(usable)}")
    if len(usable) < 2:
        raise IngestError(MSG_NOT_ENOUGH_ROWS)

    column_map = infer_columns(usable[0], leave_source_column=leave_source_column)
    built = build_records(usable, column_map, file_name=source_name)
    if not built.records:
        raise IngestError(MSG_NO_RECORDS)

    ctx = ClassificationContext(calendar=calendar, today=today)
    if show_progress:
        with ProgressTracker(len(built.records)) as tracker:
            classified = classify_records(built.records, ctx, on_record=tracker.update)
    else:
        classified = classify_records(built.records, ctx)

    summary = summarize(classified, calendar)
    logger.info(
        f"ingested {source_name or '<rows>'}: records={len(classified)} "
        f"issues={len(built.issues)} holidays={calendar.source}"
    )
    return IngestResult(
        column_map=column_map,
        records=tuple(classified),
        summary=summary,
        issues=built.issues,
        source_name=source_name,
    )


def ingest_file(path: Path, calendar: HolidayCalendar, today: date, **kwargs: Any) -> IngestResult:
    """Decode the workbook's first sheet and run the pipeline.

    Raises:
        IngestError: unreadable workbook or any ingest_rows failure
    """
    logger.info(f"reading {path.name}")
    try:
        rows = read_first_sheet(path)
    except WorkbookError as e:
        raise IngestError(str(e)) from e
    kwargs.setdefault("source_name", path.name)
    return ingest_rows(rows, calendar, today, **kwargs)
