from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from ..models.column_map import LEAVE_SOURCE_COLUMN, ColumnMap
from .fields import cell_text

"""Column inference: header row -> semantic column roles.

Each non-empty header cell is lower-cased, trimmed and checked against the
keyword sets below in order; the first role whose keywords appear as a
substring claims the cell. A later header matching the same role replaces
the earlier index. Roles still unassigned fall back to a fixed position when
the header row is long enough. The leave-source column is never inferred.
"""

__all__ = [
    "ROLE_KEYWORDS",
    "POSITIONAL_FALLBACK",
    "infer_columns",
]

logger = logging.getLogger(__name__)

# 평가 순서 = dict 순서 (date -> start -> end -> status -> note)
ROLE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "date": ("날짜", "date", "일", "day", "월", "년"),
    "start": ("출근", "시작", "start", "in", "체크인", "근무시작"),
    "end": ("퇴근", "종료", "end", "out", "체크아웃", "근무종료"),
    "status": ("상태", "status", "연차"),
    "note": ("비고", "메모", "note", "remark", "comment"),
}

POSITIONAL_FALLBACK: dict[str, int] = {
    "date": 0,
    "start": 1,
    "end": 2,
    "note": 3,
    "status": 4,
}

_YEAR_PREFIX_RE = re.compile(r"^\d{4}")


def _match_role(header: str) -> str | None:
    for role, keywords in ROLE_KEYWORDS.items():
        if role == "date" and _YEAR_PREFIX_RE.match(header):
            return role
        if any(k in header for k in keywords):
            return role
    return None


def infer_columns(headers: Sequence[Any], leave_source_column: int = LEAVE_SOURCE_COLUMN) -> ColumnMap:
    """Map a header row to a ColumnMap.

    Args:
        headers: raw header cells (first non-blank sheet row)
        leave_source_column: fixed index of the annotated leave column

    Returns:
        ColumnMap with every role resolved where the row is long enough
    """
    found: dict[str, int] = {}
    for index, raw in enumerate(headers):
        header = cell_text(raw).lower()
        if not header:
            continue
        role = _match_role(header)
        if role is None:
            continue
        logger.debug(f"column {index} header={header!r} -> {role}")
        found[role] = index

    for role, position in POSITIONAL_FALLBACK.items():
        if role not in found and len(headers) > position:
            logger.debug(f"column role {role} not in header -> position {position}")
            found[role] = position

    column_map = ColumnMap(
        date=found.get("date"),
        start=found.get("start"),
        end=found.get("end"),
        note=found.get("note"),
        status=found.get("status"),
        leave_source=leave_source_column,
    )
    logger.debug(f"column map: {column_map.as_dict()}")
    return column_map
