from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""IssueRecord model for the ingestion debug trail.

Parse failures never stop ingestion; each one is captured as an IssueRecord so
the user can see why a row was dropped or a field left empty. Serialized as
JSON Lines with a fixed key set.
"""

__all__ = [
    "IssueRecord",
]


@dataclass(frozen=True)
class IssueRecord:
    """One non-fatal ingestion issue.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: workbook name
        row: position among non-blank rows (1-based, header = 1). -1 when not row specific
        field: column role the value came from (date, start, end, ...)
        issue_type: UPPER_SNAKE classification, e.g. DATE_UNPARSEABLE
        raw_value: the offending cell rendered with repr()
    """
    timestamp: str
    file: str
    row: int
    field: str
    issue_type: str
    raw_value: str

    @staticmethod
    def create(file: str, row: int, field: str, issue_type: str, raw_value: object) -> IssueRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return IssueRecord(
            timestamp=ts,
            file=file,
            row=row,
            field=field,
            issue_type=issue_type,
            raw_value=repr(raw_value),
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
