from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.issue_record import IssueRecord

"""Ingestion issue log: buffered parse problems, flushed as JSON Lines.

The buffer is filled on every ingestion; it is written to
``<logs_dir>/issues-YYYYMMDD-HHMMSS.log`` (UTC) only when the CLI is asked to
(--issue-log). Serial use only.
"""

__all__ = [
    "IssueRecord",
    "IssueLogBuffer",
]

FILE_STAMP_FORMAT = "%Y%m%d-%H%M%S"


class IssueLogBuffer:
    """In-memory buffer for IssueRecords. flush() appends JSON Lines."""

    def __init__(self, logs_dir: Path | str = "logs") -> None:
        self._records: list[IssueRecord] = []
        self._logs_dir = Path(logs_dir)
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(FILE_STAMP_FORMAT)
            self._file_path = self._logs_dir / f"issues-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[IssueRecord]:
        return list(self._records)

    def append(self, record: IssueRecord) -> None:
        self._records.append(record)

    def extend(self, records: list[IssueRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file path, or None when empty."""
        if not self._records:
            return None
        target = self.file_path
        with target.open("a", encoding="utf-8") as out:
            out.writelines(f"{issue.to_json_line()}\n" for issue in self._records)
        self._records.clear()
        return target
