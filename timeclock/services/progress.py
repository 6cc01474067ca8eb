from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.attendance import ClassifiedRecord

"""Progress display while classifying records (tqdm, TTY only).

Disabled when stdout is not a TTY so CI logs stay free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Single tqdm bar over the records of one workbook."""

    def __init__(self, total_records: int, *, description: str = "Classifying") -> None:
        self.total_records = total_records
        self.description = description
        self.processed = 0
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_records,
                desc=description,
                unit="day",
                leave=False,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def update(self, record: ClassifiedRecord) -> None:
        """Advance by one record (usable as the classifier's on_record hook)."""
        self.processed += 1
        if self.pbar is not None:
            self.pbar.set_postfix_str(f"{record.date.isoformat()} {record.status.value}")
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
