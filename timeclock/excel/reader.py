from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

"""Workbook reader: first sheet -> ordered rows of raw cell values.

The decoder (pandas + openpyxl/xlrd) is the only place that knows about the
file format. Everything downstream consumes ``list[RawRow]`` where a RawRow is
an ordered list of cell values (str, int, float, datetime, time or None).
"""

__all__ = [
    "RawRow",
    "WorkbookError",
    "SUPPORTED_SUFFIXES",
    "read_first_sheet",
    "drop_blank_rows",
]

RawRow = list[Any]

SUPPORTED_SUFFIXES = (".xlsx", ".xls")


class WorkbookError(Exception):
    """Raised when the workbook cannot be opened or decoded."""


def _is_blank_cell(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def read_first_sheet(path: Path) -> list[RawRow]:
    """Read the first sheet of a workbook without header interpretation.

    Parameters
    ----------
    path: .xlsx / .xls 파일 경로

    NaN / NaT cells come back as None. Literal strings such as "NA" are kept
    as text (pandas default NA conversion disabled).
    """
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise WorkbookError("엑셀 파일(.xlsx, .xls)만 업로드 가능합니다.")
    if not path.exists():
        raise WorkbookError(f"file not found: {path}")
    try:
        xls = pd.ExcelFile(path)
        if not xls.sheet_names:
            raise WorkbookError(f"workbook has no sheets: {path.name}")
        # 첫 번째 시트만 사용
        df = xls.parse(xls.sheet_names[0], header=None, keep_default_na=False, na_values=[""])
    except WorkbookError:
        raise
    except Exception as e:
        raise WorkbookError(f"파일을 읽는 중 오류가 발생했습니다: {e}") from e

    df = df.astype(object).where(df.notna(), None)
    rows: list[RawRow] = []
    for raw in df.itertuples(index=False, name=None):
        rows.append([None if v is pd.NaT else v for v in raw])
    return rows


def drop_blank_rows(rows: list[RawRow]) -> list[RawRow]:
    """Discard rows whose every cell is empty or whitespace."""
    return [row for row in rows if row and not all(_is_blank_cell(v) for v in row)]
