# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import date, timedelta
from pathlib import Path

import pandas as pd
import pytest

from timeclock.logging.init import reset_logging
from timeclock.models.holiday_calendar import HolidayCalendar
from timeclock.services.holidays import DEFAULT_HOLIDAYS

HEADER = ["날짜", "출근", "퇴근", "비고", "상태"]

# 2025-09 has 22 weekdays and no public holiday
SEPTEMBER_2025 = [date(2025, 9, 1) + timedelta(days=i) for i in range(30)]
SEPTEMBER_WEEKDAYS = [d for d in SEPTEMBER_2025 if d.weekday() < 5]
TODAY = date(2025, 10, 17)


def weekday_rows(days: list[date], start: str = "09:00", end: str = "18:00") -> list[list[object]]:
    return [[d.isoformat(), start, end, "", ""] for d in days]


def make_excel(path: Path, rows: list[list[object]], extra_sheets: dict[str, list[list[object]]] | None = None) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="근태", header=False, index=False)
        for name, sheet_rows in (extra_sheets or {}).items():
            pd.DataFrame(sheet_rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


@pytest.fixture()
def excel_writer():
    """Returns make_excel(path, rows, extra_sheets=None) -> path."""
    return make_excel


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def september_weekdays() -> list[date]:
    return list(SEPTEMBER_WEEKDAYS)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def empty_calendar() -> HolidayCalendar:
    return HolidayCalendar()


@pytest.fixture()
def default_calendar() -> HolidayCalendar:
    return HolidayCalendar.from_dates(DEFAULT_HOLIDAYS, protected=DEFAULT_HOLIDAYS)


@pytest.fixture()
def september_rows() -> list[list[object]]:
    return [HEADER] + weekday_rows(SEPTEMBER_WEEKDAYS)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """leave_source_column: 7
logs_dir: logs
holiday_api:
  enabled: false
  service_key_env: TEST_HOLIDAY_KEY
  timeout_seconds: 2
recompute:
  refresh_work_days_on_holiday_toggle: true
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "attendance.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()
