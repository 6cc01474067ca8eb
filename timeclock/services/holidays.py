from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any

import requests

from ..models.config_models import HolidayApiConfig
from ..models.holiday_calendar import HolidayCalendar

"""Holiday calendar source: public special-day API with a static fallback.

One lookup per session, keyed by calendar year. Any failure (no service key,
network error, non-200, malformed payload) is logged as a warning and the
built-in default table is used instead; the caller never sees an exception.
The default table is also the protected subset users cannot un-check.
"""

__all__ = [
    "DEFAULT_HOLIDAYS",
    "HolidaySourceError",
    "fetch_holidays",
    "parse_holiday_payload",
    "default_calendar",
    "load_calendar",
]

logger = logging.getLogger(__name__)

# 2025년 기본 공휴일
DEFAULT_HOLIDAYS: frozenset[date] = frozenset(
    {
        date(2025, 1, 1),  # 신정
        date(2025, 2, 9), date(2025, 2, 10), date(2025, 2, 11), date(2025, 2, 12),  # 설날 연휴
        date(2025, 3, 1),  # 삼일절
        date(2025, 5, 5),  # 어린이날
        date(2025, 5, 15),  # 부처님오신날
        date(2025, 6, 6),  # 현충일
        date(2025, 8, 15),  # 광복절
        date(2025, 10, 3), date(2025, 10, 4), date(2025, 10, 5), date(2025, 10, 6),  # 추석 연휴
        date(2025, 10, 9),  # 한글날
        date(2025, 12, 25),  # 성탄절
    }
)


class HolidaySourceError(Exception):
    """Raised by fetch_holidays; load_calendar turns it into the fallback."""


def _locdate_to_date(locdate: Any) -> date:
    text = str(locdate).strip()
    if len(text) != 8 or not text.isdigit():
        raise HolidaySourceError(f"invalid locdate: {locdate!r}")
    return date(int(text[0:4]), int(text[4:6]), int(text[6:8]))


def parse_holiday_payload(payload: Any) -> set[date]:
    """Extract dates from ``response.body.items.item[].locdate``.

    The service returns a bare dict (not a list) when only one item exists,
    and an empty string for ``items`` when there are none.
    """
    try:
        body = payload["response"]["body"]
    except (KeyError, TypeError) as e:
        raise HolidaySourceError(f"unexpected payload shape: {e}") from e
    items = body.get("items") if isinstance(body, dict) else None
    if not items:
        return set()
    entries = items.get("item", []) if isinstance(items, dict) else []
    if isinstance(entries, dict):
        entries = [entries]
    try:
        return {_locdate_to_date(entry["locdate"]) for entry in entries}
    except (KeyError, TypeError, ValueError) as e:
        raise HolidaySourceError(f"invalid holiday entry: {e}") from e


def fetch_holidays(year: int, service_key: str, cfg: HolidayApiConfig) -> set[date]:
    """GET the year's public holidays. Raises HolidaySourceError on any failure."""
    params = {
        "serviceKey": service_key,
        "solYear": year,
        "numOfRows": 100,
        "_type": "json",
    }
    try:
        response = requests.get(cfg.url, params=params, timeout=cfg.timeout_seconds)
    except requests.RequestException as e:
        raise HolidaySourceError(f"holiday API request failed: {e}") from e
    if response.status_code != 200:
        raise HolidaySourceError(f"holiday API status {response.status_code}")
    try:
        payload = response.json()
    except ValueError as e:
        raise HolidaySourceError(f"holiday API returned non-JSON body: {e}") from e
    return parse_holiday_payload(payload)


def default_calendar() -> HolidayCalendar:
    return HolidayCalendar.from_dates(DEFAULT_HOLIDAYS, protected=DEFAULT_HOLIDAYS, source="fallback")


def load_calendar(year: int, cfg: HolidayApiConfig | None = None) -> HolidayCalendar:
    """Fetch-or-fallback. Never raises.

    The service key is read from the environment variable named by
    ``cfg.service_key_env`` (.env is loaded by the CLI beforehand).
    """
    cfg = cfg or HolidayApiConfig()
    if not cfg.enabled:
        logger.info("holiday API disabled -> default holidays")
        return default_calendar()

    service_key = os.getenv(cfg.service_key_env, "").strip()
    if not service_key:
        logger.warning(f"{cfg.service_key_env} not set -> default holidays")
        return default_calendar()

    try:
        dates = fetch_holidays(year, service_key, cfg)
    except HolidaySourceError as e:
        logger.warning(f"공휴일 API 로드 실패, 기본 공휴일 사용: {e}")
        return default_calendar()

    logger.info(f"holidays loaded from API: year={year} count={len(dates)}")
    return HolidayCalendar.from_dates(dates, protected=DEFAULT_HOLIDAYS, source="api")
