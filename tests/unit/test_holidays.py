from __future__ import annotations

from datetime import date

import pytest
import requests

from timeclock.models.config_models import HolidayApiConfig
from timeclock.services.holidays import (
    DEFAULT_HOLIDAYS,
    HolidaySourceError,
    fetch_holidays,
    load_calendar,
    parse_holiday_payload,
)


class _FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=False):
        self._payload = payload
        self.status_code = status_code
        self._json_error = json_error

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value")
        return self._payload


def _payload(items):
    return {"response": {"header": {"resultCode": "00"}, "body": {"items": items, "totalCount": 0}}}


def test_default_table():
    assert len(DEFAULT_HOLIDAYS) == 16
    assert date(2025, 10, 9) in DEFAULT_HOLIDAYS
    assert all(d.year == 2025 for d in DEFAULT_HOLIDAYS)


def test_parse_payload_list_and_single_item():
    many = _payload({"item": [{"locdate": 20260101, "dateName": "1월1일"}, {"locdate": "20260301"}]})
    assert parse_holiday_payload(many) == {date(2026, 1, 1), date(2026, 3, 1)}
    single = _payload({"item": {"locdate": 20260505}})
    assert parse_holiday_payload(single) == {date(2026, 5, 5)}
    assert parse_holiday_payload(_payload("")) == set()


@pytest.mark.parametrize(
    "payload",
    [
        {"unexpected": True},
        "not json object",
        _payload({"item": [{"dateName": "no locdate"}]}),
        _payload({"item": [{"locdate": "2026-01-01"}]}),
    ],
)
def test_parse_payload_rejects_malformed(payload):
    with pytest.raises(HolidaySourceError):
        parse_holiday_payload(payload)


def test_fetch_sends_year_and_key(monkeypatch):
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen.update(url=url, params=params, timeout=timeout)
        return _FakeResponse(_payload({"item": {"locdate": 20260101}}))

    monkeypatch.setattr("timeclock.services.holidays.requests.get", fake_get)
    cfg = HolidayApiConfig(timeout_seconds=2.0)
    assert fetch_holidays(2026, "KEY", cfg) == {date(2026, 1, 1)}
    assert seen["url"] == cfg.url
    assert seen["params"]["solYear"] == 2026
    assert seen["params"]["serviceKey"] == "KEY"
    assert seen["params"]["_type"] == "json"
    assert seen["timeout"] == 2.0


def test_fetch_http_error(monkeypatch):
    monkeypatch.setattr(
        "timeclock.services.holidays.requests.get",
        lambda url, params=None, timeout=None: _FakeResponse(status_code=500),
    )
    with pytest.raises(HolidaySourceError, match="status 500"):
        fetch_holidays(2026, "KEY", HolidayApiConfig())


def test_fetch_non_json(monkeypatch):
    monkeypatch.setattr(
        "timeclock.services.holidays.requests.get",
        lambda url, params=None, timeout=None: _FakeResponse(json_error=True),
    )
    with pytest.raises(HolidaySourceError):
        fetch_holidays(2026, "KEY", HolidayApiConfig())


def test_load_calendar_disabled_uses_defaults():
    cal = load_calendar(2025, HolidayApiConfig(enabled=False))
    assert cal.source == "fallback"
    assert cal.dates == set(DEFAULT_HOLIDAYS)
    assert cal.is_protected(date(2025, 10, 9))


def test_load_calendar_without_key_falls_back(monkeypatch):
    monkeypatch.delenv("HOLIDAY_API_KEY", raising=False)
    called = []
    monkeypatch.setattr(
        "timeclock.services.holidays.requests.get",
        lambda *a, **k: called.append(1),
    )
    cal = load_calendar(2025)
    assert cal.source == "fallback"
    assert not called


def test_load_calendar_network_failure_falls_back(monkeypatch):
    monkeypatch.setenv("HOLIDAY_API_KEY", "KEY")

    def boom(url, params=None, timeout=None):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr("timeclock.services.holidays.requests.get", boom)
    cal = load_calendar(2025)
    assert cal.source == "fallback"
    assert len(cal) == 16


def test_load_calendar_from_api(monkeypatch):
    monkeypatch.setenv("MY_KEY", "KEY")
    monkeypatch.setattr(
        "timeclock.services.holidays.requests.get",
        lambda url, params=None, timeout=None: _FakeResponse(
            _payload({"item": [{"locdate": 20251003}, {"locdate": 20251009}, {"locdate": 20251225}]})
        ),
    )
    cal = load_calendar(2025, HolidayApiConfig(service_key_env="MY_KEY"))
    assert cal.source == "api"
    assert cal.dates == {date(2025, 10, 3), date(2025, 10, 9), date(2025, 12, 25)}
    # the default table stays protected even when the API answered
    assert cal.is_protected(date(2025, 10, 9))
