from __future__ import annotations

from pathlib import Path

import pytest

from timeclock.config.loader import SCHEMA_PATH, ConfigError, load_config, load_config_or_default
from timeclock.models.config_models import DEFAULT_HOLIDAY_API_URL, AppConfig


def test_schema_is_bundled():
    assert SCHEMA_PATH.exists()
    assert SCHEMA_PATH.name == "schema.json"


def test_load_sample_config(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.leave_source_column == 7
    assert cfg.logs_dir == "logs"
    assert cfg.holiday_api.enabled is False
    assert cfg.holiday_api.service_key_env == "TEST_HOLIDAY_KEY"
    assert cfg.holiday_api.timeout_seconds == 2.0
    assert cfg.holiday_api.url == DEFAULT_HOLIDAY_API_URL
    assert cfg.recompute.refresh_work_days_on_holiday_toggle is True


def test_default_path_is_used(write_config: Path):
    assert load_config_or_default().holiday_api.service_key_env == "TEST_HOLIDAY_KEY"


def test_missing_file_gives_defaults(temp_workdir: Path):
    assert load_config_or_default() == AppConfig()
    with pytest.raises(ConfigError, match="not found"):
        load_config(temp_workdir / "config" / "missing.yml")


def test_empty_file_gives_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "attendance.yml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == AppConfig()


@pytest.mark.parametrize(
    "text, message",
    [
        ("leave_source_column: -1\n", "rejected by schema"),
        ("leave_source_column: seven\n", "rejected by schema"),
        ("unknown_key: 1\n", "rejected by schema"),
        ("holiday_api:\n  timeout_seconds: 0\n", "rejected by schema"),
        ("recompute:\n  refresh_work_days_on_holiday_toggle: maybe\n", "rejected by schema"),
        ("- a\n- b\n", "mapping"),
        ("holiday_api: [unclosed\n", "not valid YAML"),
    ],
)
def test_invalid_config(temp_workdir: Path, text: str, message: str):
    p = temp_workdir / "config" / "attendance.yml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_config(p)
