from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import AppConfig, HolidayApiConfig, RecomputeConfig

"""Config loader.

Responsibilities:
- Load YAML (default config/attendance.yml)
- Validate against the bundled JSON schema (schema.json next to this module)
- Apply defaults for every missing key

A missing file is not an error for ``load_config_or_default``; a file that
exists but is invalid always is.
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "load_config_or_default",
]

SCHEMA_PATH = Path(__file__).with_name("schema.json")
DEFAULT_CONFIG_PATH = Path("config/attendance.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or not JSON, or data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"bundled config schema missing: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"schema.json is not valid JSON: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config rejected by schema: {e.message}") from e


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    defaults = AppConfig()
    api_raw = data.get("holiday_api", {})
    api_defaults = defaults.holiday_api
    api = HolidayApiConfig(
        url=api_raw.get("url", api_defaults.url),
        service_key_env=api_raw.get("service_key_env", api_defaults.service_key_env),
        timeout_seconds=float(api_raw.get("timeout_seconds", api_defaults.timeout_seconds)),
        enabled=api_raw.get("enabled", api_defaults.enabled),
    )
    recompute_raw = data.get("recompute", {})
    recompute = RecomputeConfig(
        refresh_work_days_on_holiday_toggle=recompute_raw.get(
            "refresh_work_days_on_holiday_toggle",
            defaults.recompute.refresh_work_days_on_holiday_toggle,
        ),
    )
    return AppConfig(
        leave_source_column=data.get("leave_source_column", defaults.leave_source_column),
        holiday_api=api,
        recompute=recompute,
        logs_dir=data.get("logs_dir", defaults.logs_dir),
    )


def load_config_or_default(path: Path | None = None) -> AppConfig:
    """load_config when the file exists, built-in defaults otherwise."""
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return AppConfig()
    return load_config(path)
