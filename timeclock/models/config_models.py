from __future__ import annotations

from dataclasses import dataclass, field

from .column_map import LEAVE_SOURCE_COLUMN

"""Config dataclasses for the attendance summary tool.

The loader in timeclock/config/loader.py validates the YAML document and maps
it onto these types; every field has a default so a missing config file is a
valid configuration.
"""

__all__ = [
    "HolidayApiConfig",
    "RecomputeConfig",
    "AppConfig",
]

DEFAULT_HOLIDAY_API_URL = (
    "https://apis.data.go.kr/B090041/openapi/service/SpcdeInfoService/getRestDeInfo"
)


@dataclass(frozen=True)
class HolidayApiConfig:
    """Public special-day service (한국천문연구원 특일정보)."""
    url: str = DEFAULT_HOLIDAY_API_URL
    service_key_env: str = "HOLIDAY_API_KEY"  # .env / 환경변수 이름
    timeout_seconds: float = 5.0
    enabled: bool = True


@dataclass(frozen=True)
class RecomputeConfig:
    # False: 공휴일 토글 시 정상 근무일/필요 근무시간은 유지 (부족분/정상 근무시간만 갱신)
    refresh_work_days_on_holiday_toggle: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    leave_source_column: int = LEAVE_SOURCE_COLUMN
    holiday_api: HolidayApiConfig = field(default_factory=HolidayApiConfig)
    recompute: RecomputeConfig = field(default_factory=RecomputeConfig)
    logs_dir: str = "logs"
