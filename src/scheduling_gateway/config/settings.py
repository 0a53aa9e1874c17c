from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class GatewaySettings:
    api_key: str
    rate_limit_per_minute: int
    cache_ttl_seconds: int

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def rate_limit_enabled(self) -> bool:
        return self.rate_limit_per_minute > 0


@dataclass(frozen=True)
class SchedulingSettings:
    timezone: str
    default_slot_minutes: int
    default_buffer_minutes: int
    availability_cache_ttl_seconds: int
    idempotency_ttl_seconds: int
    search_window_days: int


@dataclass(frozen=True)
class CatalogSettings:
    resources_path: Path
    business_hours_path: Path


@dataclass(frozen=True)
class CalendarSettings:
    backend: str
    credentials_json: Optional[str]
    credentials_file: Optional[Path]
    api_base_url: str
    timeout_seconds: float

    @property
    def missing_env_vars(self) -> list[str]:
        if self.backend != "google" or self.credentials_json or self.credentials_file:
            return []
        return ["GOOGLE_CALENDAR_CREDENTIALS_JSON"]


@dataclass(frozen=True)
class ServerSettings:
    env: str
    host: str
    port: int


@dataclass(frozen=True)
class AppSettings:
    gateway: GatewaySettings
    scheduling: SchedulingSettings
    catalog: CatalogSettings
    calendar: CalendarSettings
    server: ServerSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _path_from_env(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    return Path(raw) if raw and raw.strip() else None


def load_settings() -> AppSettings:
    cache_ttl = _int_from_env("CACHE_TTL_SECONDS", 120)

    gateway = GatewaySettings(
        api_key=os.getenv("API_KEY", "").strip(),
        rate_limit_per_minute=_int_from_env("RATE_LIMIT_PER_MINUTE", 60),
        cache_ttl_seconds=cache_ttl,
    )

    scheduling = SchedulingSettings(
        timezone=os.getenv("TIMEZONE", "America/Bogota"),
        default_slot_minutes=_int_from_env("DEFAULT_SLOT_MINUTES", 45),
        default_buffer_minutes=_int_from_env("DEFAULT_BUFFER_MINUTES", 0),
        availability_cache_ttl_seconds=_int_from_env("AVAILABILITY_CACHE_TTL_SECONDS", cache_ttl),
        idempotency_ttl_seconds=_int_from_env("IDEMPOTENCY_TTL_SECONDS", 24 * 60 * 60),
        search_window_days=_int_from_env("SEARCH_WINDOW_DAYS", 30),
    )

    catalog = CatalogSettings(
        resources_path=Path(os.getenv("RESOURCES_JSON", "./data/resources.json")),
        business_hours_path=Path(os.getenv("BUSINESS_HOURS_JSON", "./data/business_hours.json")),
    )

    calendar = CalendarSettings(
        backend=os.getenv("CALENDAR_BACKEND", "google").strip().lower() or "google",
        credentials_json=os.getenv("GOOGLE_CALENDAR_CREDENTIALS_JSON"),
        credentials_file=_path_from_env("GOOGLE_CALENDAR_CREDENTIALS_FILE"),
        api_base_url=os.getenv("GOOGLE_CALENDAR_API_BASE_URL", "https://www.googleapis.com/calendar/v3"),
        timeout_seconds=float(_int_from_env("GOOGLE_CALENDAR_TIMEOUT_SECONDS", 30)),
    )

    server = ServerSettings(
        env=os.getenv("APP_ENV", "development"),
        host=os.getenv("HOST", "127.0.0.1"),
        port=_int_from_env("PORT", 3000),
    )

    return AppSettings(
        gateway=gateway,
        scheduling=scheduling,
        catalog=catalog,
        calendar=calendar,
        server=server,
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()
