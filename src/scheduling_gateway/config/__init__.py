"""Configuration models and helpers."""

from __future__ import annotations

from .catalog import load_business_hours, load_resources, parse_business_hours, parse_resources
from .settings import (
    AppSettings,
    CalendarSettings,
    CatalogSettings,
    GatewaySettings,
    SchedulingSettings,
    ServerSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "AppSettings",
    "CalendarSettings",
    "CatalogSettings",
    "GatewaySettings",
    "SchedulingSettings",
    "ServerSettings",
    "get_settings",
    "load_business_hours",
    "load_resources",
    "load_settings",
    "parse_business_hours",
    "parse_resources",
]
