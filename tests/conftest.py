from __future__ import annotations

from dataclasses import replace
from datetime import datetime, time
from pathlib import Path
from typing import Dict

import pytest

from scheduling_gateway.api import ApiState, ToolGateway
from scheduling_gateway.config import (
    AppSettings,
    CalendarSettings,
    CatalogSettings,
    GatewaySettings,
    SchedulingSettings,
    ServerSettings,
)
from scheduling_gateway.core import get_zone
from scheduling_gateway.data import MemoryCalendarBackend
from scheduling_gateway.domain import BusinessHours, ResourceIdentity
from scheduling_gateway.services import ServiceContext

TZ = get_zone("America/Bogota")
# Sunday 2026-03-01, noon in Bogota.
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=TZ)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeMonotonic:
    def __init__(self) -> None:
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


def make_settings(**gateway_overrides) -> AppSettings:
    gateway = GatewaySettings(api_key="", rate_limit_per_minute=0, cache_ttl_seconds=120)
    return AppSettings(
        gateway=replace(gateway, **gateway_overrides),
        scheduling=SchedulingSettings(
            timezone="America/Bogota",
            default_slot_minutes=45,
            default_buffer_minutes=0,
            availability_cache_ttl_seconds=120,
            idempotency_ttl_seconds=86400,
            search_window_days=30,
        ),
        catalog=CatalogSettings(
            resources_path=Path("missing-resources.json"),
            business_hours_path=Path("missing-hours.json"),
        ),
        calendar=CalendarSettings(
            backend="memory",
            credentials_json=None,
            credentials_file=None,
            api_base_url="https://calendar.test/v3",
            timeout_seconds=5.0,
        ),
        server=ServerSettings(env="test", host="127.0.0.1", port=3000),
    )


def sample_resources() -> Dict[str, ResourceIdentity]:
    return {
        "b-ana": ResourceIdentity(
            id="b-ana",
            display_name="Ana María Gómez",
            aliases=("Anita",),
            calendar_id="ana@cal",
        ),
        "b-carlos": ResourceIdentity(
            id="b-carlos",
            display_name="Carlos Ruiz",
            aliases=("El Profe",),
            calendar_id="carlos@cal",
        ),
        "b-julian": ResourceIdentity(
            id="b-julian",
            display_name="Julián Pérez",
            aliases=("Juli", "Profe"),
            calendar_id="julian@cal",
        ),
        "b-sofia": ResourceIdentity(id="b-sofia", display_name="Sofía Lara"),
    }


def sample_hours() -> Dict[str, BusinessHours]:
    return {
        "default": BusinessHours(days=frozenset({1, 2, 3, 4, 5, 6}), start=time(9), end=time(18), source="default"),
        "b-ana": BusinessHours(days=frozenset({1, 2, 3, 4, 5}), start=time(8), end=time(12), source="b-ana"),
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def backend() -> MemoryCalendarBackend:
    return MemoryCalendarBackend()


@pytest.fixture
def settings() -> AppSettings:
    return make_settings()


@pytest.fixture
def context(settings, backend, clock, monotonic) -> ServiceContext:
    return ServiceContext(
        settings=settings,
        backend=backend,
        clock=clock,
        monotonic=monotonic,
        resources=sample_resources(),
        business_hours=sample_hours(),
    )


@pytest.fixture
def state(context) -> ApiState:
    return ApiState(context)


@pytest.fixture
def gateway(state) -> ToolGateway:
    return ToolGateway(state)
