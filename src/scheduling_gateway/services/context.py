from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from ..config import AppSettings, get_settings, load_business_hours, load_resources
from ..core import get_zone
from ..data import CalendarBackend, TTLCache, build_backend
from ..domain import FALLBACK_HOURS, BusinessHours, ResourceIdentity
from .ratelimit import RateLimiter


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class _KeyedLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


@dataclass(slots=True)
class ServiceContext:
    """Process-wide state shared by the gateway and its services.

    Built once at startup and handed to every component; ``reset`` returns it
    to a freshly-started state.
    """

    settings: AppSettings = field(default_factory=get_settings)
    backend: Optional[CalendarBackend] = None
    clock: Callable[[], datetime] = _utcnow
    monotonic: Callable[[], float] = time.monotonic
    resources: Optional[Dict[str, ResourceIdentity]] = None
    business_hours: Optional[Dict[str, BusinessHours]] = None
    cache: TTLCache = field(init=False)
    rate_limiter: RateLimiter = field(init=False)
    _loaded_resources: Optional[Dict[str, ResourceIdentity]] = field(init=False, default=None)
    _loaded_hours: Optional[Dict[str, BusinessHours]] = field(init=False, default=None)
    _locks: Dict[str, _KeyedLock] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.cache = TTLCache(
            default_ttl_seconds=self.settings.gateway.cache_ttl_seconds,
            clock=self.monotonic,
        )
        self.rate_limiter = RateLimiter(
            limit=self.settings.gateway.rate_limit_per_minute,
            clock=self.monotonic,
        )
        if self.backend is None:
            self.backend = build_backend(self.settings)

    @property
    def tz(self) -> ZoneInfo:
        return get_zone(self.settings.scheduling.timezone)

    @property
    def calendar(self) -> CalendarBackend:
        assert self.backend is not None
        return self.backend

    def now(self) -> datetime:
        return self.clock().astimezone(self.tz)

    def resource_catalog(self) -> Dict[str, ResourceIdentity]:
        if self.resources is not None:
            return self.resources
        if self._loaded_resources is None:
            self._loaded_resources = load_resources(self.settings.catalog.resources_path)
        return self._loaded_resources

    def hours_catalog(self) -> Dict[str, BusinessHours]:
        if self.business_hours is not None:
            return self.business_hours
        if self._loaded_hours is None:
            self._loaded_hours = load_business_hours(self.settings.catalog.business_hours_path)
        return self._loaded_hours

    def hours_for(self, resource_id: Optional[str]) -> BusinessHours:
        """Resource override, else the ``default`` entry, else the fallback window."""

        catalog = self.hours_catalog()
        if resource_id and resource_id in catalog:
            return catalog[resource_id]
        return catalog.get("default", FALLBACK_HOURS)

    def calendars(self) -> List[ResourceIdentity]:
        return [resource for resource in self.resource_catalog().values() if resource.calendar_id]

    @asynccontextmanager
    async def exclusive(self, key: str) -> AsyncIterator[None]:
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _KeyedLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._locks.pop(key, None)

    def reset(self) -> None:
        self.cache.clear()
        self.rate_limiter.reset()
        self._loaded_resources = None
        self._loaded_hours = None
        self._locks.clear()

    async def aclose(self) -> None:
        if self.backend is not None:
            await self.backend.aclose()
