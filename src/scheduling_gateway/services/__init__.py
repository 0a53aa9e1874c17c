"""Application services orchestrating the calendar collaborator and domain logic."""

from __future__ import annotations

from .auth import AuthService, extract_credential
from .availability import AvailabilityEngine, AvailabilityResult
from .booking import BookingOrchestrator
from .context import ServiceContext
from .identity import CalendarTarget, IdentityResolver
from .ratelimit import RateDecision, RateLimiter

__all__ = [
    "AuthService",
    "AvailabilityEngine",
    "AvailabilityResult",
    "BookingOrchestrator",
    "CalendarTarget",
    "IdentityResolver",
    "RateDecision",
    "RateLimiter",
    "ServiceContext",
    "extract_credential",
]
