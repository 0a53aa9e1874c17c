"""Domain entities, enums, and the gateway error taxonomy."""

from __future__ import annotations

from .enums import ErrorCode, ToolName
from .errors import (
    Ambiguous,
    EventNotFound,
    Forbidden,
    GatewayError,
    InPast,
    InternalError,
    InternalIdUsed,
    InvalidEnvelope,
    InvalidRange,
    InvalidWhen,
    MissingCalendarReference,
    MissingParam,
    NotFound,
    RateLimited,
    Unauthorized,
    UnknownRoute,
    http_status_for,
)
from .models import (
    FALLBACK_HOURS,
    BookingRecord,
    BusinessHours,
    BusyInterval,
    ResolvedResource,
    ResourceIdentity,
    Slot,
)

__all__ = [
    "Ambiguous",
    "BookingRecord",
    "BusinessHours",
    "BusyInterval",
    "ErrorCode",
    "EventNotFound",
    "FALLBACK_HOURS",
    "Forbidden",
    "GatewayError",
    "InPast",
    "InternalError",
    "InternalIdUsed",
    "InvalidEnvelope",
    "InvalidRange",
    "InvalidWhen",
    "MissingCalendarReference",
    "MissingParam",
    "NotFound",
    "RateLimited",
    "ResolvedResource",
    "ResourceIdentity",
    "Slot",
    "ToolName",
    "Unauthorized",
    "UnknownRoute",
    "http_status_for",
]
