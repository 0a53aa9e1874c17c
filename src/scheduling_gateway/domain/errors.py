from __future__ import annotations

from typing import Any, Dict, Optional

from .enums import ErrorCode


class GatewayError(Exception):
    """Base class for every failure the gateway reports to callers."""

    code: ErrorCode = ErrorCode.INTERNAL
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message or self.default_message
        self.details = dict(details or {})
        super().__init__(self.message)


class Unauthorized(GatewayError):
    code = ErrorCode.UNAUTHORIZED
    default_message = "Invalid API key"


class RateLimited(GatewayError):
    code = ErrorCode.RATE_LIMITED
    default_message = "Rate limit exceeded"


class InvalidEnvelope(GatewayError):
    code = ErrorCode.INVALID_ENVELOPE
    default_message = "Invalid request envelope"


class MissingParam(GatewayError):
    code = ErrorCode.MISSING_PARAM

    def __init__(self, *names: str) -> None:
        joined = ", ".join(names)
        super().__init__(f"Missing param: {joined}", details={"params": list(names)})


class InvalidRange(GatewayError):
    code = ErrorCode.INVALID_RANGE
    default_message = "Invalid date range"


class InvalidWhen(GatewayError):
    code = ErrorCode.INVALID_WHEN

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid booking time: {value}")


class InPast(GatewayError):
    code = ErrorCode.IN_PAST
    default_message = "Booking time must be in the future"


class NotFound(GatewayError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(f'No resource named "{name}" was found.')


class Ambiguous(GatewayError):
    code = ErrorCode.AMBIGUOUS

    def __init__(self, name: str, options: list[Dict[str, str]]) -> None:
        super().__init__(
            f'The name "{name}" matches several resources.',
            details={"options": options},
        )


class InternalIdUsed(GatewayError):
    code = ErrorCode.INTERNAL_ID_USED

    def __init__(self, name: str, internal_id: str) -> None:
        super().__init__(
            f'The name "{name}" is an internal identifier, not a visible name.',
            details={"internal_id": internal_id},
        )


class EventNotFound(GatewayError):
    code = ErrorCode.EVENT_NOT_FOUND
    default_message = "Event not found"


class MissingCalendarReference(GatewayError):
    code = ErrorCode.MISSING_CALENDAR_REFERENCE
    default_message = "A calendar_id or resource is required"


class Forbidden(GatewayError):
    code = ErrorCode.FORBIDDEN
    default_message = "The calendar service denied access to this calendar"


class UnknownRoute(GatewayError):
    code = ErrorCode.UNKNOWN_ROUTE
    default_message = "Unknown tool or action"


class InternalError(GatewayError):
    code = ErrorCode.INTERNAL


HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.INVALID_ENVELOPE: 400,
    ErrorCode.MISSING_PARAM: 400,
    ErrorCode.INVALID_RANGE: 400,
    ErrorCode.INVALID_WHEN: 400,
    ErrorCode.IN_PAST: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.AMBIGUOUS: 409,
    ErrorCode.INTERNAL_ID_USED: 400,
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.MISSING_CALENDAR_REFERENCE: 400,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.UNKNOWN_ROUTE: 404,
    ErrorCode.INTERNAL: 500,
}


def http_status_for(code: ErrorCode) -> int:
    return HTTP_STATUS[code]
