from __future__ import annotations

from datetime import tzinfo
from typing import Any, Dict, Mapping

from ..domain import GatewayError, ResolvedResource
from ..services import AvailabilityResult
from .models import AvailabilityPayload, ResourcePayload

MASK = "***"
SENSITIVE_MARKERS = ("key", "token", "password", "secret", "private")
MAX_LOGGED_LENGTH = 200


def serialize_resource(resource: ResolvedResource) -> Dict[str, Any]:
    return ResourcePayload.from_domain(resource).model_dump()


def serialize_availability(result: AvailabilityResult, tz: tzinfo) -> Dict[str, Any]:
    return AvailabilityPayload.from_domain(result, tz).model_dump(by_alias=True)


def success_body(data: Any, *, from_cache: bool = False) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": "ok", "message": "OK", "data": data}
    if from_cache:
        body["fromCache"] = True
    return body


def error_body(error: GatewayError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": "error", "error": error.code.value, "message": error.message}
    if error.details:
        body["details"] = error.details
    return body


def mask_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of ``params`` that is safe to write to the log."""

    masked: Dict[str, Any] = {}
    for name, value in params.items():
        lowered = str(name).lower()
        if any(marker in lowered for marker in SENSITIVE_MARKERS):
            masked[name] = MASK
        elif isinstance(value, Mapping):
            masked[name] = mask_params(value)
        elif isinstance(value, str) and len(value) > MAX_LOGGED_LENGTH:
            masked[name] = value[:MAX_LOGGED_LENGTH] + "..."
        else:
            masked[name] = value
    return masked
