from __future__ import annotations

import hashlib
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

import orjson
from pydantic import BaseModel, ValidationError

from ..domain import GatewayError, InternalError, InvalidEnvelope, RateLimited, http_status_for
from ..services import RateDecision
from .models import ToolCallEnvelope
from .registry import REGISTRY, ToolAction, ToolRegistry
from .serializers import error_body, mask_params, success_body
from .state import ApiState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GatewayResponse:
    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)


def parse_envelope(body: Any) -> ToolCallEnvelope:
    if not isinstance(body, dict):
        raise InvalidEnvelope("Request body must be a JSON object with tool, action and params")
    try:
        return ToolCallEnvelope.model_validate(body)
    except ValidationError as exc:
        raise InvalidEnvelope(
            details={
                "errors": [
                    {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
                    for err in exc.errors()
                ]
            }
        ) from exc


def response_cache_key(action: ToolAction, params: BaseModel) -> str:
    """``client_request_id`` when supplied, otherwise a digest of the validated params."""

    prefix = f"response:{action.tool.value}:{action.name}"
    token = getattr(params, "client_request_id", None)
    if token:
        return f"{prefix}:id:{token}"
    payload = orjson.dumps(params.model_dump(mode="json"), option=orjson.OPT_SORT_KEYS)
    return f"{prefix}:{hashlib.sha256(payload).hexdigest()}"


def rate_headers(decision: RateDecision) -> Dict[str, str]:
    if decision.remaining is None:
        return {}
    return {
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(math.ceil(decision.reset_in or 0.0)),
    }


@dataclass(slots=True)
class ToolGateway:
    """Runs one tool call through auth, rate limiting, routing, caching and execution."""

    state: ApiState
    registry: ToolRegistry = REGISTRY

    async def handle(
        self,
        body: Any,
        *,
        credential: str = "",
        address: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> GatewayResponse:
        headers: Dict[str, str] = {"X-Request-ID": request_id or uuid4().hex}
        call: Optional[ToolCallEnvelope] = None
        try:
            self.state.auth.authorize(credential)
            headers.update(rate_headers(self.state.auth.throttle(credential, address)))
            call = parse_envelope(body)
            if call.request_id and not request_id:
                headers["X-Request-ID"] = call.request_id
            action = self.registry.lookup(call.tool, call.action)
            logger.info(
                "Tool call %s.%s request_id=%s params=%s",
                call.tool,
                call.action,
                headers["X-Request-ID"],
                mask_params(call.params),
            )
            params = action.parse_params(call.params)
            data, from_cache = await self._execute(action, params)
        except GatewayError as exc:
            return self._failure(exc, headers, call)
        except Exception:
            logger.exception(
                "Unhandled failure in %s.%s request_id=%s params=%s",
                call.tool if call else "?",
                call.action if call else "?",
                headers["X-Request-ID"],
                mask_params(call.params) if call else {},
            )
            return self._failure(InternalError(), headers, call)
        return GatewayResponse(200, success_body(data, from_cache=from_cache), headers)

    async def _execute(self, action: ToolAction, params: BaseModel) -> Tuple[Any, bool]:
        cache = self.state.context.cache
        ttl = self.state.context.settings.gateway.cache_ttl_seconds
        if not action.cacheable or ttl <= 0:
            return await action.invoke(self.state, params), False

        key = response_cache_key(action, params)
        cached = cache.get(key)
        if cached is not None:
            logger.info("Response cache hit for %s", action.qualified_name)
            return cached, True
        data = await action.invoke(self.state, params)
        cache.set(key, data, ttl)
        return data, False

    def _failure(
        self,
        error: GatewayError,
        headers: Dict[str, str],
        call: Optional[ToolCallEnvelope],
    ) -> GatewayResponse:
        route = f"{call.tool}.{call.action}" if call else "-"
        logger.warning(
            "Tool call %s failed with %s: %s request_id=%s",
            route,
            error.code.value,
            error.message,
            headers["X-Request-ID"],
        )
        if isinstance(error, RateLimited):
            headers["X-RateLimit-Remaining"] = "0"
            headers["X-RateLimit-Reset"] = str(math.ceil(error.details.get("reset_in", 0.0)))
        return GatewayResponse(http_status_for(error.code), error_body(error), headers)
