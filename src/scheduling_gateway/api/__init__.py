"""Tool registry, gateway pipeline and action handlers."""

from __future__ import annotations

from .dispatcher import GatewayResponse, ToolGateway, parse_envelope, response_cache_key
from .registry import REGISTRY, ToolAction, ToolRegistry, register_action
from .state import ApiState

# Import handlers so decorators run at module import time.
from . import availability, booking, calendar, health, resources  # noqa: F401

__all__ = [
    "REGISTRY",
    "ApiState",
    "GatewayResponse",
    "ToolAction",
    "ToolGateway",
    "ToolRegistry",
    "parse_envelope",
    "register_action",
    "response_cache_key",
]
