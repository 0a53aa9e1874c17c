from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastmcp import FastMCP

from ...api import REGISTRY, ApiState, ToolAction, ToolGateway
from ...bootstrap import configure_logging

INSTRUCTIONS = (
    "Scheduling gateway tools for a booking assistant. Resolve staff names with "
    "resources_resolve, look up free slots with availability_check, then book or cancel "
    "with calendar_create / calendar_cancel. Errors carry a stable code such as "
    "AMBIGUOUS or IN_PAST in the `error` field."
)

logger = logging.getLogger(__name__)

ToolFunction = Callable[..., Awaitable[Dict[str, Any]]]


def _tool_function(gateway: ToolGateway, action: ToolAction) -> ToolFunction:
    credential = gateway.state.context.settings.gateway.api_key

    async def call(params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = await gateway.handle(
            {"tool": action.tool.value, "action": action.name, "params": params or {}},
            credential=credential,
            address="mcp",
        )
        return response.body

    call.__name__ = action.qualified_name.replace(".", "_")
    call.__doc__ = action.description
    return call


def build_mcp_server(state: Optional[ApiState] = None) -> FastMCP:
    """Expose every registered action as an MCP tool named ``<tool>_<action>``."""

    gateway = ToolGateway(state or ApiState())
    server = FastMCP(name="scheduling-gateway", instructions=INSTRUCTIONS)
    for action in REGISTRY.actions():
        function = _tool_function(gateway, action)
        logger.debug("Registering MCP tool: %s", function.__name__)
        server.tool(
            function,
            name=function.__name__,
            description=action.description,
            tags=set(action.tags),
        )
    return server


def run_mcp_server(host: str = "127.0.0.1", port: int = 8765) -> None:
    import asyncio

    configure_logging()
    server = build_mcp_server()
    asyncio.run(server.run_streamable_http_async(host=host, port=port))
