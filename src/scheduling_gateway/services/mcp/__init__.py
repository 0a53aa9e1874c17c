"""MCP surface for the scheduling gateway."""

from .server import build_mcp_server, run_mcp_server

__all__ = ["build_mcp_server", "run_mcp_server"]
