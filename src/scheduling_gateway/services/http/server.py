from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import orjson
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...api import REGISTRY, ApiState, ToolGateway
from ...api.serializers import error_body
from ...bootstrap import configure_logging
from ...domain import GatewayError, UnknownRoute, http_status_for
from ..auth import extract_credential

logger = logging.getLogger(__name__)


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    try:
        return orjson.loads(raw) if raw else None
    except orjson.JSONDecodeError:
        logger.warning("Rejected request body that is not valid JSON")
        return None


def _error_response(error: GatewayError) -> JSONResponse:
    return JSONResponse(error_body(error), status_code=http_status_for(error.code))


def create_app(state: Optional[ApiState] = None) -> FastAPI:
    """Build the gateway application around ``state`` (a fresh one by default)."""

    api_state = state or ApiState()
    gateway = ToolGateway(api_state)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await api_state.context.aclose()

    app = FastAPI(title="Scheduling Gateway", version="0.1.0", lifespan=lifespan)
    app.state.api = api_state
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return _error_response(UnknownRoute(f"No route for {request.method} {request.url.path}"))
        return JSONResponse(
            {"status": "error", "error": "HTTP_ERROR", "message": str(exc.detail)},
            status_code=exc.status_code,
        )

    async def call_tool(request: Request) -> JSONResponse:
        response = await gateway.handle(
            await _read_json(request),
            credential=extract_credential(request.headers),
            address=request.client.host if request.client else None,
            request_id=request.headers.get("x-request-id"),
        )
        return JSONResponse(response.body, status_code=response.status_code, headers=response.headers)

    app.add_api_route("/mcp", call_tool, methods=["POST"])
    app.add_api_route("/tools", call_tool, methods=["POST"])

    @app.get("/tools")
    async def list_tools(request: Request) -> JSONResponse:
        try:
            api_state.auth.authorize(extract_credential(request.headers))
        except GatewayError as exc:
            return _error_response(exc)
        return JSONResponse({"tools": [action.describe() for action in REGISTRY.actions()]})

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    @app.get("/_debug/config")
    async def debug_config(request: Request) -> JSONResponse:
        try:
            api_state.auth.authorize(extract_credential(request.headers))
        except GatewayError as exc:
            return _error_response(exc)
        context = api_state.context
        settings = context.settings
        return JSONResponse(
            {
                "env": settings.server.env,
                "timezone": settings.scheduling.timezone,
                "cache_ttl_seconds": settings.gateway.cache_ttl_seconds,
                "rate_limit_per_minute": settings.gateway.rate_limit_per_minute,
                "auth_enabled": settings.gateway.auth_enabled,
                "calendar_backend": context.calendar.name,
                "missing_env_vars": settings.calendar.missing_env_vars,
                "resources": len(context.resource_catalog()),
                "business_hours": sorted(context.hours_catalog()),
            }
        )

    return app


def run_local_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    import asyncio

    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    configure_logging()
    app = create_app()
    settings = app.state.api.context.settings
    config = Config()
    config.bind = [f"{host or settings.server.host}:{port or settings.server.port}"]
    logger.info("Serving scheduling gateway on %s", config.bind[0])
    asyncio.run(serve(app, config))
