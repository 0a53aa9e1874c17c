from __future__ import annotations

import pytest

from scheduling_gateway.api import ApiState, ToolGateway
from scheduling_gateway.services import ServiceContext

from .conftest import make_settings, sample_hours, sample_resources

AVAILABILITY = {
    "tool": "availability",
    "action": "check",
    "params": {"from": "2026-03-02T00:00:00-05:00", "to": "2026-03-03T00:00:00-05:00", "resource": "Anita"},
}


def build_gateway(backend, clock, monotonic, **gateway_overrides) -> ToolGateway:
    context = ServiceContext(
        settings=make_settings(**gateway_overrides),
        backend=backend,
        clock=clock,
        monotonic=monotonic,
        resources=sample_resources(),
        business_hours=sample_hours(),
    )
    return ToolGateway(ApiState(context))


async def test_health_ping(gateway):
    response = await gateway.handle({"tool": "health", "action": "ping"}, request_id="req-1")
    assert response.status_code == 200
    assert response.body["status"] == "ok"
    assert response.body["message"] == "OK"
    assert response.body["data"] == {"pong": True, "now": "2026-03-01T12:00:00-05:00"}
    assert response.headers["X-Request-ID"] == "req-1"


async def test_resolve_reports_disambiguation_options(gateway):
    response = await gateway.handle({"tool": "resources", "action": "resolve", "params": {"name": "Profe"}})
    assert response.status_code == 409
    assert response.body["error"] == "AMBIGUOUS"
    assert len(response.body["details"]["options"]) == 2


async def test_availability_response_shape_and_cache(gateway, backend):
    first = await gateway.handle(AVAILABILITY)
    assert first.status_code == 200
    data = first.body["data"]
    assert data["from"] == "2026-03-02T00:00:00-05:00"
    assert data["business_hours"]["start"] == "08:00"
    assert data["duration_minutes"] == 45
    assert data["slots"][0] == {"start": "2026-03-02T08:00:00-05:00", "end": "2026-03-02T08:45:00-05:00"}
    assert "fromCache" not in first.body

    second = await gateway.handle(AVAILABILITY)
    assert second.body["fromCache"] is True
    assert second.body["data"] == data
    assert backend.calls["list_busy"] == 1


async def test_camel_case_params_are_accepted(gateway, backend):
    created = await gateway.handle(
        {
            "tool": "calendar",
            "action": "create",
            "params": {
                "who": "Laura",
                "when": "2026-03-02T10:00:00-05:00",
                "calendarId": "ana@cal",
                "clientRequestId": "abc",
                "unexpected": "ignored",
            },
        }
    )
    assert created.status_code == 200
    cancelled = await gateway.handle(
        {
            "tool": "calendar",
            "action": "cancel",
            "params": {"eventId": created.body["data"]["id"], "calendarId": "ana@cal"},
        }
    )
    assert cancelled.body["data"]["cancelled"] is True
    missing = await gateway.handle(
        {
            "tool": "calendar",
            "action": "cancel",
            "params": {"eventId": created.body["data"]["id"], "calendarId": "ana@cal"},
        }
    )
    assert missing.status_code == 404
    assert missing.body["error"] == "EVENT_NOT_FOUND"


async def test_repeated_create_token_is_served_from_cache(gateway, backend):
    call = {
        "tool": "calendar",
        "action": "create",
        "params": {"who": "Laura", "when": "2026-03-02T10:00:00-05:00", "resource": "Anita", "client_request_id": "t-1"},
    }
    first = await gateway.handle(call)
    second = await gateway.handle(call)
    assert first.body["data"] == second.body["data"]
    assert second.body["fromCache"] is True
    assert backend.calls["insert"] == 1


async def test_failures_are_not_cached(gateway, backend):
    backend.forbidden_calendars.add("ana@cal")
    first = await gateway.handle(AVAILABILITY)
    assert first.status_code == 403
    assert first.body["error"] == "FORBIDDEN"
    backend.forbidden_calendars.clear()
    second = await gateway.handle(AVAILABILITY)
    assert second.status_code == 200
    assert "fromCache" not in second.body


async def test_cancel_is_never_served_from_cache(gateway):
    call = {"tool": "calendar", "action": "cancel", "params": {"event_id": "nope", "calendar_id": "ana@cal"}}
    for _ in range(2):
        response = await gateway.handle(call)
        assert response.body["error"] == "EVENT_NOT_FOUND"


@pytest.mark.parametrize(
    ("body", "status", "code"),
    [
        (None, 400, "INVALID_ENVELOPE"),
        ([1, 2], 400, "INVALID_ENVELOPE"),
        ({"action": "ping"}, 400, "INVALID_ENVELOPE"),
        ({"tool": "health", "action": "ping", "params": "x"}, 400, "INVALID_ENVELOPE"),
        ({"tool": "weather", "action": "today"}, 404, "UNKNOWN_ROUTE"),
        ({"tool": "calendar", "action": "reschedule"}, 404, "UNKNOWN_ROUTE"),
        ({"tool": "resources", "action": "resolve", "params": {}}, 400, "MISSING_PARAM"),
        ({"tool": "resources", "action": "resolve", "params": {"name": "b-ana"}}, 400, "INTERNAL_ID_USED"),
        ({"tool": "resources", "action": "resolve", "params": {"name": "Pedro"}}, 404, "NOT_FOUND"),
        ({**AVAILABILITY, "params": {**AVAILABILITY["params"], "duration": "long"}}, 400, "INVALID_ENVELOPE"),
        ({**AVAILABILITY, "params": {**AVAILABILITY["params"], "to": "yesterday"}}, 400, "INVALID_RANGE"),
        ({**AVAILABILITY, "params": {**AVAILABILITY["params"], "duration": 0}}, 400, "INVALID_RANGE"),
        ({**AVAILABILITY, "params": {**AVAILABILITY["params"], "buffer": -5}}, 400, "INVALID_RANGE"),
        ({"tool": "booking", "action": "search", "params": {}}, 400, "MISSING_PARAM"),
        (
            {"tool": "calendar", "action": "create", "params": {"who": "Laura", "when": "2020-01-01T10:00", "resource": "Anita"}},
            400,
            "IN_PAST",
        ),
        (
            {"tool": "calendar", "action": "create", "params": {"who": "Laura", "when": "soon", "resource": "Anita"}},
            400,
            "INVALID_WHEN",
        ),
        (
            {
                "tool": "calendar",
                "action": "create",
                "params": {"who": "Laura", "when": "2026-03-02T10:00", "resource": "Anita", "duration": -30},
            },
            400,
            "INVALID_RANGE",
        ),
        (
            {"tool": "calendar", "action": "create", "params": {"who": "Laura", "when": "2026-03-02T10:00"}},
            400,
            "MISSING_CALENDAR_REFERENCE",
        ),
    ],
)
async def test_error_taxonomy(gateway, body, status, code):
    response = await gateway.handle(body)
    assert response.status_code == status
    assert response.body["status"] == "error"
    assert response.body["error"] == code
    assert response.body["message"]


async def test_unexpected_failure_is_internal_and_generic(gateway, backend, monkeypatch, caplog):
    async def explode(*args, **kwargs):
        raise RuntimeError("database password leaked here")

    monkeypatch.setattr(backend, "list_events", explode)
    response = await gateway.handle({"tool": "booking", "action": "search", "params": {"phone": "300"}})
    assert response.status_code == 500
    assert response.body == {"status": "error", "error": "INTERNAL", "message": "Internal server error"}
    assert "RuntimeError" in caplog.text


async def test_auth_runs_before_everything(backend, clock, monotonic):
    gateway = build_gateway(backend, clock, monotonic, api_key="s3cret")
    denied = await gateway.handle({"tool": "nope", "action": "nope"})
    assert denied.status_code == 401
    assert denied.body["error"] == "UNAUTHORIZED"
    allowed = await gateway.handle({"tool": "health", "action": "ping"}, credential="s3cret")
    assert allowed.status_code == 200


async def test_rate_limit_window(backend, clock, monotonic):
    gateway = build_gateway(backend, clock, monotonic, rate_limit_per_minute=3)
    ping = {"tool": "health", "action": "ping"}
    for remaining in (2, 1, 0):
        response = await gateway.handle(ping, credential="t", address="10.0.0.1")
        assert response.status_code == 200
        assert response.headers["X-RateLimit-Remaining"] == str(remaining)
    limited = await gateway.handle(ping, credential="t", address="10.0.0.1")
    assert limited.status_code == 429
    assert limited.body["error"] == "RATE_LIMITED"
    assert limited.headers["X-RateLimit-Remaining"] == "0"
    monotonic.advance(60)
    assert (await gateway.handle(ping, credential="t", address="10.0.0.1")).status_code == 200


async def test_response_cache_disabled_with_zero_ttl(backend, clock, monotonic):
    gateway = build_gateway(backend, clock, monotonic, cache_ttl_seconds=0)
    first = await gateway.handle({"tool": "resources", "action": "list"})
    second = await gateway.handle({"tool": "resources", "action": "list"})
    assert "fromCache" not in second.body
    assert first.body["data"] == second.body["data"]
    assert {item["resource_id"] for item in first.body["data"]} == {"b-ana", "b-carlos", "b-julian", "b-sofia"}
