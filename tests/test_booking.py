from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from scheduling_gateway.domain import (
    BookingRecord,
    EventNotFound,
    Forbidden,
    InPast,
    InvalidRange,
    InvalidWhen,
    MissingCalendarReference,
    MissingParam,
    NotFound,
)
from scheduling_gateway.services import BookingOrchestrator, IdentityResolver

from .conftest import NOW, TZ


def local(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, day, hour, minute, tzinfo=TZ)


@pytest.fixture
def orchestrator(context) -> BookingOrchestrator:
    return BookingOrchestrator(context, IdentityResolver(context))


async def test_create_books_remote_event(orchestrator, backend):
    result = await orchestrator.create(
        who="Laura",
        when="2026-03-02T10:00:00-05:00",
        notes="Corte y barba",
        phone="+57 300 123 4567",
        resource="Anita",
    )
    assert result["start"] == "2026-03-02T10:00:00-05:00"
    assert result["end"] == "2026-03-02T10:45:00-05:00"
    assert result["resource"] == "Ana María Gómez"
    stored = backend.events["ana@cal"][result["id"]]
    assert stored.summary == "Appointment with Laura"
    assert stored.description == "Corte y barba"
    assert stored.location == "+57 300 123 4567"


async def test_date_and_time_are_read_in_configured_timezone(orchestrator):
    result = await orchestrator.create(who="Laura", date="2026-03-02", time="15:30", duration_minutes=30, resource="Carlos")
    assert result["start"] == "2026-03-02T15:30:00-05:00"
    assert result["end"] == "2026-03-02T16:00:00-05:00"


async def test_repeated_token_returns_stored_result(orchestrator, backend):
    kwargs = dict(who="Laura", when="2026-03-02T10:00:00-05:00", resource="Anita", client_request_id="req-1")
    first = await orchestrator.create(**kwargs)
    second = await orchestrator.create(**kwargs)
    assert first == second
    assert backend.calls["insert"] == 1


async def test_concurrent_identical_tokens_insert_once(orchestrator, backend):
    kwargs = dict(who="Laura", when="2026-03-02T10:00:00-05:00", resource="Anita", client_request_id="req-2")
    first, second = await asyncio.gather(orchestrator.create(**kwargs), orchestrator.create(**kwargs))
    assert first == second
    assert backend.calls["insert"] == 1


async def test_without_token_every_call_books(orchestrator, backend):
    for _ in range(2):
        await orchestrator.create(who="Laura", when="2026-03-02T10:00:00-05:00", resource="Anita")
    assert backend.calls["insert"] == 2


@pytest.mark.parametrize("when", ["2026-03-01T11:59:00-05:00", NOW.isoformat(), "2026-03-01T16:00:00Z"])
async def test_non_future_start_is_in_past(orchestrator, backend, when):
    with pytest.raises(InPast):
        await orchestrator.create(who="Laura", when=when, resource="Anita")
    assert backend.calls["insert"] == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"when": "tomorrow at noon"},
        {"date": "2026-02-31", "time": "10:00"},
        {"date": "2026-03-02", "time": "late"},
    ],
)
async def test_unparsable_start_is_invalid_when(orchestrator, kwargs):
    with pytest.raises(InvalidWhen):
        await orchestrator.create(who="Laura", resource="Anita", **kwargs)


async def test_create_requires_time_who_and_selector(orchestrator):
    with pytest.raises(MissingParam):
        await orchestrator.create(who="Laura", resource="Anita")
    with pytest.raises(MissingParam):
        await orchestrator.create(who=" ", when="2026-03-02T10:00:00-05:00", resource="Anita")
    with pytest.raises(MissingCalendarReference):
        await orchestrator.create(who="Laura", when="2026-03-02T10:00:00-05:00")


async def test_resolver_failures_surface_unchanged(orchestrator):
    with pytest.raises(NotFound):
        await orchestrator.create(who="Laura", when="2026-03-02T10:00:00-05:00", resource="Pedro")


async def test_forbidden_calendar_on_create(orchestrator, backend):
    backend.forbidden_calendars.add("ana@cal")
    with pytest.raises(Forbidden):
        await orchestrator.create(who="Laura", when="2026-03-02T10:00:00-05:00", resource="Anita")


async def test_cancel_then_cancel_again(orchestrator, backend):
    created = await orchestrator.create(who="Laura", when="2026-03-02T10:00:00-05:00", resource="Anita")
    cancelled = await orchestrator.cancel(event_id=created["id"], resource="Anita")
    assert cancelled["cancelled"] is True
    assert created["id"] not in backend.events["ana@cal"]
    with pytest.raises(EventNotFound):
        await orchestrator.cancel(event_id=created["id"], calendar_id="ana@cal")


async def test_cancel_errors(orchestrator, backend):
    with pytest.raises(MissingParam):
        await orchestrator.cancel(event_id="", calendar_id="ana@cal")
    with pytest.raises(MissingCalendarReference):
        await orchestrator.cancel(event_id="evt-1")
    backend.forbidden_calendars.add("ana@cal")
    with pytest.raises(Forbidden):
        await orchestrator.cancel(event_id="evt-1", calendar_id="ana@cal")


def seed_history(backend) -> None:
    backend.add_event(
        BookingRecord(
            id="late",
            start=local(20, 10),
            end=local(20, 11),
            calendar_id="ana@cal",
            summary="Appointment with Laura",
            location="+57 300 123 4567",
        )
    )
    backend.add_event(
        BookingRecord(
            id="early",
            start=local(2, 9),
            end=local(2, 10),
            calendar_id="carlos@cal",
            summary="Appointment with Laura",
            description="client CLI-42, phone 573001234567",
        )
    )
    backend.add_event(
        BookingRecord(
            id="other",
            start=local(3, 9),
            end=local(3, 10),
            calendar_id="julian@cal",
            summary="Appointment with Mario",
            location="3115550000",
        )
    )


async def test_search_by_phone_across_calendars_sorted(orchestrator, backend):
    seed_history(backend)
    results = await orchestrator.search(phone="300-123-4567")
    assert [item["id"] for item in results] == ["early", "late"]
    assert results[0]["resource"] == "Carlos Ruiz"
    assert results[0]["who"] == "Laura"
    assert results[0]["start"] == "2026-03-02T09:00:00-05:00"


async def test_phone_does_not_match_digits_joined_across_description_text(orchestrator, backend):
    seed_history(backend)
    # "CLI-42" followed by "573001234567" must not read as one number.
    assert await orchestrator.search(phone="4257300") == []


async def test_search_by_client_id_is_case_insensitive(orchestrator, backend):
    seed_history(backend)
    results = await orchestrator.search(client_id="cli-42")
    assert [item["id"] for item in results] == ["early"]


async def test_search_limited_to_one_resource(orchestrator, backend):
    seed_history(backend)
    results = await orchestrator.search(phone="+573001234567", resource="Anita")
    assert [item["id"] for item in results] == ["late"]


async def test_search_respects_explicit_window(orchestrator, backend):
    seed_history(backend)
    results = await orchestrator.search(
        phone="3001234567",
        start="2026-03-10T00:00:00-05:00",
        end="2026-03-31T00:00:00-05:00",
    )
    assert [item["id"] for item in results] == ["late"]


async def test_search_validation(orchestrator):
    with pytest.raises(MissingParam):
        await orchestrator.search()
    with pytest.raises(InvalidRange):
        await orchestrator.search(phone="300", start="2026-03-10T00:00:00", end="2026-03-01T00:00:00")


async def test_one_failing_calendar_fails_the_search(orchestrator, backend):
    seed_history(backend)
    backend.forbidden_calendars.add("julian@cal")
    with pytest.raises(Forbidden):
        await orchestrator.search(phone="3001234567")
