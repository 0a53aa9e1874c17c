from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...config.settings import CalendarSettings
from ...core import get_zone
from ...domain import BookingRecord, BusyInterval
from .base import CalendarBackend, CalendarBackendError, CalendarRequestError

logger = logging.getLogger(__name__)

GOOGLE_OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"


class GoogleCredentials(BaseModel):
    """OAuth client credentials used for refresh-token exchange."""

    model_config = ConfigDict(extra="ignore")

    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "GoogleCredentials":
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise CalendarBackendError(f"Credential JSON must be valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise CalendarBackendError("Credential JSON must decode to a JSON object")
        for nested in ("installed", "web"):
            if isinstance(payload.get(nested), dict):
                payload = {**payload[nested], **payload}
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            fields = ", ".join(str(error["loc"][0]) for error in exc.errors())
            raise CalendarBackendError(f"Credential JSON is missing required field(s): {fields}") from exc


class GoogleTokenSource:
    """Caches the access token until shortly before it expires."""

    def __init__(self, credentials: GoogleCredentials, http_client: httpx.AsyncClient) -> None:
        self._credentials = credentials
        self._http_client = http_client
        self._access_token: Optional[str] = None
        self._expires_at: Optional[datetime] = None
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return (
            self._access_token is not None
            and self._expires_at is not None
            and datetime.now(timezone.utc) < self._expires_at
        )

    async def token(self) -> str:
        if self._is_fresh():
            return self._access_token  # type: ignore[return-value]
        async with self._lock:
            if not self._is_fresh():
                await self._refresh()
        return self._access_token  # type: ignore[return-value]

    async def _refresh(self) -> None:
        try:
            response = await self._http_client.post(
                GOOGLE_OAUTH_TOKEN_URL,
                data={
                    "client_id": self._credentials.client_id,
                    "client_secret": self._credentials.client_secret,
                    "refresh_token": self._credentials.refresh_token,
                    "grant_type": "refresh_token",
                },
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise CalendarBackendError(f"Google OAuth token refresh failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise CalendarRequestError(status_code=response.status_code, message=_error_message(response))

        payload = response.json()
        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token.strip():
            raise CalendarBackendError("Google OAuth token response is missing access_token")
        expires_in = payload.get("expires_in")
        lifetime = int(expires_in) if isinstance(expires_in, (int, float)) and expires_in > 0 else 3600
        self._access_token = access_token.strip()
        self._expires_at = datetime.now(timezone.utc) + timedelta(seconds=max(lifetime - 60, 30))


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return " ".join(error["message"].split())[:200]
        if isinstance(error, str) and error.strip():
            return error.strip()[:200]
    text = response.text.strip()
    return " ".join(text.split())[:200] if text else "Request failed without an error payload"


def _rfc3339(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_google_time(payload: Any, tz: tzinfo) -> Optional[datetime]:
    """Parse an event time. All-day dates and naive values are read in ``tz``."""
    if not isinstance(payload, dict):
        return None
    raw = payload.get("dateTime") or payload.get("date")
    if not raw:
        return None
    parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


class GoogleCalendarBackend(CalendarBackend):
    """Google Calendar v3 REST backend."""

    def __init__(
        self,
        settings: CalendarSettings,
        credentials: GoogleCredentials,
        *,
        timezone_name: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings
        self._timezone_name = timezone_name
        self._tz = get_zone(timezone_name)
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=settings.timeout_seconds)
        self._tokens = GoogleTokenSource(credentials, self._http_client)

    @classmethod
    def from_settings(cls, settings: CalendarSettings, *, timezone_name: str) -> "GoogleCalendarBackend":
        if settings.credentials_json:
            raw: str | bytes = settings.credentials_json
        elif settings.credentials_file is not None:
            raw = settings.credentials_file.read_bytes()
        else:
            raise CalendarBackendError(
                "Missing Google credentials: set GOOGLE_CALENDAR_CREDENTIALS_JSON or GOOGLE_CALENDAR_CREDENTIALS_FILE"
            )
        return cls(settings, GoogleCredentials.from_json(raw), timezone_name=timezone_name)

    @property
    def name(self) -> str:
        return "google"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        token = await self._tokens.token()
        url = f"{self._settings.api_base_url.rstrip('/')}{path}"
        try:
            response = await self._http_client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            raise CalendarBackendError(f"Google Calendar request failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise CalendarRequestError(status_code=response.status_code, message=_error_message(response))
        if response.status_code == 204 or not response.content:
            return {}
        payload = response.json()
        if not isinstance(payload, dict):
            raise CalendarBackendError("Google Calendar returned an unexpected payload shape")
        return payload

    async def list_busy(self, calendar_id: str, start: datetime, end: datetime) -> List[BusyInterval]:
        payload = await self._request(
            "POST",
            "/freeBusy",
            json_body={
                "timeMin": _rfc3339(start),
                "timeMax": _rfc3339(end),
                "timeZone": self._timezone_name,
                "items": [{"id": calendar_id}],
            },
        )
        calendar = (payload.get("calendars") or {}).get(calendar_id) or {}
        errors = calendar.get("errors") or []
        if errors:
            reason = str(errors[0].get("reason", "unknown"))
            status = 404 if reason == "notFound" else 403 if reason == "forbidden" else 502
            raise CalendarRequestError(status_code=status, message=f"freeBusy error: {reason}")
        busy: list[BusyInterval] = []
        for item in calendar.get("busy") or []:
            item_start = _parse_google_time({"dateTime": item.get("start")}, self._tz)
            item_end = _parse_google_time({"dateTime": item.get("end")}, self._tz)
            if item_start and item_end:
                busy.append(BusyInterval(item_start, item_end))
        return busy

    async def insert(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
        summary: str,
        description: str,
        *,
        location: Optional[str] = None,
    ) -> str:
        body: Dict[str, Any] = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": _rfc3339(start), "timeZone": self._timezone_name},
            "end": {"dateTime": _rfc3339(end), "timeZone": self._timezone_name},
        }
        if location:
            body["location"] = location
        payload = await self._request("POST", f"/calendars/{quote(calendar_id, safe='')}/events", json_body=body)
        event_id = payload.get("id")
        if not event_id:
            raise CalendarBackendError("Google Calendar create response is missing an event id")
        return str(event_id)

    async def delete(self, calendar_id: str, event_id: str) -> None:
        await self._request(
            "DELETE",
            f"/calendars/{quote(calendar_id, safe='')}/events/{quote(event_id, safe='')}",
        )

    async def list_events(self, calendar_id: str, start: datetime, end: datetime) -> List[BookingRecord]:
        payload = await self._request(
            "GET",
            f"/calendars/{quote(calendar_id, safe='')}/events",
            params={
                "timeMin": _rfc3339(start),
                "timeMax": _rfc3339(end),
                "singleEvents": "true",
                "orderBy": "startTime",
                "maxResults": 2500,
                "timeZone": self._timezone_name,
            },
        )
        records: list[BookingRecord] = []
        for item in payload.get("items") or []:
            if not isinstance(item, dict):
                continue
            item_start = _parse_google_time(item.get("start"), self._tz)
            item_end = _parse_google_time(item.get("end"), self._tz)
            if item_start is None or item_end is None:
                continue
            records.append(
                BookingRecord(
                    id=str(item.get("id", "")),
                    start=item_start,
                    end=item_end,
                    calendar_id=calendar_id,
                    summary=item.get("summary") or "",
                    description=item.get("description") or "",
                    location=item.get("location"),
                )
            )
        return records

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()
