from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from calendar_day.domain.models import CalendarEvent
from calendar_day.lookup.service import MeetingsLookupService
from calendar_day.main import create_app
from calendar_day.settings import (
    AppSettings,
    DateSettings,
    EnvSettings,
    LookupYamlSettings,
    build_settings,
)

PACIFIC = ZoneInfo("America/Los_Angeles")
FIXED_NOW = datetime(2024, 7, 4, 10, 30, tzinfo=PACIFIC)


def make_google_event(
    *,
    event_id: str = "evt-1",
    summary: str | None = "Team Sync",
    start: dict[str, str] | None = None,
    end: dict[str, str] | None = None,
    description: str | None = None,
    location: str | None = None,
    attendees: list[dict[str, Any]] | None = None,
    status: str = "confirmed",
) -> dict[str, Any]:
    """Build a minimal Google Calendar events.list item."""
    payload: dict[str, Any] = {
        "id": event_id,
        "status": status,
        "htmlLink": f"https://www.google.com/calendar/event?eid={event_id}",
        "start": start or {"dateTime": "2024-07-04T09:00:00-07:00"},
        "end": end or {"dateTime": "2024-07-04T10:00:00-07:00"},
    }
    if summary is not None:
        payload["summary"] = summary
    if description is not None:
        payload["description"] = description
    if location is not None:
        payload["location"] = location
    if attendees is not None:
        payload["attendees"] = attendees
    return payload


class FakeCalendarProvider:
    def __init__(
        self,
        items: list[dict[str, Any]] | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.items = items or []
        self.error = error
        self.calls: list[tuple[str, datetime, datetime]] = []

    def list_events(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
    ) -> list[CalendarEvent]:
        self.calls.append((calendar_id, time_min, time_max))
        if self.error is not None:
            raise self.error
        return [CalendarEvent.model_validate(item) for item in self.items]


def make_settings(*, strict: bool = False) -> AppSettings:
    env = EnvSettings(
        _env_file=None,
        lookup_env="test",
        lookup_timezone="America/Los_Angeles",
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_refresh_token="refresh-token",
    )
    return build_settings(env, LookupYamlSettings(dates=DateSettings(strict=strict)))


@pytest.fixture
def settings() -> AppSettings:
    return make_settings()


@pytest.fixture
def provider() -> FakeCalendarProvider:
    return FakeCalendarProvider()


@pytest.fixture
def service(settings: AppSettings, provider: FakeCalendarProvider) -> MeetingsLookupService:
    return MeetingsLookupService(settings=settings, provider=provider, now=lambda: FIXED_NOW)


def make_client(service: MeetingsLookupService) -> TestClient:
    return TestClient(create_app(service=service))


@pytest.fixture
def client(service: MeetingsLookupService):
    with make_client(service) as test_client:
        yield test_client

