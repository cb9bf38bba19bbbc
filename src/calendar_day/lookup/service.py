from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable

from ..adapters.calendar.base import CalendarProvider
from ..adapters.calendar.google import GoogleCalendarProvider
from ..domain.models import MeetingsResponse
from ..settings import AppSettings
from .dates import day_window, format_instant, normalize_date
from .errors import ClientInputError
from .formatting import assemble_response, format_meeting

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class MeetingsLookupService:
    """Looks up one day of meetings on the configured calendar.

    Built once per process; holds no per-request state.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        provider: CalendarProvider,
        now: Clock | None = None,
    ) -> None:
        self._settings = settings
        self._provider = provider
        self._now = now or (lambda: datetime.now(settings.timezone))

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def today(self) -> date:
        return self._now().astimezone(self._settings.timezone).date()

    def lookup(self, raw_date: Any) -> MeetingsResponse:
        if not raw_date:
            raise ClientInputError("Date parameter is required")

        LOGGER.info("Requested date: %r", raw_date)
        normalized = normalize_date(
            raw_date,
            today=self.today(),
            strict=self._settings.yaml.dates.strict,
        )
        query = day_window(date.fromisoformat(normalized), self._settings.timezone)
        LOGGER.info(
            "Date range UTC: start=%s end=%s",
            format_instant(query.time_min),
            format_instant(query.time_max),
        )

        events = self._provider.list_events(
            self._settings.yaml.calendar.calendar_id,
            query.time_min,
            query.time_max,
        )
        meetings = [format_meeting(event, query.timezone) for event in events]
        LOGGER.info("Found %d meeting(s) for %s", len(meetings), normalized)
        return assemble_response(query.day, meetings)


def build_google_provider(settings: AppSettings) -> GoogleCalendarProvider:
    return GoogleCalendarProvider(
        client_id=settings.env.google_client_id,
        client_secret=settings.env.google_client_secret,
        refresh_token=settings.env.google_refresh_token,
        token_uri=settings.env.google_token_uri,
        max_results=settings.yaml.calendar.max_results,
    )


def build_lookup_service(settings: AppSettings) -> MeetingsLookupService:
    return MeetingsLookupService(settings=settings, provider=build_google_provider(settings))
