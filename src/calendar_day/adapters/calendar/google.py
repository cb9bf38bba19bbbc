from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from pydantic import ValidationError

from ...domain.models import CalendarEvent
from ...lookup.dates import format_instant
from .base import CalendarProviderError

LOGGER = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]
DEFAULT_MAX_RESULTS = 50


def _http_error_message(exc: HttpError) -> str:
    reason = getattr(exc, "reason", None)
    if isinstance(reason, str) and reason.strip():
        return reason.strip()
    return str(exc)


class GoogleCalendarProvider:
    def __init__(
        self,
        *,
        client_id: str | None,
        client_secret: str | None,
        refresh_token: str | None,
        token_uri: str,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        missing = [
            name
            for name, value in (
                ("GOOGLE_CLIENT_ID", client_id),
                ("GOOGLE_CLIENT_SECRET", client_secret),
                ("GOOGLE_REFRESH_TOKEN", refresh_token),
            )
            if not value
        ]
        if missing:
            raise CalendarProviderError(
                f"Google Calendar credentials are not configured: missing {', '.join(missing)}"
            )

        # No access token yet; google-auth exchanges the refresh token on first use.
        self._credentials = Credentials(
            token=None,
            refresh_token=refresh_token,
            client_id=client_id,
            client_secret=client_secret,
            token_uri=token_uri,
            scopes=SCOPES,
        )
        self._max_results = max_results

    def _build_service(self) -> Any:
        # httplib2 is not thread-safe, so every call gets its own service object.
        return build("calendar", "v3", credentials=self._credentials, cache_discovery=False)

    def list_events(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
    ) -> list[CalendarEvent]:
        try:
            service = self._build_service()
            response = (
                service.events()
                .list(
                    calendarId=calendar_id,
                    timeMin=format_instant(time_min),
                    timeMax=format_instant(time_max),
                    singleEvents=True,
                    orderBy="startTime",
                    maxResults=self._max_results,
                )
                .execute()
            )
        except HttpError as exc:
            message = _http_error_message(exc)
            LOGGER.warning("Google Calendar events.list failed for '%s': %s", calendar_id, message)
            raise CalendarProviderError(message) from exc
        except RefreshError as exc:
            LOGGER.warning("Google Calendar credential refresh failed: %s", exc)
            raise CalendarProviderError(f"Unable to refresh Google credentials: {exc}") from exc
        except TransportError as exc:
            LOGGER.warning("Google Calendar transport failed: %s", exc)
            raise CalendarProviderError(f"Unable to reach Google Calendar: {exc}") from exc

        items = response.get("items") or []
        try:
            return [CalendarEvent.model_validate(item) for item in items]
        except ValidationError as exc:
            raise CalendarProviderError("Google Calendar returned a malformed event") from exc
