from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ...domain.models import CalendarEvent


class CalendarProviderError(RuntimeError):
    """Raised when events cannot be loaded from the calendar provider."""


class CalendarProvider(Protocol):
    def list_events(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
    ) -> list[CalendarEvent]:
        """Return single-occurrence events in the window, ordered by start time."""
