from .base import CalendarProvider, CalendarProviderError
from .google import GoogleCalendarProvider

__all__ = [
    "CalendarProvider",
    "CalendarProviderError",
    "GoogleCalendarProvider",
]
