from __future__ import annotations


class DayLookupError(RuntimeError):
    """Base class for errors raised while looking up a day's meetings."""


class ClientInputError(DayLookupError):
    """Raised when the request does not carry a date."""


class DateValidationError(DayLookupError):
    """Raised when a date cannot be parsed and strict parsing is enabled."""
