"""Date normalization and day-window arithmetic in the reference time zone."""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

import dateparser

from ..domain.models import DayQuery
from .errors import DateValidationError

DATE_FORMAT = "%Y-%m-%d"
END_OF_DAY = time(23, 59, 59, 999000)

SATURDAY = 5
SUNDAY = 6
WEEKDAYS = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tue": 1, "tues": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thu": 3, "thur": 3, "thurs": 3,
    "friday": 4, "fri": 4,
    "saturday": 5, "sat": 5,
    "sunday": 6, "sun": 6,
}
WEEKDAY_PATTERN = re.compile(
    r"(?:on )?(?:(?P<modifier>this|next|coming|last|past) )?"
    r"(?P<weekday>" + "|".join(sorted(WEEKDAYS, key=len, reverse=True)) + r")\.?"
)


def _collapse(text: str) -> str:
    return " ".join(text.split()).lower()


def _parse_iso_date(text: str) -> date | None:
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        return None


def _days_to_next_weekday(today: date, weekday: int) -> int:
    # "next" counts in Sunday-first weeks: on a Thursday, next Monday is four
    # days out and next Friday is eight.
    current = today.weekday()
    forward = (weekday - current) % 7
    if current == SUNDAY:
        return forward or 7
    if current == SATURDAY:
        return forward + 7 if weekday in (SATURDAY, SUNDAY) else forward
    return forward if weekday < current else forward + 7


def _parse_weekday(text: str, *, today: date) -> date | None:
    match = WEEKDAY_PATTERN.fullmatch(text)
    if match is None:
        return None

    modifier = match.group("modifier")
    weekday = WEEKDAYS[match.group("weekday")]
    if modifier in ("next", "coming"):
        offset = _days_to_next_weekday(today, weekday)
    elif modifier in ("last", "past"):
        offset = -((today.weekday() - weekday) % 7 or 7)
    else:
        # bare and "this" weekdays resolve to the upcoming one, today included
        offset = (weekday - today.weekday()) % 7
    return today + timedelta(days=offset)


def _parse_natural_date(text: str, *, today: date) -> date | None:
    # today is already local to the reference zone
    parsed = dateparser.parse(
        text,
        settings={
            "RELATIVE_BASE": datetime.combine(today, time(12, 0)),
            "RETURN_AS_TIMEZONE_AWARE": False,
        },
    )
    if parsed is None:
        return None
    return parsed.date()


def normalize_date(
    raw: Any,
    *,
    today: date,
    strict: bool = False,
) -> str:
    """Resolve ``raw`` to a ``YYYY-MM-DD`` string.

    Absent, blank or non-string input always resolves to ``today``. Text that
    cannot be parsed also resolves to ``today`` unless ``strict`` is set, in
    which case :class:`DateValidationError` is raised.
    """
    if not isinstance(raw, str) or not raw.strip():
        return today.strftime(DATE_FORMAT)

    text = _collapse(raw)
    if text == "today":
        return today.strftime(DATE_FORMAT)
    if text == "tomorrow":
        return (today + timedelta(days=1)).strftime(DATE_FORMAT)

    parsed = (
        _parse_iso_date(text)
        or _parse_weekday(text, today=today)
        or _parse_natural_date(text, today=today)
    )
    if parsed is not None:
        return parsed.strftime(DATE_FORMAT)

    if strict:
        raise DateValidationError(f"Unable to parse date: {raw!r}")
    return today.strftime(DATE_FORMAT)


def day_window(day: date, timezone_value: ZoneInfo) -> DayQuery:
    """Return the UTC instants bounding ``day`` in ``timezone_value``.

    The end bound is the last millisecond of the day, not the next midnight.
    """
    start_local = datetime.combine(day, time.min, tzinfo=timezone_value)
    end_local = datetime.combine(day, END_OF_DAY, tzinfo=timezone_value)
    return DayQuery(
        day=day,
        time_min=start_local.astimezone(timezone.utc),
        time_max=end_local.astimezone(timezone.utc),
        timezone=timezone_value,
    )


def format_instant(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc_value = value.astimezone(timezone.utc)
    return utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_day_label(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"
