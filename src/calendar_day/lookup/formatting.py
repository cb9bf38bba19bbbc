from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from ..domain.models import CalendarEvent, EventTime, FormattedMeeting, MeetingsResponse
from .dates import DATE_FORMAT, format_day_label, format_instant

NO_TITLE = "No Title"


def _resolve_instant(value: EventTime, timezone_value: ZoneInfo) -> datetime:
    if value.date_time is not None:
        if value.date_time.tzinfo is None:
            return value.date_time.replace(tzinfo=timezone.utc)
        return value.date_time
    # all-day events carry only a date; anchor it at local midnight
    return datetime.combine(value.day, time.min, tzinfo=timezone_value)


def format_clock_time(value: datetime, timezone_value: ZoneInfo) -> str:
    local_value = value.astimezone(timezone_value)
    hour = local_value.hour % 12 or 12
    meridiem = "AM" if local_value.hour < 12 else "PM"
    return f"{hour}:{local_value.minute:02d} {meridiem}"


def format_meeting(event: CalendarEvent, timezone_value: ZoneInfo) -> FormattedMeeting:
    start_dt = _resolve_instant(event.start, timezone_value)
    end_dt = _resolve_instant(event.end, timezone_value)
    return FormattedMeeting(
        id=event.id,
        summary=event.summary or NO_TITLE,
        description=event.description or "",
        start_time=format_clock_time(start_dt, timezone_value),
        end_time=format_clock_time(end_dt, timezone_value),
        start_date_time=format_instant(start_dt),
        end_date_time=format_instant(end_dt),
        html_link=event.html_link,
        status=event.status,
        attendees=list(event.attendees),
        location=event.location or "",
    )


def group_by_start_time(meetings: list[FormattedMeeting]) -> dict[str, list[FormattedMeeting]]:
    grouped: dict[str, list[FormattedMeeting]] = {}
    for meeting in meetings:
        grouped.setdefault(meeting.start_time, []).append(meeting)
    return grouped


def summary_message(count: int, day_label: str) -> str:
    if count > 0:
        return f"Found {count} meeting(s) for {day_label}"
    return f"No meetings found for {day_label}"


def assemble_response(day: date, meetings: list[FormattedMeeting]) -> MeetingsResponse:
    day_label = format_day_label(day)
    return MeetingsResponse(
        date=day_label,
        date_requested=day.strftime(DATE_FORMAT),
        total_meetings=len(meetings),
        meetings=meetings,
        meetings_by_time=group_by_start_time(meetings),
        message=summary_message(len(meetings), day_label),
    )
