from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class EventTime(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    date_time: datetime | None = Field(default=None, alias="dateTime")
    day: date | None = Field(default=None, alias="date")
    time_zone: str | None = Field(default=None, alias="timeZone")

    @model_validator(mode="after")
    def validate_has_value(self) -> EventTime:
        if self.date_time is None and self.day is None:
            raise ValueError("calendar event time needs either dateTime or date")
        return self


class CalendarEvent(BaseModel):
    """An event as returned by the Google Calendar v3 events.list endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    summary: str | None = None
    description: str | None = None
    start: EventTime
    end: EventTime
    html_link: str | None = Field(default=None, alias="htmlLink")
    status: str | None = None
    attendees: list[dict[str, Any]] = Field(default_factory=list)
    location: str | None = None

    @property
    def all_day(self) -> bool:
        return self.start.date_time is None


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class FormattedMeeting(_CamelModel):
    id: str
    summary: str
    description: str
    start_time: str
    end_time: str
    start_date_time: str
    end_date_time: str
    html_link: str | None = None
    status: str | None = None
    attendees: list[dict[str, Any]] = Field(default_factory=list)
    location: str


class MeetingsResponse(_CamelModel):
    success: bool = True
    date: str
    date_requested: str
    total_meetings: int = Field(ge=0)
    meetings: list[FormattedMeeting] = Field(default_factory=list)
    meetings_by_time: dict[str, list[FormattedMeeting]] = Field(default_factory=dict)
    message: str


@dataclass(frozen=True, slots=True)
class DayQuery:
    day: date
    time_min: datetime
    time_max: datetime
    timezone: ZoneInfo
