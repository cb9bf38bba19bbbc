from __future__ import annotations

import pytest
from conftest import FIXED_NOW, FakeCalendarProvider, make_client, make_google_event, make_settings

from calendar_day.adapters.calendar.base import CalendarProviderError
from calendar_day.lookup.service import MeetingsLookupService
from calendar_day.main import MEETINGS_PATH


def _client_for(provider: FakeCalendarProvider, *, strict: bool = False):
    service = MeetingsLookupService(
        settings=make_settings(strict=strict),
        provider=provider,
        now=lambda: FIXED_NOW,
    )
    return make_client(service)


def test_get_returns_meetings_for_requested_day(client, provider):
    provider.items = [
        make_google_event(event_id="a", summary="Standup"),
        make_google_event(event_id="b", summary="Design review"),
        make_google_event(
            event_id="c",
            start={"dateTime": "2024-07-04T13:00:00-07:00"},
            end={"dateTime": "2024-07-04T14:00:00-07:00"},
        ),
    ]

    response = client.get(MEETINGS_PATH, params={"date": "2024-07-04"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["date"] == "July 4, 2024"
    assert payload["dateRequested"] == "2024-07-04"
    assert payload["totalMeetings"] == 3
    assert payload["message"] == "Found 3 meeting(s) for July 4, 2024"
    assert list(payload["meetingsByTime"]) == ["9:00 AM", "1:00 PM"]
    assert [m["summary"] for m in payload["meetingsByTime"]["9:00 AM"]] == ["Standup", "Design review"]


def test_get_with_no_meetings(client):
    response = client.get(MEETINGS_PATH, params={"date": "today"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["totalMeetings"] == 0
    assert payload["meetings"] == []
    assert payload["meetingsByTime"] == {}
    assert payload["message"] == "No meetings found for July 4, 2024"


def test_post_matches_get(client, provider):
    provider.items = [make_google_event(location="Room 401")]

    from_get = client.get(MEETINGS_PATH, params={"date": "tomorrow"})
    from_post = client.post(MEETINGS_PATH, json={"date": "tomorrow"})

    assert from_post.status_code == 200
    assert from_post.json() == from_get.json()
    assert from_post.json()["dateRequested"] == "2024-07-05"


def test_get_without_date_is_rejected(client, provider):
    response = client.get(MEETINGS_PATH)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Date parameter is required"}
    assert provider.calls == []


def test_get_with_empty_date_is_rejected(client):
    response = client.get(MEETINGS_PATH, params={"date": ""})

    assert response.status_code == 400
    assert response.json()["error"] == "Date parameter is required"


@pytest.mark.parametrize(
    "body",
    [{}, {"date": None}, {"date": ""}, {"date": 0}, {"date": False}, ["today"]],
)
def test_post_without_date_is_rejected(client, body):
    response = client.post(MEETINGS_PATH, json=body)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Date parameter is required"}


def test_post_with_malformed_body_is_rejected(client):
    response = client.post(
        MEETINGS_PATH,
        content=b"date=today",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Date parameter is required"


@pytest.mark.parametrize("method", ["DELETE", "PUT", "PATCH"])
def test_other_methods_are_not_allowed(client, method):
    response = client.request(method, MEETINGS_PATH, params={"date": "today"})

    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}
    assert set(response.headers["allow"].split(", ")) == {"GET", "POST"}


def test_allow_header_lists_the_methods_of_the_matched_path(client):
    response = client.post("/health")

    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}
    assert "GET" in response.headers["allow"]
    assert "POST" not in response.headers["allow"]


def test_get_resolves_next_weekday(client, provider):
    response = client.get(MEETINGS_PATH, params={"date": "next Friday"})

    assert response.status_code == 200
    assert response.json()["dateRequested"] == "2024-07-12"
    assert response.json()["date"] == "July 12, 2024"
    assert len(provider.calls) == 1


def test_unknown_path_keeps_default_not_found(client):
    response = client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


def test_provider_error_message_is_returned():
    provider = FakeCalendarProvider(error=CalendarProviderError("Rate Limit Exceeded"))

    with _client_for(provider) as client:
        response = client.get(MEETINGS_PATH, params={"date": "today"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Rate Limit Exceeded"}


def test_unexpected_error_without_message_uses_fallback():
    provider = FakeCalendarProvider(error=RuntimeError())

    with _client_for(provider) as client:
        response = client.post(MEETINGS_PATH, json={"date": "today"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to fetch meetings"}


def test_strict_mode_rejects_unparseable_date():
    with _client_for(FakeCalendarProvider(), strict=True) as client:
        response = client.get(MEETINGS_PATH, params={"date": "xyzzy plugh"})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Invalid date format. Please provide a valid date.",
    }


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["service"] == "calendar-day-lookup"
    assert payload["environment"] == "test"
    assert payload["timezone"] == "America/Los_Angeles"
    assert payload["calendar_id"] == "primary"
