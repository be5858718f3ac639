"""
Calendar adapter — Google Calendar API v3 wrapper.

Pages through the calendar list and through a calendar's events in a time
window. Recurring events are expanded into single instances and ordered
by start time on the server.
"""

from typing import Any

from adapters.services import get_calendar_service
from api_errors import translate_errors
from logging_config import log_api_call, log_api_result
from models import Page
from paginator import FetchPage

# events.list allows up to 2500; this matches what the archives were built with
EVENTS_PAGE_SIZE = 250


@translate_errors
def list_calendar_page(page_token: str | None) -> Page:
    """One page of the user's calendar list."""
    service = get_calendar_service()
    log_api_call("calendar", "calendarList.list", pageToken=page_token)

    kwargs: dict[str, Any] = {}
    if page_token:
        kwargs["pageToken"] = page_token

    response = service.calendarList().list(**kwargs).execute()

    items = response.get("items", [])
    log_api_result("calendar", "calendarList.list", len(items))
    return Page(items=items, next_cursor=response.get("nextPageToken"))


def calendar_list_pages() -> FetchPage:
    return list_calendar_page


@translate_errors
def list_event_page(
    calendar_id: str,
    time_min: str,
    time_max: str,
    page_token: str | None,
) -> Page:
    """
    One page of events in [time_min, time_max).

    Args:
        calendar_id: Calendar to read ("primary" works too)
        time_min: RFC 3339 lower bound (inclusive)
        time_max: RFC 3339 upper bound (exclusive)
        page_token: Cursor from the previous page
    """
    service = get_calendar_service()
    log_api_call(
        "calendar", "events.list",
        calendarId=calendar_id, timeMin=time_min, timeMax=time_max, pageToken=page_token,
    )

    kwargs: dict[str, Any] = {
        "calendarId": calendar_id,
        "timeMin": time_min,
        "timeMax": time_max,
        "maxResults": EVENTS_PAGE_SIZE,
        "singleEvents": True,
        "orderBy": "startTime",
    }
    if page_token:
        kwargs["pageToken"] = page_token

    response = service.events().list(**kwargs).execute()

    items = response.get("items", [])
    log_api_result("calendar", "events.list", len(items))
    return Page(items=items, next_cursor=response.get("nextPageToken"))


def calendar_event_pages(calendar_id: str, time_min: str, time_max: str) -> FetchPage:
    """fetch_page function over events.list for one calendar and window."""
    return lambda cursor: list_event_page(calendar_id, time_min, time_max, cursor)
