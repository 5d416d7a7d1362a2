"""Google Calendar event listing with OAuth authentication.

Usage:
    from gcal_fetch.calendar import CalendarClient
    from gcal_fetch.config import load_credentials
    from gcal_fetch.google import GoogleOAuth

    client = CalendarClient(GoogleOAuth(load_credentials()))

    # All events, across every page
    events = client.iter_events({"calendarId": "primary"})

    # Events that start before 3am tomorrow and have not started yet
    events = client.upcoming_events({"calendarId": "primary"}, days_ahead=1)
"""

from __future__ import annotations

from gcal_fetch.calendar.client import CalendarClient
from gcal_fetch.calendar.window import (
    TimeWindow,
    filter_upcoming,
    start_time,
    starts_after,
    upcoming_window,
)

__all__ = [
    "CalendarClient",
    "TimeWindow",
    "filter_upcoming",
    "start_time",
    "starts_after",
    "upcoming_window",
]
