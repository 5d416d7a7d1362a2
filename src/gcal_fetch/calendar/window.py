"""Upcoming-window calculation and start-time filtering."""

from __future__ import annotations

import contextlib
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

# End of the window is 3am local time on the last day
WINDOW_END_HOUR = 3


@dataclass(frozen=True)
class TimeWindow:
    """Server-side filter bounds for an upcoming-events query."""

    not_before: datetime
    not_after: datetime

    def as_query(self) -> dict[str, Any]:
        """Render as events.list parameters.

        Calendar has no "starts after" filter, so timeMin (a lower bound on
        event end) carries not_before.
        """
        return {
            "timeMax": self.not_after.isoformat(),
            "timeMin": self.not_before.isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
        }


def local_now() -> datetime:
    """Current instant as an aware local datetime."""
    return datetime.now().astimezone()


def start_of_day(dt: datetime) -> datetime:
    """Midnight at the start of dt's calendar day, in dt's timezone."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def upcoming_window(days_ahead: float = 1, now: datetime | None = None) -> TimeWindow:
    """Compute the window from now until 3am, days_ahead days from today.

    Args:
        days_ahead: Number of days ahead. Fractional values are allowed.
        now: Reference instant. Defaults to the current local time.

    Returns:
        TimeWindow with not_before=now.
    """
    if now is None:
        now = local_now()
    not_after = start_of_day(now) + timedelta(days=days_ahead, hours=WINDOW_END_HOUR)
    return TimeWindow(not_before=now, not_after=not_after)


def start_time(event: dict[str, Any]) -> datetime | None:
    """Start time of an event, or None if it has none.

    All-day events start at local midnight of their date.
    """
    start = event.get("start") or {}
    if "dateTime" in start:
        with contextlib.suppress(ValueError, TypeError):
            return datetime.fromisoformat(start["dateTime"].replace("Z", "+00:00"))
    elif "date" in start:
        with contextlib.suppress(ValueError, TypeError):
            return datetime.fromisoformat(start["date"]).astimezone()
    return None


def starts_after(event: dict[str, Any], instant: datetime) -> bool:
    """True if the event starts strictly after instant."""
    start = start_time(event)
    if start is None:
        return False
    if start.tzinfo is None:
        start = start.astimezone()
    return start > instant


def filter_upcoming(
    events: Iterable[dict[str, Any]], now: datetime | None = None
) -> Iterator[dict[str, Any]]:
    """Drop events that have already started.

    Args:
        events: Events in any order.
        now: Cut-off instant. Defaults to the time filtering starts, which is
            later than the instant used to build the query.

    Yields:
        Events starting strictly after now.
    """
    if now is None:
        now = local_now()
    for event in events:
        if starts_after(event, now):
            yield event
