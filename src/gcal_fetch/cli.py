"""CLI for gcal-fetch - print Google Calendar events as JSON.

Usage:
    gcal-fetch                          # Every event on the primary calendar
    gcal-fetch --calendar ID            # Every event on another calendar
    gcal-fetch --upcoming               # Events before 3am tomorrow, not started yet
    gcal-fetch --upcoming 2.5           # Same, 2.5 days ahead

Events are written to stdout, one JSON object per line. Diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from collections.abc import Iterable
from typing import Any, TextIO

from gcal_fetch.google.exceptions import GoogleAuthError


def format_event(event: dict[str, Any]) -> str:
    """Serialize an event as a single JSON line."""
    return json.dumps(event)


def write_events(events: Iterable[dict[str, Any]], stream: TextIO) -> int:
    """Write events to stream as they arrive.

    Returns:
        Number of events written.
    """
    count = 0
    for event in events:
        stream.write(format_event(event) + "\n")
        stream.flush()
        count += 1
    return count


def fetch_events(
    calendar_id: str,
    upcoming: float | None = None,
    config: str | None = None,
) -> Iterable[dict[str, Any]]:
    """Load credentials and start listing events.

    Args:
        calendar_id: Calendar ID or "primary".
        upcoming: Days ahead for the upcoming window, or None for all events.
        config: Config file path override.

    Returns:
        Lazy iterable of event dicts.
    """
    from gcal_fetch.calendar import CalendarClient
    from gcal_fetch.config import load_credentials
    from gcal_fetch.google import GoogleOAuth

    client = CalendarClient(GoogleOAuth(load_credentials(config)))
    query: dict[str, Any] = {"calendarId": calendar_id}

    if upcoming is None:
        return client.iter_events(query)
    return client.upcoming_events(query, upcoming)


def days_ahead(value: str) -> float:
    """Parse --upcoming DAYS as a finite number."""
    days = float(value)
    if not math.isfinite(days):
        raise argparse.ArgumentTypeError(f"expected a finite number of days, got {value!r}")
    return days


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="gcal-fetch",
        description=(
            "Fetch calendar events from Google via Google Calendar API. "
            "Prints to stdout, as json, the events on the requested calendar."
        ),
    )
    parser.add_argument(
        "-c",
        "--calendar",
        default="primary",
        help='calendar id (defaults to "primary")',
    )
    parser.add_argument(
        "--upcoming",
        nargs="?",
        type=days_ahead,
        const=1.0,
        default=None,
        metavar="DAYS",
        help=(
            "events that start before 3am of next day and end after now. "
            "Provide a number to make it that many days ahead."
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="OAuth config file (defaults to $GCAL_FETCH_CONFIG or ~/.google-api.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        events = fetch_events(args.calendar, args.upcoming, args.config)
        write_events(events, sys.stdout)
    except GoogleAuthError as e:
        print(f"{e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
