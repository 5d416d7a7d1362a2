"""Google Calendar API client implementation."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any

from googleapiclient.errors import HttpError

from gcal_fetch.calendar.window import filter_upcoming, upcoming_window
from gcal_fetch.google import GoogleOAuth
from gcal_fetch.google.exceptions import AuthError

logger = logging.getLogger(__name__)


class CalendarClient:
    """Read-only Google Calendar client.

    Query params are described in:
    https://developers.google.com/calendar/api/v3/reference/events/list

    Usage:
        client = CalendarClient(GoogleOAuth(load_credentials()))

        # Every event on the primary calendar
        for event in client.iter_events({"calendarId": "primary"}):
            ...

        # Events starting between now and 3am two days from today
        for event in client.upcoming_events({"calendarId": "primary"}, 2):
            ...

    Note:
        Not safe for concurrent use. A refresh replaces the service in place.
    """

    def __init__(self, auth: GoogleOAuth) -> None:
        """Initialize Calendar client.

        Args:
            auth: OAuth token manager built from the config file.
        """
        self._auth = auth
        self._service: Any = None

    def _get_service(self) -> Any:
        """Get or create Calendar API service."""
        if self._service is None:
            self._service = self._auth.build_service("calendar", "v3")
        return self._service

    # =========================================================================
    # Requests
    # =========================================================================

    def fetch(self, method: str, query: dict[str, Any]) -> dict[str, Any]:
        """Execute an API method, refreshing the access token once on error.

        Args:
            method: Dotted resource method, e.g. "events.list".
            query: Method parameters.

        Returns:
            Response payload.

        Raises:
            AuthError: If the payload still reports an error after refresh.
            TokenError: If the access token cannot be refreshed.
        """
        data = self._execute(method, query)
        if self._data_error(data) is not None:
            logger.info(f"{method} returned an error, refreshing access token and retrying")
            self._auth.refresh_access_token()
            self._service = None
            data = self._execute(method, query)

        error = self._data_error(data)
        if error is not None:
            raise AuthError(error)
        return data

    def _execute(self, method: str, query: dict[str, Any]) -> dict[str, Any]:
        """Run one request and return its payload.

        An HttpError with a JSON error body is returned as payload. Any other
        failure propagates.
        """
        *resources, name = method.split(".")
        target = self._get_service()
        for resource in resources:
            target = getattr(target, resource)()
        request = getattr(target, name)(**query)

        try:
            return request.execute()
        except HttpError as e:
            payload = self._error_payload(e)
            if payload is None:
                raise
            logger.debug(f"{method} failed with HTTP {e.resp.status}")
            return payload

    @staticmethod
    def _error_payload(error: HttpError) -> dict[str, Any] | None:
        """Decode the JSON error body of an HttpError, if it has one."""
        content = error.content
        if isinstance(content, bytes):
            content = content.decode("utf-8", errors="replace")
        try:
            payload = json.loads(content)
        except (TypeError, ValueError):
            return None
        if isinstance(payload, dict) and "error" in payload:
            return payload
        return None

    @staticmethod
    def _data_error(data: dict[str, Any]) -> Any:
        return data.get("error")

    # =========================================================================
    # Events
    # =========================================================================

    def iter_events(self, query: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Iterate over every event matching query, across all pages.

        Args:
            query: events.list parameters, including calendarId.

        Yields:
            Event dicts in the order the API returns them.
        """
        query = dict(query)
        while True:
            data = self.fetch("events.list", query)
            yield from data.get("items", [])

            page_token = data.get("nextPageToken")
            if not page_token:
                return
            logger.debug(f"Fetching next page of {query.get('calendarId')}")
            query = {**query, "pageToken": page_token}

    def upcoming_events(
        self, query: dict[str, Any], days_ahead: float = 1
    ) -> Iterator[dict[str, Any]]:
        """Iterate over events starting between now and 3am, days_ahead days out.

        Args:
            query: events.list parameters, including calendarId.
            days_ahead: Days ahead of today. Fractional values are allowed.

        Yields:
            Event dicts that have not started yet, ordered by start time.
        """
        query = {**query, **upcoming_window(days_ahead).as_query()}
        return filter_upcoming(self.iter_events(query))
