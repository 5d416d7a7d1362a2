"""Tests for the gcal-fetch command line."""

import io
import json
from unittest.mock import MagicMock, patch

import pytest

from gcal_fetch.cli import build_parser, fetch_events, format_event, main, write_events

CONFIG_YAML = """\
scope: https://www.googleapis.com/auth/calendar
client_id: test-client-id.apps.googleusercontent.com
client_secret: test-client-secret
access_token: test-access-token
refresh_token: test-refresh-token
"""

EVENT = {
    "kind": "calendar#event",
    "id": "abc123",
    "status": "confirmed",
    "summary": "Café with Ana",
    "start": {"dateTime": "2026-03-10T10:00:00-05:00", "timeZone": "America/New_York"},
    "end": {"dateTime": "2026-03-10T11:00:00-05:00"},
    "attendees": [{"email": "ana@example.com", "responseStatus": "accepted"}],
    "reminders": {"useDefault": True},
}


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "google-api.yaml"
    path.write_text(CONFIG_YAML)
    return path


class TestArguments:
    """Test command line parsing."""

    def test_defaults(self):
        """Should default to all events on the primary calendar."""
        args = build_parser().parse_args([])
        assert args.calendar == "primary"
        assert args.upcoming is None
        assert args.config is None

    def test_bare_upcoming(self):
        """Should default --upcoming to one day."""
        assert build_parser().parse_args(["--upcoming"]).upcoming == 1.0

    def test_upcoming_days(self):
        """Should accept fractional days."""
        assert build_parser().parse_args(["--upcoming", "2.5"]).upcoming == 2.5
        assert build_parser().parse_args(["--upcoming=0.25"]).upcoming == 0.25

    def test_upcoming_rejects_non_finite(self, capsys):
        """Should refuse nan and inf as a number of days."""
        for value in ("inf", "nan", "-inf"):
            with pytest.raises(SystemExit) as exc_info:
                build_parser().parse_args(["--upcoming", value])
            assert exc_info.value.code == 2
        assert "finite" in capsys.readouterr().err

    def test_upcoming_rejects_text(self):
        """Should refuse a non-numeric number of days."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--upcoming", "tomorrow"])

    def test_calendar(self):
        """Should accept a calendar id."""
        args = build_parser().parse_args(["-c", "team@group.calendar.google.com"])
        assert args.calendar == "team@group.calendar.google.com"

    def test_help_exits_zero(self, capsys):
        """Should print usage and exit 0."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0
        assert "--upcoming" in capsys.readouterr().out


class TestOutput:
    """Test JSON line output."""

    def test_format_event_round_trip(self):
        """Should serialize to one line that parses back unchanged."""
        line = format_event(EVENT)
        assert "\n" not in line
        parsed = json.loads(line)
        assert parsed == EVENT
        assert list(parsed) == list(EVENT)
        assert list(parsed["start"]) == list(EVENT["start"])

    def test_write_events(self):
        """Should write one line per event."""
        stream = io.StringIO()
        second = {**EVENT, "id": "def456"}

        assert write_events([EVENT, second], stream) == 2
        lines = stream.getvalue().splitlines()
        assert [json.loads(line) for line in lines] == [EVENT, second]

    def test_written_events_survive_later_failure(self):
        """Should keep output written before an error."""
        stream = io.StringIO()

        def events():
            yield EVENT
            raise ConnectionError("connection reset")

        with pytest.raises(ConnectionError):
            write_events(events(), stream)
        assert json.loads(stream.getvalue()) == EVENT


class TestMain:
    """Test the end-to-end command."""

    def test_missing_config(self, tmp_path, capsys):
        """Should exit 1 with setup instructions on stderr."""
        missing = tmp_path / ".google-api.yaml"

        assert main(["--config", str(missing)]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert str(missing) in captured.err
        assert "client_secret" in captured.err

    def test_config_with_extra_scopes(self, tmp_path, capsys):
        """Should run with scopes outside the known calendar scopes."""
        path = tmp_path / "google-api.yaml"
        path.write_text(
            CONFIG_YAML.replace(
                "scope: https://www.googleapis.com/auth/calendar",
                "scope: openid email https://www.googleapis.com/auth/calendar",
            )
        )

        with patch("gcal_fetch.calendar.CalendarClient") as client_cls:
            client_cls.return_value.iter_events.return_value = iter([EVENT])
            assert main(["--config", str(path)]) == 0

        assert client_cls.call_args.args[0].scopes[:2] == ["openid", "email"]
        assert json.loads(capsys.readouterr().out) == EVENT

    def test_prints_events(self, capsys):
        """Should print each event as a JSON line."""
        with patch("gcal_fetch.cli.fetch_events", return_value=iter([EVENT])) as fetch:
            assert main(["--calendar", "work", "--upcoming", "3"]) == 0

        fetch.assert_called_once_with("work", 3.0, None)
        out = capsys.readouterr().out
        assert [json.loads(line) for line in out.splitlines()] == [EVENT]

    def test_auth_error_exits_nonzero(self, capsys):
        """Should report a persistent API error on stderr."""
        from gcal_fetch.google import AuthError

        def events():
            yield EVENT
            raise AuthError({"code": 401, "message": "Invalid Credentials"})

        with patch("gcal_fetch.cli.fetch_events", return_value=events()):
            assert main([]) == 1

        captured = capsys.readouterr()
        assert json.loads(captured.out) == EVENT
        assert "Invalid Credentials" in captured.err


class TestFetchEvents:
    """Test wiring of credentials, client and query."""

    def test_all_events(self, config_file):
        """Should list every event when upcoming is not requested."""
        with patch("gcal_fetch.calendar.CalendarClient") as client_cls:
            client = MagicMock()
            client_cls.return_value = client

            result = fetch_events("primary", None, str(config_file))

        assert result is client.iter_events.return_value
        client.iter_events.assert_called_once_with({"calendarId": "primary"})
        client.upcoming_events.assert_not_called()

    def test_upcoming_events(self, config_file):
        """Should request the upcoming window with the given days."""
        with patch("gcal_fetch.calendar.CalendarClient") as client_cls:
            client = MagicMock()
            client_cls.return_value = client

            result = fetch_events("work", 2.0, str(config_file))

        assert result is client.upcoming_events.return_value
        client.upcoming_events.assert_called_once_with({"calendarId": "work"}, 2.0)

    def test_client_gets_stored_tokens(self, config_file):
        """Should authenticate with the tokens from the config file."""
        with patch("gcal_fetch.calendar.CalendarClient") as client_cls:
            fetch_events("primary", None, str(config_file))

        auth = client_cls.call_args.args[0]
        assert auth.access_token == "test-access-token"
        assert auth.client_id == "test-client-id.apps.googleusercontent.com"
