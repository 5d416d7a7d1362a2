"""gcal-fetch: print Google Calendar events as newline-delimited JSON."""

__version__ = "0.1.0"
