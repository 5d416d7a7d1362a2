"""Google authentication and API exceptions."""

from __future__ import annotations

import json
from typing import Any

SETUP_INSTRUCTIONS = """\
This utility requires valid OAuth credentials and a token for your project in
the config file '{path}'.

You can create it by setting up a project and running an OAuth login once:

- Go to the Google Cloud Console at https://console.cloud.google.com/apis/credentials
  and set up a project that you will use to access this data.
- Enable the Google Calendar API for the project.
- Create an OAuth client ID of type "Desktop app" and note its CLIENT_ID and
  CLIENT_SECRET.
- Grant access to your calendar with any OAuth 2.0 login tool (for example
  the google-api oauth-2-login command or oauthlib's installed-app flow) using
  the scope https://www.googleapis.com/auth/calendar.readonly.
- Write the result to '{path}' as YAML:

    client_id: <CLIENT_ID>
    client_secret: <CLIENT_SECRET>
    scope: https://www.googleapis.com/auth/calendar.readonly
    refresh_token: <REFRESH_TOKEN>
    access_token: <ACCESS_TOKEN>
"""


class GoogleAuthError(Exception):
    """Base exception for gcal-fetch errors."""

    pass


class ConfigMissingError(GoogleAuthError):
    """Raised when the OAuth config file is not found."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"ERROR: {path} not found\n\n" + SETUP_INSTRUCTIONS.format(path=path)
        )


class ConfigInvalidError(GoogleAuthError):
    """Raised when the OAuth config file cannot be used."""

    pass


class TokenError(GoogleAuthError):
    """Raised when the access token cannot be refreshed."""

    pass


class AuthError(GoogleAuthError):
    """Raised when the API keeps reporting an error after a token refresh."""

    def __init__(self, error: Any):
        self.error = error
        super().__init__(json.dumps(error))
