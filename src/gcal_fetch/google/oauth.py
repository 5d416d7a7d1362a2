"""Google OAuth token refresh using Authlib.

This module turns the stored credentials into:
- An Authlib session able to exchange the refresh token for a new access token
- A Google API service (Calendar, etc.) bound to the current access token

Tokens are never refreshed on a timer. The config file stores no expiry, so
refresh only happens when a caller asks for it after the API reports an error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from authlib.integrations.base_client import OAuthError
from authlib.integrations.requests_client import OAuth2Session
from authlib.oauth2 import OAuth2Error
from google.oauth2.credentials import Credentials as GoogleCredentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.http import build_http

from gcal_fetch.google.exceptions import TokenError

if TYPE_CHECKING:
    from gcal_fetch.config import Credentials

logger = logging.getLogger(__name__)


# Common Google OAuth scopes
SCOPES = {
    "calendar": "https://www.googleapis.com/auth/calendar",
    "calendar_readonly": "https://www.googleapis.com/auth/calendar.readonly",
    "calendar_events": "https://www.googleapis.com/auth/calendar.events",
    "calendar_events_readonly": "https://www.googleapis.com/auth/calendar.events.readonly",
}


class GoogleOAuth:
    """Google OAuth token management using Authlib.

    Example:
        >>> auth = GoogleOAuth(load_credentials())
        >>> service = auth.build_service("calendar", "v3")
        >>> # ... API reports an invalid token ...
        >>> auth.refresh_access_token()
        >>> service = auth.build_service("calendar", "v3")
    """

    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(self, credentials: Credentials):
        """Initialize Google OAuth.

        Args:
            credentials: Client credentials and tokens from the config file.
        """
        self.client_id = credentials.client_id
        self.client_secret = credentials.client_secret
        self.scopes = self._resolve_scopes(credentials.scope)

        self.session = OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=" ".join(self.scopes),
            token={
                "access_token": credentials.access_token,
                "refresh_token": credentials.refresh_token,
                "token_type": "Bearer",
            },
            token_endpoint=self.TOKEN_URL,
            grant_type="refresh_token",
            token_endpoint_auth_method="client_secret_post",
        )

        self.refresh_count = 0

    def _resolve_scopes(self, scope: str) -> list[str]:
        """Resolve whitespace-separated scope names to full URLs.

        Names missing from SCOPES (full URLs, "openid", "email", ...) pass
        through unchanged.
        """
        return [SCOPES.get(name, name) for name in scope.split()]

    @property
    def access_token(self) -> str:
        """Current access token."""
        return self.session.token.get("access_token") or ""

    def refresh_access_token(self) -> dict[str, Any]:
        """Exchange the stored refresh token for a new access token.

        Returns:
            The refreshed token dict.

        Raises:
            TokenError: If the token endpoint rejects the refresh.
        """
        logger.info("Refreshing access token")
        try:
            token = self.session.refresh_token(
                self.TOKEN_URL,
                refresh_token=self.session.token.get("refresh_token"),
            )
        except (OAuth2Error, OAuthError) as e:
            raise TokenError(f"Failed to refresh token: {e}") from e

        self.refresh_count += 1
        return token

    def get_credentials(self) -> GoogleCredentials:
        """Get Google Credentials object for API client libraries.

        Carries no refresh token. Only refresh_access_token() refreshes.
        """
        return GoogleCredentials(
            token=self.access_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=self.TOKEN_URL,
            scopes=self.scopes or None,
        )

    def authorized_http(self) -> AuthorizedHttp:
        """Get an HTTP client that signs requests with the current access token.

        Never refreshes on its own, so a 401 reaches the caller as HttpError.
        """
        return AuthorizedHttp(
            self.get_credentials(),
            http=build_http(),
            refresh_status_codes=(),
        )

    def build_service(self, service_name: str = "calendar", version: str = "v3"):
        """Build a Google API service with current credentials.

        Args:
            service_name: Name of the service (e.g., 'calendar').
            version: API version (e.g., 'v3').

        Returns:
            Google API service object.
        """
        return build(
            service_name,
            version,
            http=self.authorized_http(),
            cache_discovery=False,
        )
