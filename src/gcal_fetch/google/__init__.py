"""Google OAuth and API authentication utilities."""

from gcal_fetch.google.exceptions import (
    AuthError,
    ConfigInvalidError,
    ConfigMissingError,
    GoogleAuthError,
    TokenError,
)
from gcal_fetch.google.oauth import GoogleOAuth

__all__ = [
    "GoogleOAuth",
    "GoogleAuthError",
    "ConfigMissingError",
    "ConfigInvalidError",
    "TokenError",
    "AuthError",
]
