"""OAuth credential configuration.

Credentials live in a single YAML file in the user's home directory:
    ~/.google-api.yaml

The file holds client_id, client_secret, scope, refresh_token and
access_token as produced by a one-time OAuth login. Set GCAL_FETCH_CONFIG
(or pass --config) to read a different file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from gcal_fetch.google.exceptions import ConfigInvalidError, ConfigMissingError

logger = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".google-api.yaml"
CONFIG_ENV_VAR = "GCAL_FETCH_CONFIG"

REQUIRED_KEYS = ("client_id", "client_secret", "refresh_token")


@dataclass(frozen=True)
class Credentials:
    """OAuth client credentials and tokens loaded from the config file."""

    client_id: str
    client_secret: str
    scope: str
    refresh_token: str
    access_token: str


def config_path(path: str | Path | None = None) -> Path:
    """Resolve which config file to read.

    Args:
        path: Explicit path. Takes precedence over the environment.

    Returns:
        Path to the config file.
    """
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return CONFIG_FILE


def load_credentials(path: str | Path | None = None) -> Credentials:
    """Load OAuth credentials from the config file.

    Args:
        path: Config file path. Defaults to ~/.google-api.yaml.

    Returns:
        Credentials record.

    Raises:
        ConfigMissingError: If the file does not exist.
        ConfigInvalidError: If the file is not a mapping or lacks required keys.
    """
    config_file = config_path(path)
    if not config_file.exists():
        raise ConfigMissingError(str(config_file))

    with open(config_file) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigInvalidError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigInvalidError(f"Expected a mapping of OAuth settings in {config_file}")

    missing = [key for key in REQUIRED_KEYS if not data.get(key)]
    if missing:
        raise ConfigInvalidError(f"Missing {', '.join(missing)} in {config_file}")

    logger.info(f"Loaded credentials from {config_file}")
    return Credentials(
        client_id=str(data["client_id"]),
        client_secret=str(data["client_secret"]),
        scope=str(data.get("scope") or ""),
        refresh_token=str(data["refresh_token"]),
        access_token=str(data.get("access_token") or ""),
    )
