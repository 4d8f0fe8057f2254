"""Centralized configuration for nscm.

Settings needed by the sign-in flow (client id, auth proxy host, redirect URI,
auth domain) are loaded from two sources with the following priority:
1. Environment variables (NSCM_*)
2. The settings store (~/.nscm/config.json)
3. Defaults

The settings store also caches the result of the last sign-in (``token`` and
``registry``).

Usage:
    from nscm.config import get_config

    settings = get_config()
    print(settings.auth_proxy)
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from nscm.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# --- Constants ---

DEFAULT_REGISTRY_PLACEHOLDER = "nodesource"
DEFAULT_TIMEOUT = 30.0
NPMRC_FILENAME = ".npmrc"

# Settings field name -> key in the settings store
STORE_KEYS = {
    "client_id": "clientId",
    "auth_proxy": "authProxy",
    "redirect_uri": "redirectUri",
    "auth_domain": "authDomain",
    "registry_placeholder": "registryPlaceholder",
    "timeout": "timeout",
}
REQUIRED_FIELDS = ("client_id", "auth_proxy", "redirect_uri", "auth_domain")

TOKEN_KEY = "token"
REGISTRY_KEY = "registry"


# --- Path utilities ---


def get_nscm_dir() -> Path:
    """Get the user's nscm config directory (~/.nscm)."""
    return Path.home() / ".nscm"


def get_store_path() -> Path:
    """Get the path to the settings store file."""
    return get_nscm_dir() / "config.json"


def get_global_npmrc_path() -> Path:
    """Get the user-level .npmrc that holds auth tokens."""
    return Path.home() / NPMRC_FILENAME


def get_local_npmrc_path() -> Path:
    """Get the project-level .npmrc in the current working directory."""
    return Path.cwd() / NPMRC_FILENAME


def load_json_file(path: Path) -> dict[str, Any]:
    """Load a JSON config file, returning empty dict if not found or invalid."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.debug(f"Could not load {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.debug(f"Ignoring {path}: expected a JSON object")
        return {}
    return data


# --- Settings store ---


class SettingsStore:
    """Key/value store persisted as a JSON object.

    Holds static settings (camelCase keys, see ``STORE_KEYS``) as well as the
    cached ``token`` and ``registry`` of the last successful sign-in.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else get_store_path()

    def all(self) -> dict[str, Any]:
        return load_json_file(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self.all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self.all()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> bool:
        """Remove a key. Returns False if it was not set."""
        data = self.all()
        if key not in data:
            return False
        del data[key]
        self._save(data)
        return True

    def _save(self, data: dict[str, Any]) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(data, f, indent=2)

        # Make file readable only by owner (0600), it may hold a token
        path.chmod(0o600)


# --- Pydantic Config Models ---


class NscmSettings(BaseSettings):
    """Settings loaded from environment variables.

    This uses pydantic-settings to read from NSCM_* environment variables.
    """

    client_id: str | None = None
    auth_proxy: str | None = None
    redirect_uri: str | None = None
    auth_domain: str | None = None
    registry_placeholder: str | None = None
    timeout: float | None = None

    model_config = SettingsConfigDict(
        env_prefix="NSCM_",
        extra="ignore",
    )


class SessionSettings(BaseModel):
    """Resolved, read-only settings for one sign-in.

    Attributes:
        client_id: OAuth client id registered with the identity provider.
        auth_proxy: Host of the auth proxy. Its ``registry_placeholder``
            segment is replaced by the team id to form the registry host.
        redirect_uri: Redirect URI registered for the client.
        auth_domain: Host of the identity provider.
        registry_placeholder: Literal segment of ``auth_proxy`` to substitute.
        timeout: HTTP timeout in seconds.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    auth_proxy: str
    redirect_uri: str
    auth_domain: str
    registry_placeholder: str = DEFAULT_REGISTRY_PLACEHOLDER
    timeout: float = DEFAULT_TIMEOUT


# --- Config loading ---


def load_session_settings(store: SettingsStore | None = None) -> SessionSettings:
    """Load session settings from all sources.

    Priority (highest to lowest):
    1. Environment variables (NSCM_*)
    2. Settings store
    3. Defaults

    Raises:
        ConfigurationError: If a required setting is missing or invalid.
    """
    env_settings = NscmSettings()
    stored = (store or SettingsStore()).all()

    values: dict[str, Any] = {}
    for field, store_key in STORE_KEYS.items():
        value = getattr(env_settings, field)
        if value is None:
            value = stored.get(store_key)
        if value is not None:
            values[field] = value

    missing = [STORE_KEYS[field] for field in REQUIRED_FIELDS if not values.get(field)]
    if missing:
        raise ConfigurationError(
            f"Missing required settings: {', '.join(missing)}. "
            "Set them with 'nscm config set <key> <value>' or NSCM_* env vars."
        )

    try:
        return SessionSettings.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


@lru_cache(maxsize=1)
def get_config() -> SessionSettings:
    """Get the cached session settings.

    Use clear_config_cache() to force a reload.
    """
    return load_session_settings()


def clear_config_cache() -> None:
    """Clear the cached configuration, forcing reload on next get_config()."""
    get_config.cache_clear()


# --- Config provider for dependency injection ---


class ConfigProvider:
    """Provider for SessionSettings that supports dependency injection.

    This allows tests and advanced use cases to override the config.
    """

    def __init__(self) -> None:
        self._override: SessionSettings | None = None

    def get(self) -> SessionSettings:
        """Get the current configuration."""
        if self._override is not None:
            return self._override
        return get_config()

    def set(self, config: SessionSettings) -> None:
        """Override the configuration."""
        self._override = config

    def reset(self) -> None:
        """Reset to default configuration loading."""
        self._override = None
        clear_config_cache()


# Global config provider instance
config_provider = ConfigProvider()
