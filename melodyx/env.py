from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from auth.errors import ConfigurationError

from .constants import (
    DEFAULT_CLIENT_ID,
    DEFAULT_SCOPES,
    DEFAULT_STORAGE_PATH,
    DEV_REDIRECT_URI,
    LOGGER,
    PLACEHOLDER_CLIENT_ID,
    PROD_REDIRECT_URI,
)

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number.")


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    load_dotenv(env_path, override=True)


def get_client_id() -> str:
    for key in ("SPOTIFY_CLIENT_ID", "VITE_SPOTIFY_CLIENT_ID"):
        value = os.getenv(key, "").strip()
        if value:
            return value
    return DEFAULT_CLIENT_ID


def get_scopes() -> list[str]:
    raw = os.getenv("SPOTIFY_SCOPES", "").split()
    return raw or list(DEFAULT_SCOPES)


def get_show_dialog() -> bool:
    return is_truthy(os.getenv("SPOTIFY_SHOW_DIALOG", "1"))


def get_redirect_uris() -> tuple[str, str]:
    dev_uri = os.getenv("MELODYX_DEV_REDIRECT_URI", "").strip() or DEV_REDIRECT_URI
    prod_uri = os.getenv("MELODYX_PROD_REDIRECT_URI", "").strip() or PROD_REDIRECT_URI
    return dev_uri, prod_uri


def get_storage_path() -> Path:
    return Path(os.getenv("MELODYX_STORAGE_PATH", "").strip() or DEFAULT_STORAGE_PATH)


def get_http_timeout() -> float:
    return _get_env_float("MELODYX_HTTP_TIMEOUT", 10.0)


def get_session_secret() -> str | None:
    return os.getenv("MELODYX_SESSION_SECRET", "").strip() or None


def is_client_id_configured(client_id: str) -> bool:
    return bool(client_id) and client_id != PLACEHOLDER_CLIENT_ID


def validate_env() -> None:
    client_id = get_client_id()
    if not is_client_id_configured(client_id):
        LOGGER.error("Spotify client id is not configured.")
        raise ConfigurationError("SPOTIFY_CLIENT_ID must be set to a registered Spotify client id.")

    for key, uri in zip(
        ("MELODYX_DEV_REDIRECT_URI", "MELODYX_PROD_REDIRECT_URI"),
        get_redirect_uris(),
    ):
        try:
            parsed = _HTTP_URL.validate_python(uri)
        except ValidationError:
            raise ConfigurationError(f"{key} must be a valid URL.")
        if parsed.scheme != "https":
            raise ConfigurationError(
                f"{key} must use HTTPS; Spotify no longer accepts plain HTTP redirect URIs."
            )

    if get_http_timeout() <= 0:
        raise ConfigurationError("MELODYX_HTTP_TIMEOUT must be greater than zero.")


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("MELODYX_DEBUG", "0"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return debug_enabled
