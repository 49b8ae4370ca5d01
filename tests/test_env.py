import logging

import pytest

from auth.errors import ConfigurationError
from melodyx import env
from melodyx.constants import (
    DEFAULT_CLIENT_ID,
    DEFAULT_SCOPES,
    DEV_REDIRECT_URI,
    LOGGER,
    PROD_REDIRECT_URI,
)


@pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
def test_is_truthy(value: str) -> None:
    assert env.is_truthy(value) is True


@pytest.mark.parametrize("value", [None, "", "0", "false", "nope"])
def test_is_not_truthy(value) -> None:
    assert env.is_truthy(value) is False


def test_client_id_defaults_to_development_id() -> None:
    assert env.get_client_id() == DEFAULT_CLIENT_ID


def test_client_id_prefers_spotify_variable(monkeypatch) -> None:
    monkeypatch.setenv("VITE_SPOTIFY_CLIENT_ID", "from-vite")
    assert env.get_client_id() == "from-vite"

    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "from-env")
    assert env.get_client_id() == "from-env"


def test_scopes(monkeypatch) -> None:
    assert env.get_scopes() == DEFAULT_SCOPES

    monkeypatch.setenv("SPOTIFY_SCOPES", "user-read-private  streaming")
    assert env.get_scopes() == ["user-read-private", "streaming"]


def test_show_dialog(monkeypatch) -> None:
    assert env.get_show_dialog() is True

    monkeypatch.setenv("SPOTIFY_SHOW_DIALOG", "0")
    assert env.get_show_dialog() is False


def test_redirect_uris(monkeypatch) -> None:
    assert env.get_redirect_uris() == (DEV_REDIRECT_URI, PROD_REDIRECT_URI)

    monkeypatch.setenv("MELODYX_DEV_REDIRECT_URI", "https://tunnel.example/callback")
    assert env.get_redirect_uris()[0] == "https://tunnel.example/callback"


def test_storage_path(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("MELODYX_STORAGE_PATH", str(tmp_path / "x.json"))

    assert env.get_storage_path() == tmp_path / "x.json"


def test_http_timeout(monkeypatch) -> None:
    assert env.get_http_timeout() == 10.0

    monkeypatch.setenv("MELODYX_HTTP_TIMEOUT", "2.5")
    assert env.get_http_timeout() == 2.5

    monkeypatch.setenv("MELODYX_HTTP_TIMEOUT", "soon")
    with pytest.raises(ConfigurationError, match="MELODYX_HTTP_TIMEOUT"):
        env.get_http_timeout()


def test_validate_env_accepts_defaults() -> None:
    env.validate_env()


def test_validate_env_rejects_placeholder_client_id(monkeypatch) -> None:
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "YOUR_SPOTIFY_CLIENT_ID")

    with pytest.raises(ConfigurationError, match="SPOTIFY_CLIENT_ID"):
        env.validate_env()


def test_validate_env_rejects_plain_http_redirect(monkeypatch) -> None:
    monkeypatch.setenv("MELODYX_PROD_REDIRECT_URI", "http://melodyx.app/callback")

    with pytest.raises(ConfigurationError, match="HTTPS"):
        env.validate_env()


def test_validate_env_rejects_invalid_redirect(monkeypatch) -> None:
    monkeypatch.setenv("MELODYX_DEV_REDIRECT_URI", "not a url")

    with pytest.raises(ConfigurationError, match="valid URL"):
        env.validate_env()


def test_validate_env_rejects_non_positive_timeout(monkeypatch) -> None:
    monkeypatch.setenv("MELODYX_HTTP_TIMEOUT", "0")

    with pytest.raises(ConfigurationError, match="greater than zero"):
        env.validate_env()


def test_setup_logging(monkeypatch) -> None:
    assert env.setup_logging() is False

    monkeypatch.setenv("MELODYX_DEBUG", "1")
    assert env.setup_logging() is True
    assert LOGGER.level == logging.INFO


def test_is_client_id_configured() -> None:
    assert env.is_client_id_configured("abc") is True
    assert env.is_client_id_configured("") is False
    assert env.is_client_id_configured("YOUR_SPOTIFY_CLIENT_ID") is False
