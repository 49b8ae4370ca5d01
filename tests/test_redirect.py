import pytest

from auth.redirect import (
    detect_environment,
    is_secure_context,
    parse_query,
    resolve_redirect_uri,
)
from melodyx.constants import DEV_REDIRECT_URI, PROD_REDIRECT_URI


@pytest.mark.parametrize("hostname", ["localhost", "127.0.0.1"])
def test_loopback_uses_dev_uri(hostname: str) -> None:
    assert resolve_redirect_uri(hostname, "http:", "/some/page.html") == DEV_REDIRECT_URI


def test_github_pages_keeps_repository_path() -> None:
    uri = resolve_redirect_uri("user.github.io", "https:", "/repo/index.html")

    assert uri == "https://user.github.io/repo/callback"


def test_github_pages_root_page() -> None:
    assert resolve_redirect_uri("user.github.io", "https:", "/") == "https://user.github.io/callback"


def test_github_pages_callback_page_resolves_to_same_uri() -> None:
    login_uri = resolve_redirect_uri("user.github.io", "https:", "/repo/index.html")
    callback_uri = resolve_redirect_uri("user.github.io", "https:", "/repo/callback")

    assert login_uri == callback_uri


@pytest.mark.parametrize("hostname", ["preview.vercel.app", "melodyx-dev.netlify.app"])
def test_preview_hosts_use_root_callback(hostname: str) -> None:
    uri = resolve_redirect_uri(hostname, "https:", "/deep/path/page.html")

    assert uri == f"https://{hostname}/callback"


def test_scheme_without_colon_is_accepted() -> None:
    assert (
        resolve_redirect_uri("preview.vercel.app", "https", "/")
        == "https://preview.vercel.app/callback"
    )


@pytest.mark.parametrize("hostname", ["melodyx.app", "example.com", "github.io.evil.com"])
def test_unknown_host_uses_prod_uri(hostname: str) -> None:
    assert resolve_redirect_uri(hostname, "https:", "/repo/index.html") == PROD_REDIRECT_URI


def test_overridden_fixed_uris() -> None:
    assert (
        resolve_redirect_uri("localhost", "http:", "/", dev_uri="https://tunnel.example/callback")
        == "https://tunnel.example/callback"
    )
    assert (
        resolve_redirect_uri("example.com", "https:", "/", prod_uri="https://prod.example/callback")
        == "https://prod.example/callback"
    )


@pytest.mark.parametrize(
    ("hostname", "expected"),
    [
        ("localhost", "development"),
        ("user.github.io", "github-pages"),
        ("x.vercel.app", "staging"),
        ("x.netlify.app", "staging"),
        ("melodyx.app", "production"),
    ],
)
def test_detect_environment(hostname: str, expected: str) -> None:
    assert detect_environment(hostname) == expected


def test_is_secure_context() -> None:
    assert is_secure_context("melodyx.app", "https:") is True
    assert is_secure_context("127.0.0.1", "http:") is True
    assert is_secure_context("melodyx.app", "http:") is False


def test_parse_query_takes_first_value() -> None:
    assert parse_query("?code=abc&state=s1&state=s2") == {"code": "abc", "state": "s1"}


def test_parse_query_keeps_blank_values() -> None:
    assert parse_query("error=") == {"error": ""}
