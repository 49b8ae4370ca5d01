from __future__ import annotations

import urllib.parse

from melodyx.constants import DEV_REDIRECT_URI, PROD_REDIRECT_URI

LOOPBACK_HOSTS = {"localhost", "127.0.0.1"}
PAGES_SUFFIX = ".github.io"
PREVIEW_SUFFIXES = (".vercel.app", ".netlify.app")


def _scheme(protocol: str) -> str:
    # Accepts both "https:" (browser location) and "https" (URL scheme).
    return protocol.rstrip(":").lower()


def _dirname(pathname: str) -> str:
    return "/".join(pathname.split("/")[:-1])


def resolve_redirect_uri(
    hostname: str,
    protocol: str,
    pathname: str,
    *,
    dev_uri: str = DEV_REDIRECT_URI,
    prod_uri: str = PROD_REDIRECT_URI,
) -> str:
    """Map the page location to the redirect URI registered with Spotify.

    The authorization request and the token exchange both call this, so the
    result must stay a pure function of its inputs.
    """
    host = hostname.lower()
    if host in LOOPBACK_HOSTS:
        return dev_uri
    if host.endswith(PAGES_SUFFIX):
        return f"{_scheme(protocol)}://{host}{_dirname(pathname)}/callback"
    if host.endswith(PREVIEW_SUFFIXES):
        return f"{_scheme(protocol)}://{host}/callback"
    return prod_uri


def detect_environment(hostname: str) -> str:
    host = hostname.lower()
    if host in LOOPBACK_HOSTS:
        return "development"
    if host.endswith(PAGES_SUFFIX):
        return "github-pages"
    if host.endswith(PREVIEW_SUFFIXES):
        return "staging"
    return "production"


def is_secure_context(hostname: str, protocol: str) -> bool:
    return _scheme(protocol) == "https" or hostname.lower() in LOOPBACK_HOSTS


def parse_query(query: str) -> dict[str, str]:
    parsed = urllib.parse.parse_qs(query.lstrip("?"), keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items()}
