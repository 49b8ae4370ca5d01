from __future__ import annotations

import urllib.parse
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from auth.errors import ExchangeError, TransportError
from melodyx.constants import LOGGER

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"


@dataclass
class TokenResponse:
    access_token: str
    refresh_token: str
    expires_in: int

    @classmethod
    def from_payload(cls, payload: object) -> "TokenResponse":
        if not isinstance(payload, dict):
            raise TransportError("Token response must be a JSON object.")

        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        expires_in = payload.get("expires_in")

        if not isinstance(access_token, str) or not access_token:
            raise TransportError("Token response missing access_token.")
        if not isinstance(refresh_token, str) or not refresh_token:
            raise TransportError("Token response missing refresh_token.")
        if isinstance(expires_in, bool) or not isinstance(expires_in, int):
            raise TransportError("Token response missing expires_in.")

        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
        )

    def expires_at_ms(self, issued_at_ms: int) -> int:
        return issued_at_ms + self.expires_in * 1000


ExchangeCodeFn = Callable[..., Awaitable[TokenResponse]]


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: list[str],
    state: str,
    code_challenge: str,
    *,
    show_dialog: bool = True,
) -> str:
    query = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": " ".join(scopes),
        "state": state,
        "code_challenge_method": "S256",
        "code_challenge": code_challenge,
        "show_dialog": "true" if show_dialog else "false",
    }
    return f"{SPOTIFY_AUTHORIZE_URL}?{urllib.parse.urlencode(query)}"


async def exchange_code(
    client_id: str,
    code: str,
    redirect_uri: str,
    code_verifier: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
) -> TokenResponse:
    # Public client: the verifier stands in for a client secret.
    payload = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "client_id": client_id,
        "code_verifier": code_verifier,
    }
    own_client = client is None
    http_client = client or httpx.AsyncClient(timeout=timeout)

    try:
        response = await http_client.post(
            SPOTIFY_TOKEN_URL,
            data=payload,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as error:
        LOGGER.warning("Spotify token endpoint returned %s", error.response.status_code)
        raise ExchangeError(error.response.status_code, error.response.text) from error
    except httpx.HTTPError as error:
        raise TransportError(f"Token request failed: {error}") from error
    finally:
        if own_client:
            await http_client.aclose()

    try:
        data = response.json()
    except ValueError as error:
        raise TransportError("Token response is not valid JSON.") from error

    return TokenResponse.from_payload(data)
