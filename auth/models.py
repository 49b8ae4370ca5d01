from __future__ import annotations

import enum
import urllib.parse
from dataclasses import dataclass, field

from auth.errors import SpotifyAuthError


@dataclass
class PageLocation:
    hostname: str
    protocol: str
    pathname: str
    query: str = ""

    @classmethod
    def from_url(cls, url: str) -> "PageLocation":
        parsed = urllib.parse.urlparse(url)
        return cls(
            hostname=parsed.hostname or "",
            protocol=f"{parsed.scheme}:",
            pathname=parsed.path or "/",
            query=parsed.query,
        )


@dataclass
class PkceSession:
    verifier: str
    state: str


@dataclass
class TokenSet:
    access_token: str
    refresh_token: str
    expires_at: int


@dataclass
class AuthorizationRequest:
    url: str
    state: str
    redirect_uri: str


class CallbackState(str, enum.Enum):
    AWAITING_CALLBACK = "awaiting_callback"
    VALIDATING = "validating"
    EXCHANGING = "exchanging"
    LOGGED_IN = "logged_in"
    EXCHANGE_FAILED = "exchange_failed"
    REJECTED = "rejected"


@dataclass
class CallbackResult:
    state: CallbackState
    tokens: TokenSet | None = None
    error: SpotifyAuthError | None = None
    history: list[CallbackState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is CallbackState.LOGGED_IN
