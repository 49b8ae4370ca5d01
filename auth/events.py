from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass

from auth.errors import SpotifyAuthError
from melodyx.constants import LOGGER


class EventKind(str, enum.Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    SETUP_REQUIRED = "setup_required"


@dataclass
class AuthEvent:
    kind: EventKind
    message: str = ""
    error_kind: str | None = None
    redirect_uri: str | None = None

    @classmethod
    def loading(cls) -> "AuthEvent":
        return cls(EventKind.LOADING, "Redirecting to Spotify...")

    @classmethod
    def success(cls) -> "AuthEvent":
        return cls(EventKind.SUCCESS, "Connected to Spotify.")

    @classmethod
    def failure(cls, error: SpotifyAuthError) -> "AuthEvent":
        return cls(EventKind.ERROR, error.message, error_kind=error.kind)

    @classmethod
    def setup_required(cls, redirect_uri: str) -> "AuthEvent":
        return cls(
            EventKind.SETUP_REQUIRED,
            "Register this redirect URI in the Spotify developer dashboard "
            "and configure SPOTIFY_CLIENT_ID.",
            redirect_uri=redirect_uri,
        )


AuthListener = Callable[[AuthEvent], None]


def log_event(event: AuthEvent) -> None:
    if event.kind is EventKind.ERROR:
        LOGGER.warning("Login %s: %s", event.error_kind, event.message)
    elif event.kind is EventKind.SETUP_REQUIRED:
        LOGGER.warning("Spotify client id missing; redirect URI to register: %s", event.redirect_uri)
    else:
        LOGGER.info("Login %s", event.kind.value)


class EventRecorder:
    """Listener that keeps every event, used by the web surface and tests."""

    def __init__(self) -> None:
        self.events: list[AuthEvent] = []

    def __call__(self, event: AuthEvent) -> None:
        log_event(event)
        self.events.append(event)

    @property
    def last(self) -> AuthEvent | None:
        return self.events[-1] if self.events else None
