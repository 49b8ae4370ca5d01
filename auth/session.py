from __future__ import annotations

import time
from collections.abc import Callable

from auth.models import TokenSet
from auth.spotify_oauth2 import TokenResponse
from auth.storage import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    TOKEN_EXPIRATION_KEY,
    TOKEN_KEYS,
    KeyValueStorage,
)
from melodyx.constants import LOGGER


def current_time_ms() -> int:
    return int(time.time() * 1000)


def noop_reload() -> None:
    return None


class SessionGuard:
    """Durable token set kept in client storage.

    The expiration key is written last and removed first; readers require
    all three keys, so an interrupted write never looks like a session.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock_ms: Callable[[], int] = current_time_ms,
        reload: Callable[[], None] = noop_reload,
    ) -> None:
        self._storage = storage
        self._clock_ms = clock_ms
        self._reload = reload

    def store(self, token: TokenResponse) -> TokenSet:
        token_set = TokenSet(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=token.expires_at_ms(self._clock_ms()),
        )
        self._storage.remove(TOKEN_EXPIRATION_KEY)
        self._storage.set(ACCESS_TOKEN_KEY, token_set.access_token)
        self._storage.set(REFRESH_TOKEN_KEY, token_set.refresh_token)
        self._storage.set(TOKEN_EXPIRATION_KEY, str(token_set.expires_at))
        LOGGER.info("Stored Spotify token set expiring at %s", token_set.expires_at)
        return token_set

    def token_set(self) -> TokenSet | None:
        access_token = self._storage.get(ACCESS_TOKEN_KEY)
        refresh_token = self._storage.get(REFRESH_TOKEN_KEY)
        expiration = self._storage.get(TOKEN_EXPIRATION_KEY)
        if not access_token or not refresh_token or not expiration:
            return None
        try:
            expires_at = int(expiration)
        except ValueError:
            LOGGER.warning("Ignoring unreadable token expiration %r", expiration)
            return None
        return TokenSet(access_token, refresh_token, expires_at)

    def is_logged_in(self) -> bool:
        token_set = self.token_set()
        if token_set is None:
            return False
        return self._clock_ms() < token_set.expires_at

    def get_access_token(self) -> str | None:
        if not self.is_logged_in():
            return None
        return self._storage.get(ACCESS_TOKEN_KEY)

    def expires_in_ms(self) -> int:
        token_set = self.token_set()
        if token_set is None:
            return 0
        return max(0, token_set.expires_at - self._clock_ms())

    def clear(self) -> None:
        for key in reversed(TOKEN_KEYS):
            self._storage.remove(key)

    def logout(self) -> None:
        self.clear()
        LOGGER.info("Logged out of Spotify")
        self._reload()
