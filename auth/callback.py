from __future__ import annotations

import hmac
from collections.abc import Awaitable, Callable, Mapping

from auth.errors import (
    AuthorizationError,
    SecurityError,
    SpotifyAuthError,
    StorageError,
    TransportError,
)
from auth.events import AuthEvent, AuthListener, log_event
from auth.models import CallbackResult, CallbackState, PkceSession
from auth.session import SessionGuard
from auth.spotify_oauth2 import TokenResponse
from auth.storage import CODE_VERIFIER_KEY, PKCE_KEYS, STATE_KEY, KeyValueStorage
from melodyx.constants import LOGGER

ExchangeFn = Callable[[str, str], Awaitable[TokenResponse]]


def is_callback(params: Mapping[str, str]) -> bool:
    return "code" in params or "error" in params


class CallbackHandler:
    """Resumes a login after Spotify redirects back to the application.

    Only the persisted PKCE session links this to the login that started the
    flow. That session is consumed by every callback that reaches a terminal
    state, whatever the outcome.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        session: SessionGuard,
        exchange: ExchangeFn,
        *,
        listener: AuthListener = log_event,
    ) -> None:
        self._storage = storage
        self._session = session
        self._exchange = exchange
        self._listener = listener

    def pending_session(self) -> PkceSession | None:
        verifier = self._storage.get(CODE_VERIFIER_KEY)
        state = self._storage.get(STATE_KEY)
        if not verifier or not state:
            return None
        return PkceSession(verifier=verifier, state=state)

    async def handle(self, params: Mapping[str, str]) -> CallbackResult:
        result = CallbackResult(state=CallbackState.AWAITING_CALLBACK)
        result.history.append(result.state)
        if not is_callback(params):
            return result

        self._transition(result, CallbackState.VALIDATING)
        try:
            try:
                await self._validate_and_exchange(result, params)
            finally:
                self._clear_pending()
        except StorageError as failure:
            LOGGER.error("Spotify callback aborted: %s", failure.message)
            result.error = failure
            if result.state is not CallbackState.REJECTED:
                self._transition(result, CallbackState.REJECTED)

        if result.error is not None:
            self._listener(AuthEvent.failure(result.error))
        else:
            self._listener(AuthEvent.success())
        return result

    async def _validate_and_exchange(self, result: CallbackResult, params: Mapping[str, str]) -> None:
        error = params.get("error")
        if error is not None:
            self._reject(result, AuthorizationError(error or "unknown_error"))
            return

        pending = self.pending_session()
        incoming_state = params.get("state")
        if pending is None:
            self._reject(result, SecurityError("Security error: no pending login for this callback."))
            return
        if incoming_state is None or not hmac.compare_digest(
            incoming_state.encode(), pending.state.encode()
        ):
            self._reject(result, SecurityError())
            return

        code = params.get("code")
        if not code:
            self._reject(result, AuthorizationError("missing_code"))
            return

        self._transition(result, CallbackState.EXCHANGING)
        try:
            token = await self._exchange(code, pending.verifier)
        except SpotifyAuthError as failure:
            result.error = failure
        except Exception as failure:
            LOGGER.exception("Unexpected failure during token exchange")
            result.error = TransportError(f"Token request failed: {failure}")

        if result.error is not None:
            LOGGER.warning("Token exchange failed: %s", result.error.message)
            self._transition(result, CallbackState.EXCHANGE_FAILED)
            return

        result.tokens = self._session.store(token)
        self._transition(result, CallbackState.LOGGED_IN)

    def _reject(self, result: CallbackResult, error: SpotifyAuthError) -> None:
        LOGGER.warning("Rejected Spotify callback: %s", error.message)
        result.error = error
        self._transition(result, CallbackState.REJECTED)

    def _transition(self, result: CallbackResult, state: CallbackState) -> None:
        LOGGER.debug("Callback %s -> %s", result.state.value, state.value)
        result.state = state
        result.history.append(state)

    def _clear_pending(self) -> None:
        for key in PKCE_KEYS:
            self._storage.remove(key)
