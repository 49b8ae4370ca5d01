from __future__ import annotations

from collections.abc import Callable

from auth import pkce, spotify_oauth2
from auth.callback import CallbackHandler, is_callback
from auth.errors import ConfigurationError
from auth.events import AuthEvent, AuthListener, log_event
from auth.models import AuthorizationRequest, CallbackResult, PageLocation
from auth.redirect import parse_query, resolve_redirect_uri
from auth.session import SessionGuard, current_time_ms, noop_reload
from auth.spotify_oauth2 import ExchangeCodeFn, TokenResponse
from auth.storage import CODE_VERIFIER_KEY, STATE_KEY, KeyValueStorage
from melodyx.constants import (
    DEFAULT_SCOPES,
    DEV_REDIRECT_URI,
    LOGGER,
    PROD_REDIRECT_URI,
)
from melodyx.env import is_client_id_configured


def _noop_navigate(url: str) -> None:
    del url


class SpotifyAuth:
    """PKCE login for a public Spotify client.

    ``login`` and ``handle_callback`` are independent entry points: the first
    runs before the browser leaves for Spotify, the second on the page load
    that comes back. They share nothing but ``storage``.
    """

    def __init__(
        self,
        *,
        storage: KeyValueStorage,
        client_id: str,
        scopes: list[str] | None = None,
        show_dialog: bool = True,
        dev_redirect_uri: str = DEV_REDIRECT_URI,
        prod_redirect_uri: str = PROD_REDIRECT_URI,
        http_timeout: float = 10.0,
        exchange_code_fn: ExchangeCodeFn = spotify_oauth2.exchange_code,
        navigate: Callable[[str], None] = _noop_navigate,
        reload: Callable[[], None] = noop_reload,
        clock_ms: Callable[[], int] = current_time_ms,
        listener: AuthListener = log_event,
    ) -> None:
        self.storage = storage
        self.client_id = client_id
        self.scopes = scopes or list(DEFAULT_SCOPES)
        self.show_dialog = show_dialog
        self.dev_redirect_uri = dev_redirect_uri
        self.prod_redirect_uri = prod_redirect_uri
        self.http_timeout = http_timeout

        self._exchange_code_fn = exchange_code_fn
        self._navigate = navigate
        self._listener = listener
        self.session = SessionGuard(storage, clock_ms=clock_ms, reload=reload)

    @property
    def is_configured(self) -> bool:
        return is_client_id_configured(self.client_id)

    def redirect_uri(self, location: PageLocation) -> str:
        return resolve_redirect_uri(
            location.hostname,
            location.protocol,
            location.pathname,
            dev_uri=self.dev_redirect_uri,
            prod_uri=self.prod_redirect_uri,
        )

    # -- begin -----------------------------------------------------------------

    def login(self, location: PageLocation) -> AuthorizationRequest:
        redirect_uri = self.redirect_uri(location)
        if not self.is_configured:
            self._listener(AuthEvent.setup_required(redirect_uri))
            raise ConfigurationError("Spotify client id is not configured.")

        pair = pkce.generate_pkce()
        state = pkce.generate_state()

        # Must be persisted before navigating away; the callback reads it back.
        self.storage.set(CODE_VERIFIER_KEY, pair.verifier)
        self.storage.set(STATE_KEY, state)

        url = spotify_oauth2.build_authorization_url(
            client_id=self.client_id,
            redirect_uri=redirect_uri,
            scopes=self.scopes,
            state=state,
            code_challenge=pair.challenge,
            show_dialog=self.show_dialog,
        )
        LOGGER.info("Starting Spotify login with redirect_uri=%s", redirect_uri)
        self._listener(AuthEvent.loading())
        self._navigate(url)
        return AuthorizationRequest(url=url, state=state, redirect_uri=redirect_uri)

    # -- resume ----------------------------------------------------------------

    def is_callback(self, location: PageLocation) -> bool:
        return is_callback(parse_query(location.query))

    async def handle_callback(self, location: PageLocation) -> CallbackResult:
        redirect_uri = self.redirect_uri(location)

        async def exchange(code: str, verifier: str) -> TokenResponse:
            return await self._exchange_code_fn(
                client_id=self.client_id,
                code=code,
                redirect_uri=redirect_uri,
                code_verifier=verifier,
                timeout=self.http_timeout,
            )

        handler = CallbackHandler(
            self.storage,
            self.session,
            exchange,
            listener=self._listener,
        )
        return await handler.handle(parse_query(location.query))

    # -- session ---------------------------------------------------------------

    def is_logged_in(self) -> bool:
        return self.session.is_logged_in()

    def get_access_token(self) -> str | None:
        return self.session.get_access_token()

    def logout(self) -> None:
        self.session.logout()
