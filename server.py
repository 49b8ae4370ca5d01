from __future__ import annotations

import html
import os
import secrets
from collections.abc import Awaitable, Callable

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from auth import browser_session, spotify_oauth2
from auth.errors import ConfigurationError, StorageError
from auth.events import AuthEvent, EventKind, EventRecorder
from auth.models import PageLocation
from auth.redirect import detect_environment, is_secure_context
from auth.spotify_auth import SpotifyAuth
from auth.spotify_oauth2 import ExchangeCodeFn
from auth.storage import FileStorage, KeyValueStorage, NamespacedStorage
from melodyx.constants import APP_VERSION, LOGGER
from melodyx.env import (
    get_client_id,
    get_http_timeout,
    get_redirect_uris,
    get_scopes,
    get_session_secret,
    get_show_dialog,
    get_storage_path,
    load_env,
    setup_logging,
    validate_env,
)

ERROR_STATUS = {
    "AuthorizationError": 400,
    "SecurityError": 400,
    "ExchangeError": 502,
    "TransportError": 502,
    "StorageError": 500,
}

_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8">{head}<title>{title}</title></head>
<body>
  <div class="spotify-modal {kind}">
    <h2>{title}</h2>
    <p>{message}</p>
    {extra}
    <p><a href="/">{dismiss}</a></p>
  </div>
</body>
</html>"""


def render_event(event: AuthEvent) -> Response:
    """Render a login outcome as a dismissible notification page."""
    if event.kind is EventKind.SUCCESS:
        return HTMLResponse(
            _PAGE.format(
                head='<meta http-equiv="refresh" content="2; url=/app">',
                title="Connected to Spotify",
                kind="success",
                message="Redirecting to the application...",
                extra="",
                dismiss="Continue",
            )
        )

    if event.kind is EventKind.SETUP_REQUIRED:
        redirect_uri = html.escape(event.redirect_uri or "")
        return HTMLResponse(
            _PAGE.format(
                head="",
                title="Configuration required",
                kind="setup-instructions",
                message=html.escape(event.message),
                extra=f"<p><code>{redirect_uri}</code></p>",
                dismiss="Close",
            ),
            status_code=503,
        )

    if event.kind is EventKind.ERROR:
        return HTMLResponse(
            _PAGE.format(
                head="",
                title="Login error",
                kind="error",
                message=html.escape(event.message),
                extra="",
                dismiss="Close",
            ),
            status_code=ERROR_STATUS.get(event.error_kind or "", 400),
        )

    return HTMLResponse(
        _PAGE.format(
            head="",
            title="Connecting to Spotify",
            kind="loading",
            message=html.escape(event.message),
            extra="",
            dismiss="Cancel",
        )
    )


def _location(request: Request) -> PageLocation:
    return PageLocation.from_url(str(request.url))


BrowserHandler = Callable[[Request, SpotifyAuth, EventRecorder], Awaitable[Response]]


def create_app(
    *,
    storage: KeyValueStorage | None = None,
    exchange_code_fn: ExchangeCodeFn = spotify_oauth2.exchange_code,
    session_secret: str | None = None,
) -> Starlette:
    load_env()
    setup_logging()

    client_id = get_client_id()
    try:
        validate_env()
    except ConfigurationError as error:
        # Served anyway: /login then shows the setup instructions.
        LOGGER.warning("%s", error.message)

    dev_uri, prod_uri = get_redirect_uris()
    scopes = get_scopes()
    show_dialog = get_show_dialog()
    http_timeout = get_http_timeout()
    store = storage if storage is not None else FileStorage(get_storage_path())

    secret = session_secret or get_session_secret()
    if secret is None:
        LOGGER.info("MELODYX_SESSION_SECRET not set; browser sessions end on restart.")
        secret = secrets.token_hex(32)
    cookie_key = browser_session.derive_key(secret)

    def build_auth(session_id: str, recorder: EventRecorder) -> SpotifyAuth:
        return SpotifyAuth(
            storage=NamespacedStorage(store, session_id),
            client_id=client_id,
            scopes=scopes,
            show_dialog=show_dialog,
            dev_redirect_uri=dev_uri,
            prod_redirect_uri=prod_uri,
            http_timeout=http_timeout,
            exchange_code_fn=exchange_code_fn,
            listener=recorder,
        )

    def per_browser(handler: BrowserHandler):
        async def endpoint(request: Request) -> Response:
            session_id, cookie = browser_session.resolve(
                request.cookies.get(browser_session.SESSION_COOKIE), cookie_key
            )
            recorder = EventRecorder()
            response = await handler(request, build_auth(session_id, recorder), recorder)
            if cookie is not None:
                response.set_cookie(
                    browser_session.SESSION_COOKIE,
                    cookie,
                    httponly=True,
                    samesite="lax",
                    secure=request.url.scheme == "https",
                )
            return response

        return endpoint

    async def resume(request: Request, spotify: SpotifyAuth, recorder: EventRecorder) -> Response:
        await spotify.handle_callback(_location(request))
        return render_event(recorder.last)

    async def health_route(request: Request, spotify: SpotifyAuth, recorder: EventRecorder) -> Response:
        location = _location(request)
        return JSONResponse(
            {
                "status": "ok",
                "version": APP_VERSION,
                "environment": detect_environment(location.hostname),
                "logged_in": spotify.is_logged_in(),
            }
        )

    async def home_route(request: Request, spotify: SpotifyAuth, recorder: EventRecorder) -> Response:
        location = _location(request)
        if spotify.is_callback(location):
            return await resume(request, spotify, recorder)

        if not is_secure_context(location.hostname, location.protocol):
            LOGGER.warning("Serving over plain HTTP; Spotify requires HTTPS redirect URIs.")
        link = '<a href="/logout">Log out</a>' if spotify.is_logged_in() else '<a href="/login">Log in</a>'
        return HTMLResponse(f"<!DOCTYPE html><html><body><h1>Melodyx</h1><p>{link}</p></body></html>")

    async def login_route(request: Request, spotify: SpotifyAuth, recorder: EventRecorder) -> Response:
        try:
            authorization = spotify.login(_location(request))
        except ConfigurationError:
            return render_event(recorder.last)
        return RedirectResponse(url=authorization.url, status_code=302)

    async def callback_route(request: Request, spotify: SpotifyAuth, recorder: EventRecorder) -> Response:
        if not spotify.is_callback(_location(request)):
            return RedirectResponse(url="/", status_code=303)
        return await resume(request, spotify, recorder)

    async def logout_route(request: Request, spotify: SpotifyAuth, recorder: EventRecorder) -> Response:
        spotify.logout()
        # Full reload so nothing rendered for the old session survives.
        return RedirectResponse(url="/", status_code=303)

    async def token_route(request: Request, spotify: SpotifyAuth, recorder: EventRecorder) -> Response:
        access_token = spotify.get_access_token()
        if access_token is None:
            return JSONResponse(
                {"error": "not_logged_in", "error_description": "No valid Spotify session."},
                status_code=401,
            )
        return JSONResponse(
            {
                "access_token": access_token,
                "expires_in_ms": spotify.session.expires_in_ms(),
            }
        )

    async def app_route(request: Request, spotify: SpotifyAuth, recorder: EventRecorder) -> Response:
        if not spotify.is_logged_in():
            return RedirectResponse(url="/", status_code=303)
        return HTMLResponse(
            '<!DOCTYPE html><html><body><h1>Melodyx</h1>'
            '<p>Connected to Spotify. <a href="/logout">Log out</a></p></body></html>'
        )

    async def storage_error_handler(request: Request, exc: StorageError) -> Response:
        LOGGER.error("Storage failure on %s: %s", request.url.path, exc)
        return render_event(AuthEvent.failure(exc))

    routes = [
        Route("/", per_browser(home_route), methods=["GET"]),
        Route("/health", per_browser(health_route), methods=["GET"]),
        Route("/login", per_browser(login_route), methods=["GET"]),
        Route("/callback", per_browser(callback_route), methods=["GET"]),
        Route("/logout", per_browser(logout_route), methods=["GET"]),
        Route("/token", per_browser(token_route), methods=["GET"]),
        Route("/app", per_browser(app_route), methods=["GET"]),
    ]
    return Starlette(routes=routes, exception_handlers={StorageError: storage_error_handler})


def main() -> None:
    import uvicorn

    host = os.getenv("MELODYX_HOST", "127.0.0.1")
    port = int(os.getenv("MELODYX_PORT", "8000"))
    app = create_app()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
