from __future__ import annotations


class SpotifyAuthError(RuntimeError):
    """Base class for every failure of a login attempt."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


class AuthorizationError(SpotifyAuthError):
    """Spotify redirected back with ``error=...`` (user denied, invalid scope, ...)."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Authorization error: {reason}")
        self.reason = reason


class SecurityError(SpotifyAuthError):
    """Callback state did not match the pending login; possibly forged or replayed."""

    def __init__(self, message: str = "Security error: invalid state.") -> None:
        super().__init__(message)


class ExchangeError(SpotifyAuthError):
    def __init__(self, status_code: int, detail: str = "") -> None:
        message = f"Token request failed with status {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class TransportError(SpotifyAuthError):
    pass


class ConfigurationError(SpotifyAuthError):
    pass


class StorageError(SpotifyAuthError):
    """Client storage could not be read or written."""
