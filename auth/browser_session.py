from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets

from melodyx.constants import LOGGER

SESSION_COOKIE = "melodyx_session"


def derive_key(secret: str) -> str:
    """Derive a stable signing key for browser session cookies."""
    return hashlib.sha256(f"melodyx:{secret}".encode()).hexdigest()


def encode(session_id: str, key: str) -> str:
    data = json.dumps({"sid": session_id}, separators=(",", ":")).encode()
    data_b64 = base64.urlsafe_b64encode(data).rstrip(b"=").decode()
    sig = hmac.new(key.encode(), data, hashlib.sha256).digest()
    sig_b64 = base64.urlsafe_b64encode(sig).rstrip(b"=").decode()
    return f"{data_b64}.{sig_b64}"


def decode(cookie: str, key: str) -> str:
    parts = cookie.split(".", 1)
    if len(parts) != 2:
        raise RuntimeError("Invalid session cookie format.")
    data_b64, sig_b64 = parts
    try:
        data = base64.urlsafe_b64decode(data_b64 + "==")
        actual_sig = base64.urlsafe_b64decode(sig_b64 + "==")
    except ValueError as error:
        raise RuntimeError("Invalid session cookie encoding.") from error

    expected_sig = hmac.new(key.encode(), data, hashlib.sha256).digest()
    if not hmac.compare_digest(expected_sig, actual_sig):
        raise RuntimeError("Session cookie signature verification failed.")

    payload = json.loads(data)
    session_id = payload.get("sid") if isinstance(payload, dict) else None
    if not isinstance(session_id, str) or not session_id:
        raise RuntimeError("Session cookie carries no session id.")
    return session_id


def resolve(cookie: str | None, key: str) -> tuple[str, str | None]:
    """Return the browser's session id and, when a new one was issued, its cookie value."""
    if cookie:
        try:
            return decode(cookie, key), None
        except RuntimeError as error:
            LOGGER.info("Issuing a new browser session: %s", error)
    session_id = secrets.token_urlsafe(16)
    return session_id, encode(session_id, key)
