from __future__ import annotations

import base64
import hashlib
import secrets
import string
from dataclasses import dataclass

ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

VERIFIER_LENGTH = 64
STATE_LENGTH = 16


@dataclass
class PKCEPair:
    verifier: str
    challenge: str


def random_string(length: int) -> str:
    if length < 0:
        raise ValueError("length must be non-negative.")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_pkce(length: int = VERIFIER_LENGTH) -> PKCEPair:
    verifier = random_string(length)
    return PKCEPair(verifier=verifier, challenge=code_challenge(verifier))


def generate_state(length: int = STATE_LENGTH) -> str:
    return random_string(length)
