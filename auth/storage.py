from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from auth.errors import StorageError
from melodyx.constants import DEFAULT_STORAGE_PATH

CODE_VERIFIER_KEY = "spotify_code_verifier"
STATE_KEY = "spotify_state"
ACCESS_TOKEN_KEY = "spotify_access_token"
REFRESH_TOKEN_KEY = "spotify_refresh_token"
TOKEN_EXPIRATION_KEY = "spotify_token_expiration"

PKCE_KEYS = (CODE_VERIFIER_KEY, STATE_KEY)
TOKEN_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, TOKEN_EXPIRATION_KEY)


class KeyValueStorage(ABC):
    """String-keyed, string-valued storage shared by every login attempt."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> set[str]:
        return set(self._items)


class FileStorage(KeyValueStorage):
    def __init__(self, path: str | Path = DEFAULT_STORAGE_PATH) -> None:
        self._path = Path(path)

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as error:
            raise StorageError("Storage file is invalid; expected JSON.") from error
        if not isinstance(raw, dict):
            raise StorageError("Storage file is invalid; expected top-level JSON object.")
        return {str(key): str(value) for key, value in raw.items()}

    def _write_all(self, payload: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()


class NamespacedStorage(KeyValueStorage):
    """View of a shared backend restricted to one browser's keys."""

    def __init__(self, backend: KeyValueStorage, namespace: str) -> None:
        if not namespace:
            raise ValueError("namespace must be non-empty.")
        self._backend = backend
        self._prefix = f"{namespace}:"

    def get(self, key: str) -> str | None:
        return self._backend.get(self._prefix + key)

    def set(self, key: str, value: str) -> None:
        self._backend.set(self._prefix + key, value)

    def remove(self, key: str) -> None:
        self._backend.remove(self._prefix + key)
