import pytest

from auth.events import EventRecorder
from auth.storage import MemoryStorage


class FakeClock:
    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for key in (
        "SPOTIFY_CLIENT_ID",
        "VITE_SPOTIFY_CLIENT_ID",
        "SPOTIFY_SCOPES",
        "SPOTIFY_SHOW_DIALOG",
        "MELODYX_DEV_REDIRECT_URI",
        "MELODYX_PROD_REDIRECT_URI",
        "MELODYX_HTTP_TIMEOUT",
        "MELODYX_DEBUG",
        "MELODYX_HOST",
        "MELODYX_PORT",
        "MELODYX_SESSION_SECRET",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MELODYX_STORAGE_PATH", str(tmp_path / "storage.json"))
