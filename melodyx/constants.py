from __future__ import annotations

import logging

LOGGER = logging.getLogger("melodyx.auth")
APP_VERSION = "0.1.0"

DEFAULT_CLIENT_ID = "6b0945e253ec4d6d87b5729d1dd946df"
PLACEHOLDER_CLIENT_ID = "YOUR_SPOTIFY_CLIENT_ID"

DEFAULT_SCOPES = [
    "user-read-private",
    "user-read-email",
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "user-library-read",
    "user-library-modify",
    "user-read-recently-played",
    "user-top-read",
    "playlist-read-private",
    "playlist-read-collaborative",
    "playlist-modify-public",
    "playlist-modify-private",
]

# Redirect URIs registered with Spotify for the fixed environments.
DEV_REDIRECT_URI = "https://melodyx-dev.netlify.app/callback"
PROD_REDIRECT_URI = "https://melodyx.app/callback"

DEFAULT_STORAGE_PATH = ".melodyx_storage.json"
