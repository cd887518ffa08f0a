"""
Configuration management for dbxsync.

Settings live in .dbxsync/settings.json next to the app; a few values can
be overridden from the environment:
- DROPBOX_APP_KEY / DROPBOX_APP_SECRET: app credentials
- DROPBOX_ACCESS_TOKEN: use this token instead of the saved one
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .core.paths import get_settings_path, get_token_path
from .remote.client import CHUNK_SIZE

ENV_APP_KEY = "DROPBOX_APP_KEY"
ENV_APP_SECRET = "DROPBOX_APP_SECRET"
ENV_ACCESS_TOKEN = "DROPBOX_ACCESS_TOKEN"


@dataclass
class AppSettings:
    """App credentials and transfer options that persist across runs."""
    path: Path = field(default_factory=get_settings_path)
    app_key: str = ""
    app_secret: str = ""
    token_path: Path = field(default_factory=get_token_path)
    timeout: int = 100
    max_retries: int = 4
    chunk_size: int = CHUNK_SIZE
    # Only from the environment, never saved
    access_token: Optional[str] = None

    @classmethod
    def load(cls, path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> "AppSettings":
        """Load settings from file, then apply environment overrides."""
        settings = cls(path=path) if path else cls()
        environ = os.environ if environ is None else environ

        if settings.path.exists():
            try:
                with open(settings.path) as f:
                    data = json.load(f)

                settings.app_key = data.get("app_key", settings.app_key)
                settings.app_secret = data.get("app_secret", settings.app_secret)
                if data.get("token_path"):
                    settings.token_path = Path(data["token_path"])
                settings.timeout = int(data.get("timeout", settings.timeout))
                settings.max_retries = int(data.get("max_retries", settings.max_retries))
                settings.chunk_size = int(data.get("chunk_size", settings.chunk_size))
            except (json.JSONDecodeError, IOError, ValueError, TypeError) as e:
                print(f"Warning: Could not load {settings.path.name}: {e}")

        settings.app_key = environ.get(ENV_APP_KEY, settings.app_key)
        settings.app_secret = environ.get(ENV_APP_SECRET, settings.app_secret)
        settings.access_token = environ.get(ENV_ACCESS_TOKEN) or None
        return settings

    def to_dict(self) -> dict:
        return {
            "app_key": self.app_key,
            "app_secret": self.app_secret,
            "token_path": str(self.token_path),
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "chunk_size": self.chunk_size,
        }

    def save(self):
        """Save settings to file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @property
    def is_configured(self) -> bool:
        """Check if app credentials are available for linking."""
        return bool(self.app_key)
