"""Runtime settings for the map session."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


def default_store_path() -> Path:
    return Path.home() / ".mapty" / "storage.json"


@dataclass(frozen=True)
class AppSettings:
    zoom_level: int = 13
    pan_duration_sec: float = 1.0
    form_cooldown_sec: float = 1.0
    storage_key: str = "workouts"
    # Browsers never time out a pending permission prompt; NiceGUI needs a bound.
    geolocation_timeout_sec: float = 60.0
    store_path: Path | None = None
    web_host: str = "127.0.0.1"
    web_port: int = 8080
    browser_storage: bool = False
    storage_secret: str = "mapty-local"

    @property
    def resolved_store_path(self) -> Path:
        return self.store_path or default_store_path()
