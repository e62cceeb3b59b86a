from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

DEFAULT_IGNORE_FILES = [
    "cache2",
    "cookies.sqlite-wal",
    "favicons.sqlite-wal",
    "lock",
    "places.sqlite-wal",
    "safebrowsing",
    "sessionstore-backups",
    "startupCache",
    "webappsstore.sqlite-wal",
]


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_optional_str(name: str, default: Optional[str]) -> Optional[str]:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    return v


def _env_list(name: str, default: List[str]) -> List[str]:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return list(default)
    return [x.strip() for x in v.split(",") if x.strip()]


@dataclass
class Settings:
    # Profile / launch
    firefox_dir: str = str(Path.home() / ".mozilla" / "firefox")
    profile: str = "default"
    firefox_bin: str = "firefox"
    ignore_files: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_FILES))

    # Session
    session_file: Optional[str] = None
    disable_clean_history_on_close: bool = False

    # Bookmark merge
    sync_bookmarks: bool = False
    sync_strict: bool = False  # stop after the first failed stage instead of carrying on
    busy_timeout_ms: int = 5000

    # Logging / UX
    log_level: str = "INFO"
    no_color: bool = False

    @staticmethod
    def from_env() -> "Settings":
        s = Settings()
        s.firefox_dir = _env_str("TEMPFOX_FIREFOX_DIR", s.firefox_dir)
        s.profile = _env_str("TEMPFOX_PROFILE", s.profile)
        s.firefox_bin = _env_str("TEMPFOX_FIREFOX_BIN", s.firefox_bin)
        s.ignore_files = _env_list("TEMPFOX_IGNORE_FILES", s.ignore_files)

        s.session_file = _env_optional_str("TEMPFOX_SESSION_FILE", s.session_file)
        s.disable_clean_history_on_close = _env_bool(
            "TEMPFOX_DISABLE_CLEAN_HISTORY_ON_CLOSE", s.disable_clean_history_on_close
        )

        s.sync_bookmarks = _env_bool("TEMPFOX_SYNC_BOOKMARKS", s.sync_bookmarks)
        s.sync_strict = _env_bool("TEMPFOX_SYNC_STRICT", s.sync_strict)
        s.busy_timeout_ms = _env_int("TEMPFOX_BUSY_TIMEOUT_MS", s.busy_timeout_ms)

        s.log_level = _env_str("TEMPFOX_LOG_LEVEL", s.log_level)
        s.no_color = _env_bool("TEMPFOX_NO_COLOR", s.no_color)
        return s

    @staticmethod
    def from_file(path: Path) -> "Settings":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        s = Settings.from_env()
        for k, v in data.items():
            if hasattr(s, k):
                setattr(s, k, v)
        return s


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.from_file(Path(config_path))
    return Settings.from_env()
