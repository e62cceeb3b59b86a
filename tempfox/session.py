from __future__ import annotations

import re
import shutil
from pathlib import Path

from .log import get_logger

log = get_logger(__name__)

PREFS_FILE_NAME = "prefs.js"
SESSIONSTORE_DEFAULT_NAME = "sessionstore.jsonlz4"

_HISTORY_ENABLED_RE = re.compile(r'(user_pref\("places\.history\.enabled",\s*)(false|true)(\);)')
_STARTUP_PAGE_RE = re.compile(r'user_pref\("browser\.startup\.page",\s*(\d)\);')
_SANITIZE_ON_SHUTDOWN_RE = re.compile(r'(user_pref\("privacy\.sanitize\.sanitizeOnShutdown",\s*)(false|true)(\);)')


def adjust_profile_settings(profile_dir: Path, disable_clean_history_on_close: bool) -> None:
    """Make the snapshot keep history and restore its session on the next start."""
    prefs = profile_dir / PREFS_FILE_NAME
    content = prefs.read_text(encoding="utf-8") if prefs.exists() else ""

    content = _HISTORY_ENABLED_RE.sub(r"\1true\3", content)

    if not _STARTUP_PAGE_RE.search(content):
        if content and not content.endswith("\n"):
            content += "\n"
        content += 'user_pref("browser.startup.page", 3);\n'

    # Sanitizing on shutdown would wipe the session we want to save.
    if disable_clean_history_on_close:
        content = _SANITIZE_ON_SHUTDOWN_RE.sub(r"\1false\3", content)

    prefs.write_text(content, encoding="utf-8")


def add_sessionstore_file(file_location: Path, profile_dir: Path, fail_if_does_not_exist: bool) -> bool:
    """Seed the snapshot with a saved session. Returns True when a file was copied."""
    if not file_location.exists():
        if fail_if_does_not_exist:
            raise FileNotFoundError(f"`{file_location}` sessionstore file doesn't exist")
        log.debug("No sessionstore file at %s; starting with an empty session.", file_location)
        return False
    shutil.copyfile(file_location, profile_dir / SESSIONSTORE_DEFAULT_NAME)
    return True


def save_sessionstore_file(file_location: Path, profile_dir: Path) -> None:
    source = profile_dir / SESSIONSTORE_DEFAULT_NAME
    file_location.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, file_location)
    log.info("Saved session to %s", file_location)
