from __future__ import annotations

import subprocess
import tempfile
import time
from pathlib import Path
from typing import Optional, Sequence

from .bookmark_sync import capture_anchor, sync_profiles
from .config import Settings
from .errors import TempfoxError
from .log import get_logger
from .model import Bookmark
from .profile import EXTENSIONS_JSON, adjust_extensions_json, copy_profile, require_profile_folder
from .session import add_sessionstore_file, adjust_profile_settings, save_sessionstore_file

log = get_logger(__name__)


def execute_cmd(argv: Sequence[str]) -> int:
    """Run a command in the foreground and return its exit code."""
    if not argv or not argv[0]:
        raise ValueError("No command specified")
    log.info("Launching: %s", " ".join(argv))
    proc = subprocess.run(list(argv), check=False)
    return proc.returncode


def run_session(settings: Settings) -> int:
    profile_dir = require_profile_folder(Path(settings.firefox_dir).expanduser(), settings.profile)
    session_file = Path(settings.session_file).expanduser() if settings.session_file else None

    sync_enabled = settings.sync_bookmarks
    anchor: Optional[Bookmark] = None
    if sync_enabled:
        try:
            anchor = capture_anchor(profile_dir, settings)
            log.info("Bookmark anchor: %s", anchor.id if anchor is not None else "<empty>")
        except TempfoxError as e:
            log.warning("Bookmark merge disabled, cannot read %s: %s", profile_dir, e)
            sync_enabled = False

    with tempfile.TemporaryDirectory(prefix="tempfox-") as tmp:
        snapshot_dir = Path(tmp) / str(int(time.time() * 1000))
        copy_profile(profile_dir, snapshot_dir, settings.ignore_files)

        extensions = snapshot_dir / EXTENSIONS_JSON
        if extensions.exists():
            adjust_extensions_json(extensions)

        if session_file is not None:
            adjust_profile_settings(snapshot_dir, settings.disable_clean_history_on_close)
            add_sessionstore_file(session_file, snapshot_dir, fail_if_does_not_exist=False)

        code = execute_cmd([settings.firefox_bin, "--profile", str(snapshot_dir)])
        log.info("Firefox exited with code %d", code)

        if session_file is not None:
            try:
                save_sessionstore_file(session_file, snapshot_dir)
            except OSError as e:
                log.warning("Failed to save session to %s: %s", session_file, e)

        if sync_enabled:
            report = sync_profiles(profile_dir, snapshot_dir, anchor, settings)
            if not report.ok:
                log.warning("Bookmark merge finished with %d error(s).", len(report.errors))
    return code
