from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from . import __version__
from .bookmark_sync import sync_profiles
from .config import Settings, load_settings
from .errors import TempfoxError
from .launch import run_session
from .log import LogConfig, get_logger, setup_logging
from .model import Bookmark

log = get_logger(__name__)


def main(argv: List[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="tempfox",
        description="Run Firefox on a temporary copy of a profile and merge new bookmarks back.",
    )
    p.add_argument("-V", "--version", action="version", version=f"tempfox {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (optional). Env vars override defaults.")
    p.add_argument("--log-level", default=None, help="DEBUG/INFO/WARN/ERROR (overrides env/config).")
    p.add_argument("--no-color", action="store_true", help="Disable colored logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    run = sub.add_parser("run", help="Launch Firefox on a throw-away copy of a profile.")
    run.add_argument("-p", "--profile", default=None, help="Profile name (the part after the dot, default: default).")
    run.add_argument("--firefox-dir", default=None, help="Directory holding Firefox profiles.")
    run.add_argument("--firefox-bin", default=None, help="Firefox executable.")
    run.add_argument("--sync-bookmarks", action="store_true", help="Merge bookmarks added in the copy back into the profile.")
    run.add_argument("--strict", action="store_true", help="Stop the merge after the first failed stage.")
    run.add_argument("--session-file", default=None, help="Session file to restore from and save to.")
    run.add_argument(
        "--disable-clean-history-on-close",
        action="store_true",
        help="Turn off privacy.sanitize.sanitizeOnShutdown in the copy (needed to keep the session).",
    )

    sync = sub.add_parser("sync", help="Merge new bookmarks from a snapshot profile into the original.")
    sync.add_argument("--original", required=True, help="Original profile dir (or places.sqlite).")
    sync.add_argument("--snapshot", required=True, help="Snapshot profile dir (or places.sqlite).")
    sync.add_argument("--anchor-id", type=int, required=True, help="Newest bookmark id of the original before the snapshot was taken.")
    sync.add_argument("--strict", action="store_true", help="Stop after the first failed stage.")

    args = p.parse_args(argv)
    cfg = load_settings(args.config)
    if args.log_level:
        cfg.log_level = args.log_level
    if args.no_color:
        cfg.no_color = True
    setup_logging(LogConfig.from_settings(cfg))

    if args.cmd == "run":
        return _cmd_run(args, cfg)
    if args.cmd == "sync":
        return _cmd_sync(args, cfg)
    return 2


def _cmd_run(args, cfg: Settings) -> int:
    if args.profile:
        cfg.profile = args.profile
    if args.firefox_dir:
        cfg.firefox_dir = args.firefox_dir
    if args.firefox_bin:
        cfg.firefox_bin = args.firefox_bin
    if args.sync_bookmarks:
        cfg.sync_bookmarks = True
    if args.strict:
        cfg.sync_strict = True
    if args.session_file:
        cfg.session_file = args.session_file
    if args.disable_clean_history_on_close:
        cfg.disable_clean_history_on_close = True
    try:
        return run_session(cfg)
    except (TempfoxError, OSError) as e:
        log.error("Error from run: %s", e)
        return 1


def _cmd_sync(args, cfg: Settings) -> int:
    if args.strict:
        cfg.sync_strict = True
    anchor = Bookmark(id=args.anchor_id) if args.anchor_id > 0 else None
    report = sync_profiles(Path(args.original), Path(args.snapshot), anchor, cfg)
    log.info(
        "bookmarks=%d places=%d origins=%d reused_origins=%d",
        report.inserted_bookmarks,
        report.inserted_places,
        report.inserted_origins,
        report.reused_origins,
    )
    return 0 if report.ok else 1
