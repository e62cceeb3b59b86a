from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import Iterable, Optional, Tuple

from .errors import ProfileNotFoundError
from .log import get_logger

log = get_logger(__name__)

HASH_NAME_SPLIT_CHAR = "."
EXTENSIONS_JSON = "extensions.json"

# "path":"<anything>extensions/<addon-id>.xpi"; the greedy prefix makes the last
# "extensions/" segment of each path win.
_EXTENSION_PATH_RE = re.compile(r'("path":\s*)(")([^"]*)(extensions[/\\][^"/\\]+\.xpi)(")')


def find_profile_folder(firefox_dir: Path | str, profile_name: str) -> Optional[Tuple[Path, str]]:
    """Find ``<hash>.<profile_name>`` under the Firefox directory."""
    for entry in sorted(Path(firefox_dir).iterdir()):
        if not entry.is_dir() or HASH_NAME_SPLIT_CHAR not in entry.name:
            continue
        _hash, name = entry.name.split(HASH_NAME_SPLIT_CHAR, 1)
        if name == profile_name:
            return entry, entry.name
    return None


def require_profile_folder(firefox_dir: Path | str, profile_name: str) -> Path:
    found = find_profile_folder(firefox_dir, profile_name)
    if found is None:
        raise ProfileNotFoundError(f"No profile with name `{profile_name}` found in {firefox_dir}")
    return found[0]


def copy_profile(src: Path, dest: Path, ignore: Iterable[str]) -> Path:
    """Copy a profile directory, skipping caches, locks and WAL files."""
    skip = set(ignore)
    dest.mkdir(parents=True, exist_ok=True)
    copied = 0
    for entry in sorted(src.iterdir()):
        if entry.name in skip:
            continue
        target = dest / entry.name
        if entry.is_dir():
            shutil.copytree(entry, target, symlinks=True)
        else:
            shutil.copy2(entry, target)
        copied += 1
    log.info("Copied %d profile entries %s -> %s", copied, src, dest)
    return dest


def adjust_extensions_json(extensions: Path) -> int:
    """Point add-on paths in extensions.json at the copied profile.

    Returns the number of rewritten paths.
    """
    content = extensions.read_text(encoding="utf-8")
    profile_dir = extensions.parent
    count = 0

    def _sub(m: re.Match) -> str:
        nonlocal count
        count += 1
        new_path = (profile_dir / m.group(4).replace("\\", "/")).as_posix()
        return f"{m.group(1)}{m.group(2)}{new_path}{m.group(5)}"

    result = _EXTENSION_PATH_RE.sub(_sub, content)
    extensions.write_text(result, encoding="utf-8")
    log.debug("Rewrote %d extension path(s) in %s", count, extensions)
    return count
