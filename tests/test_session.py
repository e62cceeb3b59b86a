from pathlib import Path

import pytest

from tempfox.session import (
    SESSIONSTORE_DEFAULT_NAME,
    add_sessionstore_file,
    adjust_profile_settings,
    save_sessionstore_file,
)


def test_adjust_profile_settings_enables_history_and_session_restore(tmp_path: Path):
    prefs = tmp_path / "prefs.js"
    prefs.write_text(
        'user_pref("places.history.enabled", false);\n'
        'user_pref("privacy.sanitize.sanitizeOnShutdown", true);\n',
        encoding="utf-8",
    )

    adjust_profile_settings(tmp_path, disable_clean_history_on_close=False)
    content = prefs.read_text(encoding="utf-8")
    assert 'user_pref("places.history.enabled", true);' in content
    assert 'user_pref("browser.startup.page", 3);' in content
    assert 'user_pref("privacy.sanitize.sanitizeOnShutdown", true);' in content

    adjust_profile_settings(tmp_path, disable_clean_history_on_close=True)
    content = prefs.read_text(encoding="utf-8")
    assert 'user_pref("privacy.sanitize.sanitizeOnShutdown", false);' in content
    assert content.count("browser.startup.page") == 1


def test_existing_startup_page_is_kept(tmp_path: Path):
    prefs = tmp_path / "prefs.js"
    prefs.write_text('user_pref("browser.startup.page", 1);\n', encoding="utf-8")
    adjust_profile_settings(tmp_path, disable_clean_history_on_close=False)
    assert prefs.read_text(encoding="utf-8") == 'user_pref("browser.startup.page", 1);\n'


def test_sessionstore_roundtrip(tmp_path: Path):
    profile = tmp_path / "profile"
    profile.mkdir()
    saved = tmp_path / "saved" / "session.jsonlz4"

    assert add_sessionstore_file(saved, profile, fail_if_does_not_exist=False) is False
    with pytest.raises(FileNotFoundError):
        add_sessionstore_file(saved, profile, fail_if_does_not_exist=True)

    (profile / SESSIONSTORE_DEFAULT_NAME).write_bytes(b"mozLz40\0session")
    save_sessionstore_file(saved, profile)
    assert saved.read_bytes() == b"mozLz40\0session"

    other = tmp_path / "other"
    other.mkdir()
    assert add_sessionstore_file(saved, other, fail_if_does_not_exist=True) is True
    assert (other / SESSIONSTORE_DEFAULT_NAME).read_bytes() == b"mozLz40\0session"
