from pathlib import Path

from tempfox.config import DEFAULT_IGNORE_FILES, Settings, load_settings


def test_sync_is_opt_in_and_fail_soft_by_default(monkeypatch):
    monkeypatch.delenv("TEMPFOX_SYNC_BOOKMARKS", raising=False)
    monkeypatch.delenv("TEMPFOX_SYNC_STRICT", raising=False)
    monkeypatch.delenv("TEMPFOX_IGNORE_FILES", raising=False)
    s = Settings.from_env()
    assert s.sync_bookmarks is False
    assert s.sync_strict is False
    assert s.ignore_files == DEFAULT_IGNORE_FILES


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TEMPFOX_SYNC_BOOKMARKS", "yes")
    monkeypatch.setenv("TEMPFOX_PROFILE", "work")
    monkeypatch.setenv("TEMPFOX_BUSY_TIMEOUT_MS", "not-a-number")
    monkeypatch.setenv("TEMPFOX_IGNORE_FILES", "lock, cache2 ,")
    s = Settings.from_env()
    assert s.sync_bookmarks is True
    assert s.profile == "work"
    assert s.busy_timeout_ms == 5000
    assert s.ignore_files == ["lock", "cache2"]


def test_yaml_file_wins_over_env_and_ignores_unknown_keys(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("TEMPFOX_PROFILE", "from-env")
    cfg = tmp_path / "tempfox.yaml"
    cfg.write_text("profile: from-file\nsync_strict: true\nnot_a_setting: 1\n", encoding="utf-8")
    s = load_settings(str(cfg))
    assert s.profile == "from-file"
    assert s.sync_strict is True
    assert not hasattr(s, "not_a_setting")
