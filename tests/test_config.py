"""Tests for Config defaults and persistence."""

from __future__ import annotations

import json
from pathlib import Path

from memotori.config import DEFAULT_CAPTURE_HINTS, Config
from memotori.paths import AppPaths


def test_defaults(tmp_path: Path) -> None:
    """New Config on a nonexistent path should have the default settings."""
    config = Config(config_path=tmp_path / "nonexistent" / "config.json")

    assert config.quit_on_close is False
    assert config.text_scale == 1.0
    assert config.capture_hints == DEFAULT_CAPTURE_HINTS


def test_load_or_create_writes_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "memo-tori" / "config.json"
    Config.load_or_create(config_file)

    data = json.loads(config_file.read_text(encoding="utf-8"))
    assert data["version"] == 1
    assert data["quit_on_close"] is False
    assert data["capture_hints"] == DEFAULT_CAPTURE_HINTS


def test_load_or_create_keeps_existing(tmp_path: Path) -> None:
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps({"version": 1, "quit_on_close": True, "text_scale": 1.5}),
        encoding="utf-8",
    )

    config = Config.load_or_create(config_file)

    assert config.quit_on_close is True
    assert config.text_scale == 1.5
    # missing keys fall back to defaults
    assert config.capture_hints == DEFAULT_CAPTURE_HINTS


def test_malformed_file_uses_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "config.json"
    config_file.write_text("{not json", encoding="utf-8")

    config = Config(config_path=config_file)
    assert config.quit_on_close is False


def test_unknown_version_uses_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"version": 99, "quit_on_close": True}), encoding="utf-8")

    assert Config(config_path=config_file).quit_on_close is False


def test_bad_values_are_coerced(tmp_path: Path) -> None:
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps(
            {"version": 1, "text_scale": "huge", "capture_hints": ["Idea:", "  ", 3]}
        ),
        encoding="utf-8",
    )

    config = Config(config_path=config_file)
    assert config.text_scale == 1.0
    assert config.capture_hints == ["Idea:", "3"]


def test_set_and_save(tmp_path: Path) -> None:
    """Setting values, saving and reloading should persist them."""
    config_file = tmp_path / "config.json"
    config = Config(config_path=config_file)

    config.set_quit_on_close(True)
    config.set_text_scale(10)
    config.set_capture_hints(["  Quick thought: ", ""])
    config.save()

    config2 = Config(config_path=config_file)
    assert config2.quit_on_close is True
    assert config2.text_scale == 3.0
    assert config2.capture_hints == ["Quick thought:"]


def test_app_paths_follow_xdg(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))

    paths = AppPaths.resolve()

    assert paths.db_path == tmp_path / "data" / "memo-tori" / "memo-tori.db"
    assert paths.config_path == tmp_path / "config" / "memo-tori" / "config.json"
    assert paths.db_path.parent.is_dir()
    assert paths.config_path.parent.is_dir()
    assert Config().path == paths.config_path
