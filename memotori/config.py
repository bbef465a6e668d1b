"""Configuration management for Memo Tori."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from memotori.paths import APP_DIR_NAME, config_home

_CONFIG_VERSION = 1

MIN_TEXT_SCALE = 0.5
MAX_TEXT_SCALE = 3.0

DEFAULT_CAPTURE_HINTS = [
    "L'idee que je viens d'avoir :",
    "Note rapide :",
    "Je ne dois pas oublier :",
    "Pense-bete du moment :",
    "A creuser plus tard :",
]


def _default_config_path() -> Path:
    """Get default config file path following the XDG base directory layout."""
    return config_home() / APP_DIR_NAME / "config.json"


class Config:
    """Application settings with persistence."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._path = config_path or _default_config_path()
        self._data: dict[str, Any] = self._load()

    @classmethod
    def load_or_create(cls, config_path: Path | None = None) -> Config:
        """Load settings, writing the defaults out when no file exists yet."""
        config = cls(config_path)
        if not config.path.exists():
            config.save()
        return config

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        """Load config from disk or return defaults."""
        if not self._path.exists():
            return self._defaults()
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            return self._defaults()
        if not isinstance(data, dict) or data.get("version") != _CONFIG_VERSION:
            return self._defaults()
        return {**self._defaults(), **data}

    def _defaults(self) -> dict[str, Any]:
        return {
            "version": _CONFIG_VERSION,
            "quit_on_close": False,
            "text_scale": 1.0,
            "capture_hints": list(DEFAULT_CAPTURE_HINTS),
        }

    def save(self) -> None:
        """Persist config to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
        except OSError:
            pass  # settings are not critical; defaults apply next start

    def as_dict(self) -> dict[str, Any]:
        return {
            "quit_on_close": self.quit_on_close,
            "text_scale": self.text_scale,
            "capture_hints": self.capture_hints,
        }

    # -- Getters --

    @property
    def quit_on_close(self) -> bool:
        return bool(self._data.get("quit_on_close", False))

    @property
    def text_scale(self) -> float:
        try:
            value = float(self._data.get("text_scale", 1.0))
        except (TypeError, ValueError):
            return 1.0
        return min(MAX_TEXT_SCALE, max(MIN_TEXT_SCALE, value))

    @property
    def capture_hints(self) -> list[str]:
        hints = self._data.get("capture_hints", DEFAULT_CAPTURE_HINTS)
        if not isinstance(hints, list):
            return list(DEFAULT_CAPTURE_HINTS)
        return [str(h) for h in hints if str(h).strip()]

    # -- Setters --

    def set_quit_on_close(self, value: bool) -> None:
        self._data["quit_on_close"] = bool(value)

    def set_text_scale(self, value: float) -> None:
        self._data["text_scale"] = min(MAX_TEXT_SCALE, max(MIN_TEXT_SCALE, float(value)))

    def set_capture_hints(self, hints: list[str]) -> None:
        self._data["capture_hints"] = [h.strip() for h in hints if h.strip()]
