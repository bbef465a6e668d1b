"""Filesystem locations for the database and the settings file."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

APP_DIR_NAME = "memo-tori"


def data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share")


def config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")


@dataclass(frozen=True)
class AppPaths:
    db_path: Path
    config_path: Path

    @classmethod
    def resolve(cls) -> AppPaths:
        """Resolve the XDG locations and make sure both directories exist."""
        data_dir = data_home() / APP_DIR_NAME
        config_dir = config_home() / APP_DIR_NAME
        data_dir.mkdir(parents=True, exist_ok=True)
        config_dir.mkdir(parents=True, exist_ok=True)
        return cls(
            db_path=data_dir / f"{APP_DIR_NAME}.db",
            config_path=config_dir / "config.json",
        )
