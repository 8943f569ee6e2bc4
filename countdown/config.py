"""Application configuration management."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from countdown.models import AppConfig

log = logging.getLogger(__name__)


def _config_dir() -> Path:
    override = os.environ.get("COUNTDOWN_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "countdown"


_CONFIG_DIR = _config_dir()
_CONFIG_FILE = _CONFIG_DIR / "config.json"


def load_config() -> AppConfig:
    """Load config from disk, returning defaults if none exists."""
    if _CONFIG_FILE.exists():
        try:
            data = json.loads(_CONFIG_FILE.read_text())
            return AppConfig(**data)
        except (json.JSONDecodeError, TypeError, ValidationError):
            log.warning("Ignoring unreadable config file %s", _CONFIG_FILE)
    return AppConfig()


def save_config(config: AppConfig) -> Path:
    """Write config to disk. Returns the config file path."""
    _CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    _CONFIG_FILE.write_text(config.model_dump_json(indent=2))
    return _CONFIG_FILE


def update_config(**changes: Any) -> AppConfig:
    """Apply changes on top of the stored config, validate, and save."""
    current = load_config()
    updated = AppConfig(**{**current.model_dump(), **changes})
    save_config(updated)
    return updated


def reset_config() -> AppConfig:
    """Restore defaults and save."""
    config = AppConfig()
    save_config(config)
    return config
