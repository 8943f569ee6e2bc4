"""Tests for the config module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from countdown.config import load_config, reset_config, save_config, update_config
from countdown.models import AppConfig


def _patch_config_paths(tmp_path: Path):
    """Return context managers that redirect config dir/file to tmp_path."""
    cfg_dir = tmp_path / "config"
    cfg_file = cfg_dir / "config.json"
    return (
        patch("countdown.config._CONFIG_DIR", cfg_dir),
        patch("countdown.config._CONFIG_FILE", cfg_file),
    )


class TestLoadSaveConfig:
    def test_load_default_when_missing(self, tmp_path: Path) -> None:
        p1, p2 = _patch_config_paths(tmp_path)
        with p1, p2:
            config = load_config()
            assert config == AppConfig()

    def test_save_and_load_roundtrip(self, tmp_path: Path) -> None:
        p1, p2 = _patch_config_paths(tmp_path)
        with p1, p2:
            path = save_config(AppConfig(default_seconds=300, tick_interval=0.5, bell=False))
            assert path.exists()

            loaded = load_config()
            assert loaded.default_seconds == 300
            assert loaded.tick_interval == 0.5
            assert not loaded.bell

    def test_load_handles_corrupt_file(self, tmp_path: Path) -> None:
        p1, p2 = _patch_config_paths(tmp_path)
        with p1, p2:
            cfg_dir = tmp_path / "config"
            cfg_dir.mkdir(parents=True, exist_ok=True)
            (cfg_dir / "config.json").write_text("not valid json{{{")
            assert load_config() == AppConfig()

    def test_load_handles_invalid_values(self, tmp_path: Path) -> None:
        p1, p2 = _patch_config_paths(tmp_path)
        with p1, p2:
            cfg_dir = tmp_path / "config"
            cfg_dir.mkdir(parents=True, exist_ok=True)
            (cfg_dir / "config.json").write_text('{"default_seconds": -4}')
            assert load_config() == AppConfig()


class TestUpdateConfig:
    def test_update_merges(self, tmp_path: Path) -> None:
        p1, p2 = _patch_config_paths(tmp_path)
        with p1, p2:
            update_config(default_seconds=90)
            cfg = update_config(bell=False)
            assert cfg.default_seconds == 90
            assert not cfg.bell
            assert load_config() == cfg

    def test_update_validates(self, tmp_path: Path) -> None:
        p1, p2 = _patch_config_paths(tmp_path)
        with p1, p2:
            with pytest.raises(ValidationError):
                update_config(tick_interval=0)
            assert load_config() == AppConfig()

    def test_reset(self, tmp_path: Path) -> None:
        p1, p2 = _patch_config_paths(tmp_path)
        with p1, p2:
            update_config(default_seconds=90)
            assert reset_config() == AppConfig()
            assert load_config().default_seconds == 60
