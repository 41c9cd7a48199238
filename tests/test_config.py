"""Tests for configuration management."""

from pathlib import Path

import pytest

from popcorn.core.config import PopcornConfig
from popcorn.core.errors import ConfigLoadingError


def test_default_config() -> None:
    """Test default configuration values."""
    config = PopcornConfig.default("shop")

    assert config.project.name == "shop"
    assert config.project.base_url == "http://localhost:3000"
    assert config.project.tapes_directory == ".popcorn/tapes"

    assert config.browser.headless is True
    assert config.browser.timeout == 30000
    assert (config.browser.viewport.width, config.browser.viewport.height) == (1280, 720)

    assert config.demo.record_video is True
    assert config.demo.screenshot_interval_ms == 1100
    assert config.demo.go_back_timeout_ms == 5000
    assert config.demo.reload_after_run is True


def test_save_and_load_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test saving and loading configuration."""
    monkeypatch.chdir(tmp_path)

    config = PopcornConfig.default("test-project")
    config.project.base_url = "http://localhost:8080"
    config.demo.settle_delay_ms = 50
    saved_to = config.save()

    assert saved_to == tmp_path / "popcorn.yaml"

    loaded = PopcornConfig.load_config()
    assert loaded.project.name == "test-project"
    assert loaded.project.base_url == "http://localhost:8080"
    assert loaded.demo.settle_delay_ms == 50
    assert loaded.tapes_path == Path(".popcorn/tapes")


def test_partial_file_uses_defaults(tmp_path: Path) -> None:
    """Sections left out of popcorn.yaml get their default values."""
    path = tmp_path / "popcorn.yaml"
    path.write_text("project:\n  name: partial\ndemo:\n  record_video: false\n", encoding="utf-8")

    config = PopcornConfig.load_config(path)

    assert config.demo.record_video is False
    assert config.demo.settle_delay_ms == 300
    assert config.browser.headless is True


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadingError, match="No popcorn.yaml found"):
        PopcornConfig.load_config(tmp_path / "popcorn.yaml")


def test_invalid_config_raises(tmp_path: Path) -> None:
    path = tmp_path / "popcorn.yaml"
    path.write_text("demo:\n  settle_delay_ms: soon\n", encoding="utf-8")

    with pytest.raises(ConfigLoadingError, match="ValidationError"):
        PopcornConfig.load_config(path)


def test_load_or_default_without_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = PopcornConfig.load_config_or_default()

    assert config.project.name == tmp_path.name
