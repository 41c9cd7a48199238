"""Configuration management for Popcorn."""

from __future__ import annotations

from pathlib import Path
from typing import Self

import yaml
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console

from ..errors import ConfigLoadingError

console = Console()

CONFIG_FILE_NAME = "popcorn.yaml"


class ViewportConfig(BaseModel):
    """Viewport configuration settings."""

    width: int = 1280
    height: int = 720


class BrowserConfig(BaseModel):
    """Browser configuration settings."""

    headless: bool = True
    timeout: int = 30000
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)

    @classmethod
    def default(cls) -> Self:
        """Get default browser configuration."""
        return cls(headless=True, timeout=30000, viewport=ViewportConfig())


class DemoConfig(BaseModel):
    """Timing and capture settings of demo and exploration runs (all times in ms)."""

    record_video: bool = True
    screenshot_interval_ms: int = 1100
    settle_delay_ms: int = 300
    navigation_timeout_ms: int = 3000
    go_back_timeout_ms: int = 5000
    dom_stable_timeout_ms: int = 2000
    focus_delay_ms: int = 250
    executor_init_delay_ms: int = 100
    default_wait_ms: int = 1000
    action_timeout_ms: int = 5000
    reload_after_run: bool = True


class ProjectConfig(BaseModel):
    """Project configuration settings."""

    name: str
    base_url: str = "http://localhost:3000"
    plans_directory: str = "test-plans"
    tapes_directory: str = ".popcorn/tapes"


class PopcornConfig(BaseModel):
    """Main Popcorn configuration."""

    project: ProjectConfig
    browser: BrowserConfig = Field(default_factory=BrowserConfig.default)
    demo: DemoConfig = Field(default_factory=DemoConfig)
    verbose: bool = False

    @classmethod
    def default(cls, name: str | None = None) -> Self:
        return cls(project=ProjectConfig(name=name or Path.cwd().name))

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the path to the configuration file."""
        return Path.cwd() / CONFIG_FILE_NAME

    @classmethod
    def load_config(cls, path: Path | None = None) -> Self:
        """Load configuration from popcorn.yaml."""
        config_path = path or cls.get_config_path()

        if not config_path.exists():
            raise ConfigLoadingError(f"No {config_path.name} found at {config_path.parent}")

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
            return cls.model_validate(config_data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise ConfigLoadingError(f"{e.__class__.__name__} loading configuration: {e}") from e

    @classmethod
    def load_config_or_default(cls, path: Path | None = None) -> Self:
        """Load popcorn.yaml if present, defaults otherwise."""
        config_path = path or cls.get_config_path()
        if not config_path.exists():
            return cls.default()
        return cls.load_config(config_path)

    @property
    def tapes_path(self) -> Path:
        return Path(self.project.tapes_directory)

    def save(self, path: Path | None = None) -> Path:
        """Save configuration to popcorn.yaml."""
        config_path = path or self.get_config_path()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.model_dump(), f, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigLoadingError(f"Error saving configuration: {e}") from e

        console.print(f"[green]Configuration saved to {config_path}[/green]")
        return config_path
