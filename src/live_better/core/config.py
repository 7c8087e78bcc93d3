"""Configuration management with Pydantic and YAML support."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimerConfig(BaseModel):
    """Focus/break timer configuration."""

    focus_minutes: int = Field(default=25, ge=1, le=120, description="Focus session length")
    break_minutes: int = Field(default=5, ge=1, le=60, description="Break length")
    completion_display_seconds: float = Field(
        default=3.0, gt=0, description="How long the session-complete flag stays up"
    )
    tick_seconds: float = Field(default=1.0, gt=0, description="Seconds between timer ticks")


class HydrationConfig(BaseModel):
    """Water intake tracker configuration."""

    daily_goal_ml: int = Field(default=2000, ge=500, le=5000)
    quick_add_ml: list[int] = Field(default_factory=lambda: [200, 500])
    max_custom_ml: int = Field(default=1000, ge=1, description="Upper bound for typed amounts")
    reevaluate_seconds: int = Field(
        default=60, ge=1, description="Re-check the reminder against the clock every N seconds"
    )


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LIVE_BETTER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Paths
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".local/state/live-better")
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config/live-better")

    # Log level
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # Sub-configurations
    timer: TimerConfig = Field(default_factory=TimerConfig)
    hydration: HydrationConfig = Field(default_factory=HydrationConfig)

    @property
    def config_file(self) -> Path:
        """Path to YAML config file."""
        return self.config_dir / "config.yaml"

    @property
    def log_file(self) -> Path:
        """Path to the log file used when running in the background."""
        return self.log_dir / "live-better.log"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from YAML file, environment variables, and defaults.

        Priority (highest to lowest):
        1. YAML config file
        2. Environment variables
        3. Default values
        """
        config_path = config_path or Path.home() / ".config/live-better/config.yaml"

        yaml_config: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}

        return cls(**yaml_config)

    def save(self, config_path: Path | None = None) -> None:
        """Save current configuration to YAML file."""
        config_path = config_path or self.config_file
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)

        # Convert Path objects to strings for YAML
        for key in ["log_dir", "config_dir"]:
            if key in data:
                data[key] = str(data[key])

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        os.chmod(config_path, 0o600)


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.load()
