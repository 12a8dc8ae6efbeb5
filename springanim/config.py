"""
SPRINGANIM - CONFIGURATION
==========================

Loads config.yaml into validated settings.

Lookup order:
1. Explicit path passed to load_config()
2. SPRINGANIM_CONFIG environment variable
3. ./config.yaml

Missing file -> defaults. Malformed file -> ValueError.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ConfigDict, ValidationError, field_validator

from springanim.core.physics import DEFAULT_MAX_STEPS


CONFIG_ENV_VAR = "SPRINGANIM_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(8000, ge=1, le=65535)
    reload: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = ConfigDict(frozen=True)


class DatabaseSettings(BaseModel):
    path: str = "data/springanim.db"

    model_config = ConfigDict(frozen=True)


class PhysicsSettings(BaseModel):
    """
    Simulation and CSS output defaults.

    Attributes:
        max_steps: Step cap before a spring counts as divergent
        fps: Frames per second (one sample per frame)
        prefixes: Vendor prefixes in cascade order
        cleanup_margin_ms: Extra time before generated CSS is removed
        default_preset: Preset used when a request names none
    """
    max_steps: int = Field(DEFAULT_MAX_STEPS, ge=1)
    fps: float = Field(60.0, gt=0)
    prefixes: List[str] = Field(default_factory=lambda: [""])
    cleanup_margin_ms: float = Field(1.0, ge=0)
    default_preset: str = "default"

    model_config = ConfigDict(frozen=True)

    @field_validator("prefixes")
    @classmethod
    def _prefixes_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("prefixes needs at least one entry ('' for unprefixed)")
        return value


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    physics: PhysicsSettings = Field(default_factory=PhysicsSettings)

    model_config = ConfigDict(frozen=True)


def load_config(path: Optional[str] = None) -> Settings:
    """
    Load settings from YAML.

    Args:
        path: Config file path (see module docstring for fallbacks)

    Returns:
        Validated Settings

    Raises:
        ValueError: If the file is not valid YAML or fails validation
    """
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    if not config_path.exists():
        return Settings()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping at top level")

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or load settings (cached)."""
    global _settings

    if _settings is None:
        _settings = load_config()

    return _settings


def reset_settings() -> None:
    """Drop cached settings (next get_settings() reloads)."""
    global _settings
    _settings = None
