"""Configuration structures and loading for usagestatus."""

import os
import tomllib
from pathlib import Path
from typing import Literal

import msgspec

from usagestatus.config.paths import DEFAULT_CODEX_HOME


# Default values
DEFAULT_BAR_WIDTH = 20
DEFAULT_RECENT_LIMIT = 10


# Display configuration
class DisplayConfig(msgspec.Struct, omit_defaults=True, forbid_unknown_fields=True):
    """Display settings."""

    bar_width: int = DEFAULT_BAR_WIDTH
    colors: bool = True
    reset_format: Literal["countdown", "absolute"] = "countdown"


# Session discovery configuration
class SessionsConfig(msgspec.Struct, omit_defaults=True, forbid_unknown_fields=True):
    """Where to look for Codex session rollouts."""

    codex_home: str = DEFAULT_CODEX_HOME
    recent_limit: int = DEFAULT_RECENT_LIMIT


# Main configuration
class Config(msgspec.Struct, omit_defaults=True, forbid_unknown_fields=True):
    """Main configuration structure."""

    display: DisplayConfig = msgspec.field(default_factory=DisplayConfig)
    sessions: SessionsConfig = msgspec.field(default_factory=SessionsConfig)


def _load_from_toml(path: Path) -> dict:
    """Load configuration from TOML file."""
    if not path.exists():
        return {}

    with path.open("rb") as f:
        return tomllib.load(f)


def convert_config(data: dict) -> Config:
    """Convert raw dict to Config struct."""
    return msgspec.convert(data, type=Config)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config.

    USAGESTATUS_CODEX_HOME: Codex home directory
    USAGESTATUS_NO_COLOR: Disable colored output
    """
    if codex_home := os.environ.get("USAGESTATUS_CODEX_HOME"):
        sessions = msgspec.structs.replace(config.sessions, codex_home=codex_home)
        config = msgspec.structs.replace(config, sessions=sessions)

    if "USAGESTATUS_NO_COLOR" in os.environ:
        display = msgspec.structs.replace(config.display, colors=False)
        config = msgspec.structs.replace(config, display=display)

    return config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file with defaults.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        msgspec.ValidationError: If a value has the wrong type or is unknown.
    """
    from .paths import config_file

    config_path = path or config_file()

    raw_data = _load_from_toml(config_path)
    if not raw_data:
        config = Config()
    else:
        config = convert_config(raw_data)

    return _apply_env_overrides(config)
