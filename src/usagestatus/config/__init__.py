"""Configuration management for usagestatus."""

from usagestatus.config.paths import (
    codex_home,
    config_dir,
    config_file,
    sessions_dir,
)
from usagestatus.config.settings import (
    Config,
    DisplayConfig,
    SessionsConfig,
    load_config,
)

__all__ = [
    # paths
    "config_dir",
    "config_file",
    "codex_home",
    "sessions_dir",
    # settings
    "Config",
    "DisplayConfig",
    "SessionsConfig",
    "load_config",
]
