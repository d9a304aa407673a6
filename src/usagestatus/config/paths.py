"""Platform-specific paths for usagestatus configuration and Codex data."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir

PACKAGE_NAME = "usagestatus"
DEFAULT_CODEX_HOME = "~/.codex"


def _get_env_path(env_var: str, fallback: Path) -> Path:
    """Get path from environment variable or fallback."""
    if env_value := os.environ.get(env_var):
        return Path(env_value).expanduser()
    return fallback


def config_dir() -> Path:
    """Get user config directory.

    Respects USAGESTATUS_CONFIG_DIR environment variable.
    """
    base_dir = Path(user_config_dir(PACKAGE_NAME))
    return _get_env_path("USAGESTATUS_CONFIG_DIR", base_dir)


def config_file() -> Path:
    """Get main config.toml path."""
    return config_dir() / "config.toml"


def codex_home(configured: str = DEFAULT_CODEX_HOME) -> Path:
    """Get the Codex home directory.

    CODEX_HOME (as honored by the Codex CLI) wins over the configured value.
    """
    return _get_env_path("CODEX_HOME", Path(configured).expanduser())


def sessions_dir(configured: str = DEFAULT_CODEX_HOME) -> Path:
    """Get the directory Codex writes session rollouts to."""
    return codex_home(configured) / "sessions"
