"""Configuration utilities for the mediaoffload CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
from pathlib import Path

from mediaoffload.core.config import OffloadConfig


def get_config_dir() -> Path:
    """Get the configuration directory for mediaoffload.

    Returns:
        Path to ~/.mediaoffload or equivalent.
    """
    return Path.home() / ".mediaoffload"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> OffloadConfig:
    """Load configuration from config file (defaults if missing)."""
    config_file = get_config_file()
    if config_file.exists():
        return OffloadConfig.from_dict(json.loads(config_file.read_text()))
    return OffloadConfig()


def save_config(config: OffloadConfig) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config.to_dict(), indent=2))


def get_state_db(config: OffloadConfig) -> Path:
    """Get the attachment store database path.

    Returns:
        Configured path, or media.db in the config directory.
    """
    if config.state_db:
        return config.state_db
    return get_config_dir() / "media.db"
