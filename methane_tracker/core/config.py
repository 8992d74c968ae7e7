"""
Configuration loading.

Settings live in TOML files under ``methane_tracker/config``; the file is
picked per environment (development, test, production).
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import toml

from methane_tracker.utils.constants import ConfigFile

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

logger = logging.getLogger(__name__)


class Config:
    """Parsed TOML configuration."""

    def __init__(self, config_file: str):
        self.config_file = config_file
        self.path = CONFIG_DIR / config_file
        self.data: dict[str, Any] = toml.load(self.path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        return self.data.get(section, {}).get(key, default)

    def __repr__(self):
        return f"<Config: {self.config_file}>"


@lru_cache
def get_config(config_file: str = ConfigFile.DEVELOPMENT) -> Config:
    """
    Load configuration from a TOML file.

    Args:
        config_file: Configuration file name (e.g., "test.toml")

    Returns:
        Config instance holding the parsed file
    """
    logger.info(f"Loading configuration from {config_file}")
    return Config(config_file)


__all__ = ["Config", "ConfigFile", "get_config"]
