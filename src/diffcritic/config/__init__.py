"""Configuration management."""

from diffcritic.config.loader import ConfigError, load_config
from diffcritic.config.settings import Settings

__all__ = ["ConfigError", "Settings", "load_config"]
