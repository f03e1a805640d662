"""Configuration file loading."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from diffcritic.config.settings import Settings
from diffcritic.progress import JobPolicy

CONFIG_FILENAMES = [".diffcritic.yaml", ".diffcritic.yml", "diffcritic.yaml", "diffcritic.yml"]


class ConfigError(Exception):
  """Configuration file is unreadable or invalid."""


def _find_config_file(config_path: Path | None = None) -> Path | None:
  """Find config file path, or None if no config exists."""
  if config_path:
    if not config_path.exists():
      raise ConfigError(f"Config file not found: {config_path}")
    return config_path

  for filename in CONFIG_FILENAMES:
    path = Path.cwd() / filename
    if path.exists():
      return path

  return None


def load_config(config_path: Path | None = None) -> Settings:
  """Load configuration from file or defaults."""
  path = _find_config_file(config_path)
  if path:
    return _load_from_file(path)
  return Settings()


def _load_from_file(path: Path) -> Settings:
  """Load settings from a YAML file."""
  try:
    with open(path) as f:
      data = yaml.safe_load(f) or {}
  except yaml.YAMLError as e:
    raise ConfigError(f"Invalid YAML in {path}: {e}") from e

  if not isinstance(data, dict):
    raise ConfigError(f"Config file {path} must contain a mapping")
  return _parse_config(data)


def _parse_config(data: dict) -> Settings:
  """Parse config dict into Settings."""
  try:
    if "job_policy" in data:
      data["job_policy"] = JobPolicy(data["job_policy"])
    if "exclude_extensions" in data:
      data["exclude_extensions"] = [str(e) for e in data["exclude_extensions"] or []]
    return Settings(**data)
  except (ValueError, ValidationError) as e:
    raise ConfigError(f"Invalid configuration: {e}") from e
