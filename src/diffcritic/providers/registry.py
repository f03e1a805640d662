"""Name-keyed provider factories."""

import importlib
from typing import Callable

from diffcritic.providers.base import ReviewProvider
from diffcritic.providers.detection import ProviderDetector

AUTO = "auto"

BUILTIN_MODULES = ("deepseek", "openai", "anthropic", "gemini", "ollama")


class ProviderNotFoundError(Exception):
  """No provider is registered under the requested name."""


class ProviderUnavailableError(Exception):
  """The provider exists but cannot serve reviews (no API key, server down)."""


ProviderFactory = Callable[[str | None], ReviewProvider]

_providers: dict[str, ProviderFactory] = {}


def register_provider(name: str, factory: ProviderFactory) -> None:
  _providers[name] = factory


def list_providers() -> list[str]:
  return list(_providers)


def get_provider(
  name: str,
  model: str | None = None,
  require_available: bool = True,
) -> ReviewProvider:
  """Build a provider by name; "auto" resolves to the first available one."""
  detector = ProviderDetector(_providers)
  if name == AUTO:
    name = detector.detect()
    if name is None:
      raise ProviderUnavailableError(detector.format_error(AUTO))

  factory = _providers.get(name)
  if factory is None:
    known = ", ".join(sorted(_providers)) or "none"
    raise ProviderNotFoundError(f"Provider '{name}' not found. Available: {known}")

  provider = factory(model)
  if require_available and not provider.is_available():
    raise ProviderUnavailableError(detector.format_error(name))
  return provider


class ProviderRegistry:
  """Imports the built-in provider modules, which register themselves."""

  @staticmethod
  def load_all() -> None:
    for module in BUILTIN_MODULES:
      importlib.import_module(f"diffcritic.providers.{module}")
