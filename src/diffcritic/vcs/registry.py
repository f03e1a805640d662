"""VCS adapter discovery and registration."""

from typing import Callable

import httpx

from diffcritic.vcs.base import VCSAdapter


class AdapterNotFoundError(Exception):
  """Requested repository type has no adapter."""


AdapterFactory = Callable[[str | None, str | None, httpx.Client | None], VCSAdapter]

_adapters: dict[str, AdapterFactory] = {}


def register_adapter(name: str, factory: AdapterFactory) -> None:
  """Register an adapter factory."""
  _adapters[name] = factory


def get_adapter(
  name: str,
  token: str | None = None,
  base_url: str | None = None,
  client: httpx.Client | None = None,
) -> VCSAdapter:
  """Get an adapter by repository type."""
  AdapterRegistry.load_all()
  if name not in _adapters:
    available = ", ".join(_adapters.keys()) or "none"
    raise AdapterNotFoundError(
      f"Repository type '{name}' not supported. Available: {available}"
    )
  return _adapters[name](token, base_url, client)


def list_adapters() -> list[str]:
  """List registered adapter names."""
  AdapterRegistry.load_all()
  return list(_adapters.keys())


class AdapterRegistry:
  """Registry for lazy adapter loading."""

  @staticmethod
  def load_all() -> None:
    """Load all adapter modules to trigger registration."""
    from diffcritic.vcs import github, gitlab  # noqa: F401
