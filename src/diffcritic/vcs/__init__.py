"""Hosted version-control adapters."""

from diffcritic.vcs.base import (
  ContentUnavailableError,
  InvalidRepoURL,
  NotFoundError,
  ProviderError,
  RepoRef,
  VCSAdapter,
  VCSError,
)
from diffcritic.vcs.registry import (
  AdapterNotFoundError,
  AdapterRegistry,
  get_adapter,
  list_adapters,
)

__all__ = [
  "ContentUnavailableError",
  "AdapterNotFoundError",
  "AdapterRegistry",
  "InvalidRepoURL",
  "NotFoundError",
  "ProviderError",
  "RepoRef",
  "VCSAdapter",
  "VCSError",
  "get_adapter",
  "list_adapters",
]
