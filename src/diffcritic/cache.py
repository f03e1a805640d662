"""Fingerprint-keyed cache of prior review findings."""

import hashlib
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

from diskcache import Cache

from diffcritic.models import Issue

if TYPE_CHECKING:
  from diffcritic.config import Settings

logger = logging.getLogger(__name__)

_SEPARATOR = "\x1f"


def compute_fingerprint(text: str, file_path: str, rules_hash: str, project_id: str) -> str:
  """Deterministic SHA-256 over the inputs that determine a review outcome."""
  key = _SEPARATOR.join([text, file_path, rules_hash, project_id])
  return hashlib.sha256(key.encode("utf-8")).hexdigest()


class ReviewCache(ABC):
  """Abstract fingerprint -> issues store.

  Entries are never mutated; changed inputs produce a new fingerprint.
  """

  @abstractmethod
  def lookup(self, fingerprint: str) -> list[Issue] | None:
    """Return cached issues, or None on a miss."""
    ...

  @abstractmethod
  def store(self, fingerprint: str, issues: Sequence[Issue]) -> None:
    """Record the issues produced for fingerprint."""
    ...

  def close(self) -> None:
    """Release backend resources. Default is a no-op."""


class MemoryReviewCache(ReviewCache):
  """Process-local cache."""

  def __init__(self) -> None:
    self._entries: dict[str, tuple[Issue, ...]] = {}

  def lookup(self, fingerprint: str) -> list[Issue] | None:
    entry = self._entries.get(fingerprint)
    return list(entry) if entry is not None else None

  def store(self, fingerprint: str, issues: Sequence[Issue]) -> None:
    self._entries.setdefault(fingerprint, tuple(issues))

  def __len__(self) -> int:
    return len(self._entries)


class DiskReviewCache(ReviewCache):
  """SQLite-backed persistent cache using diskcache.

  Backend failures degrade to cache misses and are logged, never raised.
  """

  def __init__(self, cache_dir: str = ".diffcritic-cache", ttl_seconds: int | None = None):
    self._cache = Cache(cache_dir)
    self._ttl = ttl_seconds
    logger.debug("Disk cache at %s (ttl=%s)", cache_dir, ttl_seconds)

  def lookup(self, fingerprint: str) -> list[Issue] | None:
    try:
      data = self._cache.get(fingerprint)
    except Exception as e:
      logger.warning("Cache lookup failed: %s", e)
      return None
    if data is None:
      return None
    logger.debug("Cache hit: %s...", fingerprint[:16])
    return [Issue.from_dict(d) for d in data]

  def store(self, fingerprint: str, issues: Sequence[Issue]) -> None:
    try:
      self._cache.add(fingerprint, [i.to_dict() for i in issues], expire=self._ttl)
    except Exception as e:
      logger.warning("Cache store failed: %s", e)

  def close(self) -> None:
    self._cache.close()


def get_cache(settings: "Settings") -> ReviewCache:
  """Build the cache backend named in settings."""
  if settings.cache_backend == "disk":
    return DiskReviewCache(settings.cache_dir, settings.cache_ttl_seconds)
  return MemoryReviewCache()
