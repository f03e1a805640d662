"""Base VCS adapter contract and shared HTTP plumbing."""

import base64
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Iterator

import httpx

from diffcritic.models import ChangedFile

logger = logging.getLogger(__name__)

_HTTPS_REMOTE = re.compile(r"^https?://(?P<host>[^/@]+@)?(?P<domain>[^/]+)/(?P<path>.+?)/?$")
_SSH_REMOTE = re.compile(r"^(?:ssh://)?[\w.-]+@(?P<domain>[^:/]+)[:/](?P<path>.+?)/?$")


class VCSError(Exception):
  """Base class for VCS adapter failures."""


class InvalidRepoURL(VCSError):
  """Repository URL is neither an HTTPS nor an SSH remote."""


class NotFoundError(VCSError):
  """Requested repository resource does not exist."""


class ContentUnavailableError(VCSError):
  """The API did not return a file's content inline (too large, or not a file)."""


class ProviderError(VCSError):
  """VCS API answered with a non-success status."""

  def __init__(self, status: int, message: str):
    super().__init__(f"API error: {status} - {message}")
    self.status = status
    self.message = message


@dataclass(frozen=True)
class RepoRef:
  """Repository coordinates parsed from a remote URL."""

  host: str
  owner: str
  repo: str

  @property
  def full_name(self) -> str:
    return f"{self.owner}/{self.repo}"


def split_remote(repo_url: str) -> tuple[str, list[str]]:
  """Return (host, path segments) of an HTTPS or SSH remote URL."""
  url = repo_url.strip()
  match = _HTTPS_REMOTE.match(url) or _SSH_REMOTE.match(url)
  if not match:
    raise InvalidRepoURL(f"Invalid repository URL: {repo_url}")

  path = match.group("path")
  if path.endswith(".git"):
    path = path[: -len(".git")]
  segments = [s for s in path.split("/") if s]
  if len(segments) < 2:
    raise InvalidRepoURL(f"Invalid repository URL: {repo_url}")
  return match.group("domain"), segments


def to_iso(value: datetime | str) -> str:
  if isinstance(value, datetime):
    return value.isoformat()
  return value


def decode_content(payload: dict[str, Any], path: str = "") -> str:
  """Decode a file payload's transport encoding into text.

  GitHub answers files over 1 MB with encoding "none" and no content; that
  and any other empty body for a non-empty file raise ContentUnavailableError.
  """
  content = payload.get("content") or ""
  encoding = payload.get("encoding", "base64")
  size = payload.get("size") or 0
  if encoding == "none" or (not content and size > 0):
    raise ContentUnavailableError(f"Content of {path or 'file'} not returned inline ({size} bytes)")
  if encoding != "base64":
    return content
  return base64.b64decode(content).decode("utf-8", errors="replace")


def merge_changed_file(files: dict[str, ChangedFile], changed: ChangedFile) -> None:
  """Fold a per-commit file record into the window-wide map.

  The first record seen for a path keeps its status and patch; line
  statistics are summed across every commit touching the path.
  """
  existing = files.get(changed.filename)
  if existing is None:
    files[changed.filename] = changed
    return
  files[changed.filename] = replace(
    existing,
    additions=existing.additions + changed.additions,
    deletions=existing.deletions + changed.deletions,
  )


class VCSAdapter(ABC):
  """Abstract base for hosted VCS providers.

  Adapters are synchronous and do not retry; transport errors propagate to
  the caller unchanged.
  """

  DEFAULT_BASE_URL = ""
  PER_PAGE = 100

  def __init__(
    self,
    token: str | None = None,
    base_url: str | None = None,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
  ):
    self._token = token
    self._base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
    self._client = client or httpx.Client(timeout=timeout)

  @property
  @abstractmethod
  def name(self) -> str:
    """Adapter name."""
    ...

  @abstractmethod
  def parse_repo_url(self, repo_url: str) -> RepoRef:
    """Parse a remote URL into repository coordinates."""
    ...

  @abstractmethod
  def list_changed_files(
    self,
    repo_url: str,
    since: datetime | str,
    until: datetime | str,
  ) -> list[ChangedFile]:
    """List files changed by commits in [since, until], merged per path."""
    ...

  @abstractmethod
  def get_file_content(self, owner: str, repo: str, path: str, ref: str = "HEAD") -> str:
    """Fetch a file's decoded text at ref."""
    ...

  def close(self) -> None:
    self._client.close()

  def _headers(self) -> dict[str, str]:
    headers = {"User-Agent": "diffcritic"}
    if self._token:
      headers["Authorization"] = f"Bearer {self._token}"
    return headers

  def _get(
    self,
    url: str,
    params: dict[str, Any] | None = None,
    not_found: str | None = None,
  ) -> httpx.Response:
    """GET url, mapping non-success statuses onto the adapter errors."""
    if not url.startswith("http"):
      url = f"{self._base_url}{url}"
    response = self._client.get(url, params=params, headers=self._headers())
    if response.status_code == 404 and not_found:
      raise NotFoundError(not_found)
    if not response.is_success:
      raise ProviderError(response.status_code, _error_message(response))
    return response

  def _paginate(self, url: str, params: dict[str, Any] | None = None) -> Iterator[Any]:
    """Yield items from every page until the provider reports no next page."""
    next_url: str | None = url
    next_params: dict[str, Any] | None = dict(params or {})
    pages = 0
    while next_url:
      # An empty params dict would strip the query string from a Link URL
      response = self._get(next_url, params=next_params or None)
      pages += 1
      yield from response.json()
      next_url, next_params = self._next_page(response, next_url, next_params)
    logger.debug("%s fetched %d page(s) from %s", self.name, pages, url)

  @abstractmethod
  def _next_page(
    self,
    response: httpx.Response,
    url: str,
    params: dict[str, Any] | None,
  ) -> tuple[str | None, dict[str, Any] | None]:
    """Return the next page's (url, params), or (None, None) when done."""
    ...


def _error_message(response: httpx.Response) -> str:
  try:
    data = response.json()
  except ValueError:
    return response.text[:200] or response.reason_phrase
  if isinstance(data, dict):
    return str(data.get("message") or data.get("error") or response.reason_phrase)
  return response.reason_phrase
