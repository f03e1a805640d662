"""GitHub REST adapter."""

from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from diffcritic.models import ChangedFile, FileStatus
from diffcritic.vcs.base import (
  InvalidRepoURL,
  RepoRef,
  VCSAdapter,
  decode_content,
  merge_changed_file,
  split_remote,
  to_iso,
)
from diffcritic.vcs.registry import register_adapter

_STATUS_MAP = {
  "added": FileStatus.ADDED,
  "modified": FileStatus.MODIFIED,
  "removed": FileStatus.REMOVED,
  "renamed": FileStatus.RENAMED,
}


class GitHubAdapter(VCSAdapter):
  """GitHub (and GitHub Enterprise) REST API adapter."""

  DEFAULT_BASE_URL = "https://api.github.com"

  @property
  def name(self) -> str:
    return "github"

  def parse_repo_url(self, repo_url: str) -> RepoRef:
    host, segments = split_remote(repo_url)
    if len(segments) != 2:
      raise InvalidRepoURL(f"Invalid GitHub repository URL: {repo_url}")
    return RepoRef(host=host, owner=segments[0], repo=segments[1])

  def list_changed_files(
    self,
    repo_url: str,
    since: datetime | str,
    until: datetime | str,
  ) -> list[ChangedFile]:
    ref = self.parse_repo_url(repo_url)
    commits = list(self._paginate(
      f"/repos/{ref.owner}/{ref.repo}/commits",
      params={"since": to_iso(since), "until": to_iso(until), "per_page": self.PER_PAGE},
    ))

    files: dict[str, ChangedFile] = {}
    for commit in commits:
      details = self._get(f"/repos/{ref.owner}/{ref.repo}/commits/{commit['sha']}").json()
      for payload in details.get("files") or []:
        merge_changed_file(files, _to_changed_file(payload))

    return list(files.values())

  def get_file_content(self, owner: str, repo: str, path: str, ref: str = "HEAD") -> str:
    response = self._get(
      f"/repos/{owner}/{repo}/contents/{quote(path, safe='/')}",
      params={"ref": ref},
      not_found=f"File not found: {path}",
    )
    return decode_content(response.json(), path)

  def _headers(self) -> dict[str, str]:
    headers = super()._headers()
    headers["Accept"] = "application/vnd.github.v3+json"
    return headers

  def _next_page(
    self,
    response: httpx.Response,
    url: str,
    params: dict[str, Any] | None,
  ) -> tuple[str | None, dict[str, Any] | None]:
    # The Link header's next URL already carries every query parameter
    return response.links.get("next", {}).get("url"), None


def _to_changed_file(payload: dict[str, Any]) -> ChangedFile:
  return ChangedFile(
    filename=payload["filename"],
    status=_STATUS_MAP.get(payload.get("status", ""), FileStatus.MODIFIED),
    additions=payload.get("additions") or 0,
    deletions=payload.get("deletions") or 0,
    patch=payload.get("patch") or "",
    previous_filename=payload.get("previous_filename"),
  )


def _create_github(
  token: str | None,
  base_url: str | None,
  client: httpx.Client | None = None,
) -> VCSAdapter:
  return GitHubAdapter(token=token, base_url=base_url, client=client)


register_adapter("github", _create_github)
