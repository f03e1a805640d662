"""GitLab REST adapter."""

import os
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from diffcritic.diff.parser import count_patch_lines
from diffcritic.models import ChangedFile, FileStatus
from diffcritic.vcs.base import (
  RepoRef,
  VCSAdapter,
  decode_content,
  merge_changed_file,
  split_remote,
  to_iso,
)
from diffcritic.vcs.registry import register_adapter


class GitLabAdapter(VCSAdapter):
  """GitLab REST API v4 adapter, for gitlab.com or a self-hosted instance."""

  DEFAULT_BASE_URL = "https://gitlab.com/api/v4"

  def __init__(
    self,
    token: str | None = None,
    base_url: str | None = None,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
  ):
    configured = base_url or os.environ.get("GITLAB_API_URL")
    super().__init__(token=token, base_url=configured, client=client, timeout=timeout)
    # Without a configured URL the API host follows the remote's host
    self._follow_remote = not configured

  @property
  def name(self) -> str:
    return "gitlab"

  def set_instance_url(self, instance_url: str) -> None:
    """Point the adapter at a self-hosted instance root URL."""
    self._base_url = instance_url.rstrip("/") + "/api/v4"

  def parse_repo_url(self, repo_url: str) -> RepoRef:
    # Nested groups are part of the owner: group/subgroup/project
    host, segments = split_remote(repo_url)
    return RepoRef(host=host, owner="/".join(segments[:-1]), repo=segments[-1])

  def project_id(self, ref: RepoRef) -> str:
    return quote(ref.full_name, safe="")

  def list_changed_files(
    self,
    repo_url: str,
    since: datetime | str,
    until: datetime | str,
  ) -> list[ChangedFile]:
    ref = self.parse_repo_url(repo_url)
    if self._follow_remote and ref.host != "gitlab.com":
      self.set_instance_url(f"https://{ref.host}")
    project = self.project_id(ref)
    commits = list(self._paginate(
      f"/projects/{project}/repository/commits",
      params={"since": to_iso(since), "until": to_iso(until), "per_page": self.PER_PAGE},
    ))

    files: dict[str, ChangedFile] = {}
    for commit in commits:
      diffs = self._paginate(
        f"/projects/{project}/repository/commits/{commit['id']}/diff",
        params={"per_page": self.PER_PAGE},
      )
      for payload in diffs:
        merge_changed_file(files, _to_changed_file(payload))

    return list(files.values())

  def get_file_content(self, owner: str, repo: str, path: str, ref: str = "HEAD") -> str:
    project = self.project_id(RepoRef(host="", owner=owner, repo=repo))
    response = self._get(
      f"/projects/{project}/repository/files/{quote(path, safe='')}",
      params={"ref": ref},
      not_found=f"File not found: {path}",
    )
    return decode_content(response.json(), path)

  def _headers(self) -> dict[str, str]:
    headers = super()._headers()
    headers["Content-Type"] = "application/json"
    return headers

  def _next_page(
    self,
    response: httpx.Response,
    url: str,
    params: dict[str, Any] | None,
  ) -> tuple[str | None, dict[str, Any] | None]:
    next_page = response.headers.get("x-next-page", "").strip()
    if not next_page:
      return None, None
    return url, {**(params or {}), "page": next_page}


def determine_file_status(payload: dict[str, Any]) -> FileStatus:
  if payload.get("new_file"):
    return FileStatus.ADDED
  if payload.get("deleted_file"):
    return FileStatus.REMOVED
  if payload.get("renamed_file"):
    return FileStatus.RENAMED
  return FileStatus.MODIFIED


def _to_changed_file(payload: dict[str, Any]) -> ChangedFile:
  patch = payload.get("diff") or ""
  additions = payload.get("added_lines")
  deletions = payload.get("removed_lines")
  if additions is None or deletions is None:
    additions, deletions = count_patch_lines(patch)

  old_path = payload.get("old_path")
  new_path = payload.get("new_path") or old_path
  return ChangedFile(
    filename=new_path,
    status=determine_file_status(payload),
    additions=additions,
    deletions=deletions,
    patch=patch,
    previous_filename=old_path if old_path != new_path else None,
  )


def _create_gitlab(
  token: str | None,
  base_url: str | None,
  client: httpx.Client | None = None,
) -> VCSAdapter:
  return GitLabAdapter(token=token, base_url=base_url, client=client)


register_adapter("gitlab", _create_gitlab)
