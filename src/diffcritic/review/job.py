"""End-to-end review job: fetch changes, review them, report progress."""

import asyncio
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Sequence

import httpx

from diffcritic.cache import MemoryReviewCache, ReviewCache
from diffcritic.config import Settings
from diffcritic.diff.stats import extract_change_stats, generate_change_summary
from diffcritic.models import (
  ChangedFile,
  FileStatus,
  JobStatus,
  Project,
  ReviewResult,
)
from diffcritic.progress import InMemoryProgressStore, ProgressStore
from diffcritic.providers.base import ReviewProvider
from diffcritic.review.orchestrator import ReviewOrchestrator
from diffcritic.store import NullResultStore, ResultStore
from diffcritic.vcs import VCSAdapter, VCSError, get_adapter
from diffcritic.vcs.base import to_iso

logger = logging.getLogger(__name__)

REVIEWABLE_STATUSES = (FileStatus.ADDED, FileStatus.MODIFIED)

RulesFingerprint = Callable[[Project], str]
AdapterFactory = Callable[[str, str | None, str | None], VCSAdapter]


def style_guide_fingerprint(project: Project) -> str:
  """Hash of the project's style guide, so rule edits invalidate the cache."""
  return hashlib.sha256((project.style_guide or "").encode("utf-8")).hexdigest()


def _normalize_extension(ext: str) -> str:
  return ext.strip().lstrip(".").lower()


def filter_changed_files(
  files: Iterable[ChangedFile],
  exclude_extensions: Iterable[str] = (),
) -> list[ChangedFile]:
  """Keep added and modified files whose extension is not excluded."""
  excluded = {_normalize_extension(e) for e in exclude_extensions if e.strip()}
  return [
    f for f in files
    if f.status in REVIEWABLE_STATUSES and f.extension.lower() not in excluded
  ]


class ReviewJobRunner:
  """Runs review jobs for projects and records their progress.

  Stages map to fixed progress milestones: pending 0, cloning 10,
  getContent 20, reviewing 50, reporting 90, completed 100. Any failure
  marks the job failed and is re-raised to the caller.
  """

  def __init__(
    self,
    provider: ReviewProvider,
    settings: Settings | None = None,
    progress: ProgressStore | None = None,
    cache: ReviewCache | None = None,
    result_store: ResultStore | None = None,
    rules_fingerprint: RulesFingerprint = style_guide_fingerprint,
    adapter_factory: AdapterFactory = get_adapter,
  ):
    self._provider = provider
    self._settings = settings or Settings()
    if progress is None:
      progress = InMemoryProgressStore(
        retention_seconds=self._settings.progress_retention_seconds,
        policy=self._settings.job_policy,
      )
    self._progress = progress
    self._cache = cache if cache is not None else MemoryReviewCache()
    self._results = result_store or NullResultStore()
    self._rules_fingerprint = rules_fingerprint
    self._adapter_factory = adapter_factory

  @property
  def progress(self) -> ProgressStore:
    return self._progress

  async def run(
    self,
    project: Project,
    since: datetime | None = None,
    until: datetime | None = None,
  ) -> ReviewResult:
    """Review every reviewable file changed in the window."""
    until = until or datetime.now(timezone.utc)
    since = since or until - timedelta(days=self._settings.review_window_days)
    start_time, end_time = to_iso(since), to_iso(until)

    job = self._progress.create(project.id, project.name, start_time, end_time)
    logger.info("Starting review %s for project %s", job.id, project.name)

    adapter: VCSAdapter | None = None
    try:
      self._progress.update(job.id, JobStatus.CLONING, 10, "Fetching code changes")
      adapter = self._adapter_factory(project.repo_type, project.token, project.api_base_url)
      changed = await asyncio.to_thread(adapter.list_changed_files, project.repo_url, since, until)

      excluded = list(project.exclude_extensions) + list(self._settings.exclude_extensions)
      files = filter_changed_files(changed, excluded)
      logger.info("%d of %d changed files selected for review", len(files), len(changed))

      self._progress.update(job.id, JobStatus.GET_CONTENT, 20, "Fetching file contents")
      if self._settings.fetch_content:
        files = await self._fetch_contents(adapter, project, files)

      self._progress.update(job.id, JobStatus.REVIEWING, 50, "Reviewing changes")
      orchestrator = ReviewOrchestrator(
        self._provider,
        cache=self._cache,
        settings=self._settings,
        rules_hash=self._rules_fingerprint(project),
        project_id=project.id,
        style_guide=project.style_guide,
      )

      def on_file_start(position: int, total: int, changed_file: ChangedFile) -> None:
        self._progress.update(
          job.id, JobStatus.REVIEWING, 50,
          f"Reviewing file {position}/{total}: {changed_file.filename}",
        )

      reviews = await orchestrator.review_files(files, on_file_start=on_file_start)

      self._progress.update(job.id, JobStatus.REPORTING, 90, "Building review report")
      result = ReviewResult(
        id=job.id,
        project_id=project.id,
        project_name=project.name,
        start_time=start_time,
        end_time=end_time,
        results=[r for r in reviews if r.issues],
        file_count=len(files),
        change_stats=extract_change_stats(changed),
        change_summary=generate_change_summary(files),
      )
      await asyncio.to_thread(self._results.save, result)

      self._progress.complete(job.id)
      logger.info("Review %s completed with %d issues", job.id, len(result.issues))
      return result
    except Exception as e:
      logger.error("Review %s for project %s failed: %s", job.id, project.id, e)
      self._progress.fail(job.id, str(e))
      raise
    finally:
      if adapter is not None:
        adapter.close()

  async def _fetch_contents(
    self,
    adapter: VCSAdapter,
    project: Project,
    files: Sequence[ChangedFile],
  ) -> list[ChangedFile]:
    """Attach full content to each file; fall back to the patch on failure."""
    ref = adapter.parse_repo_url(project.repo_url)
    fetched: list[ChangedFile] = []
    for changed in files:
      try:
        content = await asyncio.to_thread(
          adapter.get_file_content, ref.owner, ref.repo, changed.filename
        )
        fetched.append(changed.with_content(content))
      except (VCSError, httpx.HTTPError) as e:
        logger.warning("Could not fetch content of %s: %s", changed.filename, e)
        fetched.append(changed.with_content(None, str(e)))
    return fetched


async def review_local_changes(
  files: Sequence[ChangedFile],
  provider: ReviewProvider,
  settings: Settings | None = None,
  cache: ReviewCache | None = None,
  name: str = "local",
) -> ReviewResult:
  """Review changes taken from a local git checkout, without progress tracking."""
  settings = settings or Settings()
  selected = filter_changed_files(files, settings.exclude_extensions)
  orchestrator = ReviewOrchestrator(provider, cache=cache, settings=settings, project_id=name)
  reviews = await orchestrator.review_files(selected)
  now = datetime.now(timezone.utc).isoformat()
  return ReviewResult(
    id=f"local_{int(datetime.now(timezone.utc).timestamp() * 1000)}",
    project_id=name,
    project_name=name,
    start_time=now,
    end_time=now,
    results=[r for r in reviews if r.issues],
    file_count=len(selected),
    change_stats=extract_change_stats(files),
    change_summary=generate_change_summary(selected),
  )
