"""Per-file review: cache lookup, direct or chunked LLM calls, remap, dedupe."""

import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable, Sequence

from diffcritic.cache import MemoryReviewCache, ReviewCache, compute_fingerprint
from diffcritic.chunking import remap_line, split_into_chunks, summarize_with_line_map
from diffcritic.config import Settings
from diffcritic.models import ChangedFile, FileReview, Issue, ReviewChunk, Severity
from diffcritic.providers.base import LLMCallError, ReviewProvider
from diffcritic.providers.parser import ParseFailed, parse_review_response
from diffcritic.providers.prompt import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)

DEDUPE_PREFIX = 50

FileStartCallback = Callable[[int, int, ChangedFile], None]


class ReviewPath(Enum):
  """How a file's text is sent to the model."""

  DIRECT = "direct"
  CHUNKED = "chunked"


class FileProcessingError(Exception):
  """Unexpected failure while reviewing one file."""

  def __init__(self, filename: str, cause: BaseException):
    super().__init__(f"Failed to process {filename}: {cause}")
    self.filename = filename
    self.cause = cause


def dedupe_issues(issues: Iterable[Issue]) -> list[Issue]:
  """Keep the first issue per (line, message prefix), preserving order."""
  seen: set[tuple[int, str]] = set()
  unique: list[Issue] = []
  for issue in issues:
    key = (issue.line, issue.message[:DEDUPE_PREFIX])
    if key in seen:
      continue
    seen.add(key)
    unique.append(issue)
  return unique


def error_issue(message: str, suggestion: str, line: int = 1) -> Issue:
  return Issue(severity=Severity.ERROR, line=line, message=message, suggestion=suggestion)


class ReviewOrchestrator:
  """Reviews changed files one at a time against an LLM provider.

  Large files are split into chunks that are reviewed in batches of
  ``settings.concurrency`` parallel calls; batches run strictly one after
  another. Call failures, timeouts and unparsable responses become
  error-severity issues scoped to the chunk or file that produced them.
  """

  def __init__(
    self,
    provider: ReviewProvider,
    cache: ReviewCache | None = None,
    settings: Settings | None = None,
    rules_hash: str = "",
    project_id: str = "",
    style_guide: str | None = None,
  ):
    self._provider = provider
    self._cache = cache if cache is not None else MemoryReviewCache()
    self._settings = settings or Settings()
    self._rules_hash = rules_hash
    self._project_id = project_id
    self._system_prompt = build_system_prompt(style_guide)

  def select_path(self, text: str) -> ReviewPath:
    """Direct review up to and including the large-file threshold."""
    if len(text) <= self._settings.large_file_threshold:
      return ReviewPath.DIRECT
    return ReviewPath.CHUNKED

  async def review_files(
    self,
    files: Sequence[ChangedFile],
    on_file_start: FileStartCallback | None = None,
  ) -> list[FileReview]:
    """Review files sequentially; one file's failure never stops the rest."""
    reviews: list[FileReview] = []
    for position, changed in enumerate(files, start=1):
      if on_file_start is not None:
        on_file_start(position, len(files), changed)
      try:
        reviews.append(await self.review_file(changed))
      except Exception as e:
        error = FileProcessingError(changed.filename, e)
        logger.error("%s", error, exc_info=e)
        reviews.append(FileReview(
          file=changed.filename,
          status=changed.status,
          issues=(error_issue(f"Failed to process file: {e}", "Internal error while reviewing"),),
        ))
    return reviews

  async def review_file(self, changed: ChangedFile) -> FileReview:
    """Review one file, serving from cache when the fingerprint is known."""
    text = changed.reviewable_text
    if not text.strip():
      return FileReview(file=changed.filename, status=changed.status)

    fingerprint = compute_fingerprint(text, changed.filename, self._rules_hash, self._project_id)
    cached = self._cache.lookup(fingerprint)
    if cached is not None:
      logger.info("Using cached review for %s", changed.filename)
      return FileReview(
        file=changed.filename,
        status=changed.status,
        issues=tuple(cached),
        cached=True,
      )

    if self.select_path(text) == ReviewPath.DIRECT:
      issues, ok = await self._review_direct(changed, text)
    else:
      issues, ok = await self._review_chunked(changed, text)

    issues = dedupe_issues(issues)
    if ok:
      self._cache.store(fingerprint, issues)
    return FileReview(file=changed.filename, status=changed.status, issues=tuple(issues))

  async def _review_direct(self, changed: ChangedFile, text: str) -> tuple[list[Issue], bool]:
    budget = self._settings.summarize_limit - len(build_user_prompt(changed.filename, ""))
    summary = summarize_with_line_map(text, max(budget, 0))
    payload = build_user_prompt(changed.filename, summary.text)

    issues, ok = await self._call(payload, changed.filename)
    total = _line_count(text)
    return [i.with_line(min(max(summary.original_line(i.line), 1), total)) for i in issues], ok

  async def _review_chunked(self, changed: ChangedFile, text: str) -> tuple[list[Issue], bool]:
    chunks = split_into_chunks(
      text,
      max_chars=self._settings.chunk_size,
      overlap_lines=self._settings.overlap_lines,
      boundary_lookback=self._settings.boundary_lookback,
      header_scan=self._settings.header_scan_lines,
    )
    total = _line_count(text)
    width = self._settings.concurrency
    logger.info("Reviewing %s in %d chunks", changed.filename, len(chunks))

    collected: list[Issue] = []
    all_ok = True
    for offset in range(0, len(chunks), width):
      batch = chunks[offset:offset + width]
      results = await asyncio.gather(
        *(self._review_chunk(changed, chunk) for chunk in batch),
        return_exceptions=True,
      )
      for chunk, result in zip(batch, results):
        if isinstance(result, BaseException):
          logger.error("Chunk %d of %s failed: %s", chunk.index, changed.filename, result)
          issues = [self._chunk_error(chunk, f"failed: {result}")]
          ok = False
        else:
          issues, ok = result
        all_ok = all_ok and ok
        collected.extend(i.with_line(remap_line(chunk, i.line, total)) for i in issues)

    return collected, all_ok

  async def _review_chunk(self, changed: ChangedFile, chunk: ReviewChunk) -> tuple[list[Issue], bool]:
    payload = build_user_prompt(changed.filename, chunk.content, chunk)
    label = f"{changed.filename} chunk {chunk.index}/{chunk.total_chunks}"
    issues, ok = await self._call(payload, label)
    if not ok:
      # Anchor failures at the chunk's first real line, not its header
      issues = [i.with_line(chunk.header_line_count + 1) for i in issues]
    return issues, ok

  async def _call(self, user_prompt: str, label: str) -> tuple[list[Issue], bool]:
    """One bounded LLM call; returns (issues, succeeded)."""
    try:
      response = await asyncio.wait_for(
        self._provider.complete(self._system_prompt, user_prompt),
        timeout=self._settings.llm_timeout,
      )
    except asyncio.TimeoutError:
      logger.warning("Review call for %s timed out after %ss", label, self._settings.llm_timeout)
      return [error_issue(
        f"Review of {label} timed out after {self._settings.llm_timeout:g}s",
        "Check the API configuration and network connection",
      )], False
    except LLMCallError as e:
      logger.warning("Review call for %s failed: %s", label, e)
      return [error_issue(
        f"Review of {label} failed: {e}",
        "Check the API configuration and network connection",
      )], False

    outcome = parse_review_response(response)
    if isinstance(outcome, ParseFailed):
      return [error_issue(
        f"Could not parse review response for {label}: {outcome.reason}",
        "Re-run the review; the model returned malformed output",
      )], False
    return list(outcome.issues), True

  def _chunk_error(self, chunk: ReviewChunk, detail: str) -> Issue:
    return error_issue(
      f"Review of chunk {chunk.index}/{chunk.total_chunks} {detail}",
      "Check the API configuration and network connection",
      line=chunk.header_line_count + 1,
    )


def _line_count(text: str) -> int:
  return max(len(text.split("\n")), 1)
