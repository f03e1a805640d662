"""Core domain models for diff review."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
  from diffcritic.diff.stats import ChangeStats, ChangeSummary


class Severity(Enum):
  """Issue severity levels."""

  HIGH = "high"
  MEDIUM = "medium"
  LOW = "low"
  INFO = "info"
  ERROR = "error"

  @classmethod
  def coerce(cls, value: Any) -> "Severity":
    """Map a loosely-typed severity string onto a known level."""
    if isinstance(value, Severity):
      return value
    try:
      return cls(str(value).strip().lower())
    except ValueError:
      return cls.MEDIUM


class FileStatus(Enum):
  """How a file changed within the review window."""

  ADDED = "added"
  MODIFIED = "modified"
  REMOVED = "removed"
  RENAMED = "renamed"


class ChangeKind(Enum):
  """Classification of a single diff line."""

  ADD = "add"
  REMOVE = "remove"
  CONTEXT = "context"


class JobStatus(Enum):
  """Lifecycle states of a review job."""

  IDLE = "idle"
  PENDING = "pending"
  CLONING = "cloning"
  GET_CONTENT = "getContent"
  REVIEWING = "reviewing"
  REPORTING = "reporting"
  COMPLETED = "completed"
  FAILED = "failed"

  @property
  def is_terminal(self) -> bool:
    return self in (JobStatus.COMPLETED, JobStatus.FAILED)


def utc_now() -> str:
  return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ChangedFile:
  """A file touched by one or more commits in the review window."""

  filename: str
  status: FileStatus
  additions: int = 0
  deletions: int = 0
  patch: str = ""
  content: str | None = None
  content_error: str | None = None
  previous_filename: str | None = None

  @property
  def changes(self) -> int:
    return self.additions + self.deletions

  @property
  def extension(self) -> str:
    suffix = PurePosixPath(self.filename).suffix
    return suffix[1:] if suffix else "unknown"

  @property
  def reviewable_text(self) -> str:
    """Fetched content when available, otherwise the raw patch."""
    if self.content is not None:
      return self.content
    return self.patch

  def with_content(self, content: str | None, error: str | None = None) -> "ChangedFile":
    return replace(self, content=content, content_error=error)


@dataclass(frozen=True)
class LineChange:
  """One classified line inside a hunk."""

  kind: ChangeKind
  text: str
  source_line_index: int


@dataclass(frozen=True)
class DiffHunk:
  """A contiguous region of change bounded by an @@ header."""

  original_start: int
  original_length: int
  new_start: int
  new_length: int
  header_line_index: int
  changes: Sequence[LineChange] = field(default_factory=tuple)

  @property
  def header(self) -> str:
    return (
      f"@@ -{self.original_start},{self.original_length} "
      f"+{self.new_start},{self.new_length} @@"
    )


@dataclass(frozen=True)
class ParsedDiff:
  """Structured view of one file's unified diff."""

  hunks: Sequence[DiffHunk]
  added_lines: Sequence[LineChange]
  removed_lines: Sequence[LineChange]

  @property
  def change_count(self) -> int:
    return len(self.added_lines) + len(self.removed_lines)


@dataclass(frozen=True)
class ReviewChunk:
  """A slice of reviewable text sized for a single LLM call.

  ``start_line_offset`` and ``end_line_offset`` are 0-based indexes into the
  original text's lines (end exclusive). ``header_line_count`` lines of
  synthesized hunk context precede the slice inside ``content``.
  """

  content: str
  start_line_offset: int
  end_line_offset: int
  index: int
  total_chunks: int
  header_line_count: int = 0


@dataclass(frozen=True)
class Issue:
  """A single review finding."""

  severity: Severity
  line: int
  message: str
  suggestion: str | None = None

  def with_line(self, line: int) -> "Issue":
    return replace(self, line=line)

  def to_dict(self) -> dict[str, Any]:
    return {
      "severity": self.severity.value,
      "line": self.line,
      "message": self.message,
      "suggestion": self.suggestion,
    }

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> "Issue":
    return cls(
      severity=Severity.coerce(data.get("severity", "medium")),
      line=int(data.get("line") or 1),
      message=str(data.get("message", "")),
      suggestion=data.get("suggestion"),
    )


@dataclass(frozen=True)
class FileReview:
  """Deduplicated findings for one file."""

  file: str
  status: FileStatus
  issues: Sequence[Issue] = field(default_factory=tuple)
  cached: bool = False

  def to_dict(self) -> dict[str, Any]:
    return {
      "file": self.file,
      "status": self.status.value,
      "issues": [i.to_dict() for i in self.issues],
    }


@dataclass(frozen=True)
class ReviewSummary:
  """Aggregate counts over a review result."""

  issue_counts: dict[str, int]
  total_issues: int
  file_with_most_issues: str | None
  max_issues_per_file: int


@dataclass(frozen=True)
class ReviewResult:
  """Result of one review job, handed to the result store."""

  id: str
  project_id: str
  project_name: str
  start_time: str
  end_time: str
  results: Sequence[FileReview]
  file_count: int
  reviewed_at: str = field(default_factory=utc_now)
  change_stats: "ChangeStats | None" = None
  change_summary: "ChangeSummary | None" = None

  @property
  def issues(self) -> list[tuple[str, Issue]]:
    return [(r.file, i) for r in self.results for i in r.issues]

  @property
  def has_severe_issues(self) -> bool:
    """Check if result contains HIGH or ERROR severity issues."""
    return any(i.severity in (Severity.HIGH, Severity.ERROR) for _, i in self.issues)

  def summary(self) -> ReviewSummary:
    counts = {s.value: 0 for s in (Severity.HIGH, Severity.MEDIUM, Severity.LOW, Severity.INFO)}
    most_file: str | None = None
    most = 0
    for review in self.results:
      if len(review.issues) > most:
        most = len(review.issues)
        most_file = review.file
      for issue in review.issues:
        if issue.severity.value in counts:
          counts[issue.severity.value] += 1
    return ReviewSummary(
      issue_counts=counts,
      total_issues=sum(counts.values()),
      file_with_most_issues=most_file,
      max_issues_per_file=most,
    )

  def to_dict(self) -> dict[str, Any]:
    data = {
      "id": self.id,
      "projectId": self.project_id,
      "projectName": self.project_name,
      "startTime": self.start_time,
      "endTime": self.end_time,
      "reviewedAt": self.reviewed_at,
      "fileCount": self.file_count,
      "results": [r.to_dict() for r in self.results],
    }
    if self.change_stats is not None:
      data["changeStats"] = self.change_stats.to_dict()
    if self.change_summary is not None:
      data["changeSummary"] = self.change_summary.to_dict()
    return data


@dataclass
class JobProgress:
  """Mutable progress record of a running review job."""

  id: str
  project_id: str
  project_name: str
  start_time: str
  end_time: str
  status: JobStatus = JobStatus.PENDING
  progress: int = 0
  message: str = "Preparing review"
  finished_at: float | None = None
  error: str | None = None

  def to_dict(self) -> dict[str, Any]:
    return {
      "status": self.status.value,
      "progress": self.progress,
      "message": self.message,
    }


@dataclass(frozen=True)
class Project:
  """Project record supplied by the project store."""

  id: str
  name: str
  repo_url: str
  repo_type: str = "github"
  token: str | None = None
  api_base_url: str | None = None
  exclude_extensions: Sequence[str] = field(default_factory=tuple)
  style_guide: str | None = None
