"""In-memory progress tracking for review jobs."""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable

from diffcritic.models import JobProgress, JobStatus

logger = logging.getLogger(__name__)

IDLE_PROGRESS: dict[str, Any] = {
  "status": JobStatus.IDLE.value,
  "progress": 0,
  "message": "No review in progress",
}


class JobPolicy(Enum):
  """What happens when a job starts while another runs for the same project."""

  OVERWRITE = "overwrite"
  REJECT = "reject"


class JobAlreadyRunningError(Exception):
  """A job is already active for the project and the policy rejects another."""


class JobNotFoundError(Exception):
  """No progress entry exists for the job id."""


def new_job_id() -> str:
  return f"review_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class ProgressStore(ABC):
  """Lifecycle-managed store of job progress records."""

  @abstractmethod
  def create(
    self,
    project_id: str,
    project_name: str,
    start_time: str,
    end_time: str,
  ) -> JobProgress:
    """Register a new pending job and return its progress record."""
    ...

  @abstractmethod
  def update(self, job_id: str, status: JobStatus, progress: int, message: str) -> JobProgress:
    """Move a job to a new stage."""
    ...

  @abstractmethod
  def complete(self, job_id: str, message: str = "Review completed") -> JobProgress:
    """Mark a job completed; it becomes eligible for eviction."""
    ...

  @abstractmethod
  def fail(self, job_id: str, error: str) -> JobProgress:
    """Mark a job failed; it becomes eligible for eviction."""
    ...

  @abstractmethod
  def get(self, job_id: str) -> JobProgress | None:
    ...

  @abstractmethod
  def latest_for_project(self, project_id: str) -> JobProgress | None:
    """Most recently created job for a project, if still retained."""
    ...

  @abstractmethod
  def evict_expired(self) -> int:
    """Drop terminal jobs past the retention window; return the count."""
    ...


class InMemoryProgressStore(ProgressStore):
  """Single-process progress store with lazy eviction.

  Under ``JobPolicy.OVERWRITE`` a second job for a project is accepted and
  becomes the one polling observes. Under ``JobPolicy.REJECT`` starting a job
  while a non-terminal one exists for the project raises
  JobAlreadyRunningError.
  """

  def __init__(
    self,
    retention_seconds: float = 3600,
    policy: JobPolicy = JobPolicy.OVERWRITE,
    clock: Callable[[], float] = time.monotonic,
  ):
    self._retention = retention_seconds
    self._policy = policy
    self._clock = clock
    self._jobs: dict[str, JobProgress] = {}

  def create(
    self,
    project_id: str,
    project_name: str,
    start_time: str,
    end_time: str,
  ) -> JobProgress:
    self.evict_expired()
    active = self.latest_for_project(project_id)
    if active is not None and not active.status.is_terminal:
      if self._policy == JobPolicy.REJECT:
        raise JobAlreadyRunningError(
          f"Review {active.id} is already running for project {project_id}"
        )
      logger.warning(
        "Starting a second review for project %s while %s is %s",
        project_id,
        active.id,
        active.status.value,
      )

    job = JobProgress(
      id=new_job_id(),
      project_id=project_id,
      project_name=project_name,
      start_time=start_time,
      end_time=end_time,
    )
    self._jobs[job.id] = job
    return job

  def update(self, job_id: str, status: JobStatus, progress: int, message: str) -> JobProgress:
    job = self._require(job_id)
    job.status = status
    job.progress = max(0, min(100, progress))
    job.message = message
    return job

  def complete(self, job_id: str, message: str = "Review completed") -> JobProgress:
    job = self.update(job_id, JobStatus.COMPLETED, 100, message)
    job.finished_at = self._clock()
    return job

  def fail(self, job_id: str, error: str) -> JobProgress:
    job = self._require(job_id)
    job.status = JobStatus.FAILED
    job.message = f"Review failed: {error}"
    job.error = error
    job.finished_at = self._clock()
    return job

  def get(self, job_id: str) -> JobProgress | None:
    self.evict_expired()
    return self._jobs.get(job_id)

  def latest_for_project(self, project_id: str) -> JobProgress | None:
    self.evict_expired()
    # dicts keep insertion order, so the last match is the newest job
    latest = None
    for job in self._jobs.values():
      if job.project_id == project_id:
        latest = job
    return latest

  def evict_expired(self) -> int:
    now = self._clock()
    expired = [
      job_id
      for job_id, job in self._jobs.items()
      if job.finished_at is not None and now - job.finished_at >= self._retention
    ]
    for job_id in expired:
      del self._jobs[job_id]
    return len(expired)

  def __len__(self) -> int:
    return len(self._jobs)

  def _require(self, job_id: str) -> JobProgress:
    job = self._jobs.get(job_id)
    if job is None:
      raise JobNotFoundError(f"Unknown review job: {job_id}")
    return job


def query_progress(store: ProgressStore, project_id: str) -> dict[str, Any]:
  """Polling view of a project's most recent job, or the idle default."""
  job = store.latest_for_project(project_id)
  if job is None:
    return dict(IDLE_PROGRESS)
  return job.to_dict()
