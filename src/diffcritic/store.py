"""Result store interface consumed at the end of a review job."""

from abc import ABC, abstractmethod

from diffcritic.models import ReviewResult


class ResultStore(ABC):
  """Persistence layer for finished review results.

  Layout, indexing and pagination belong to the implementation.
  """

  @abstractmethod
  def save(self, result: ReviewResult) -> None:
    """Persist a completed review result."""
    ...

  @abstractmethod
  def list_results(self, project_id: str) -> list[ReviewResult]:
    """Return stored results for a project, newest first."""
    ...


class NullResultStore(ResultStore):
  """Discards results; used when the caller only wants the return value."""

  def save(self, result: ReviewResult) -> None:
    pass

  def list_results(self, project_id: str) -> list[ReviewResult]:
    return []


class MemoryResultStore(ResultStore):
  """Keeps results in process memory."""

  def __init__(self) -> None:
    self._results: dict[str, list[ReviewResult]] = {}

  def save(self, result: ReviewResult) -> None:
    self._results.setdefault(result.project_id, []).insert(0, result)

  def list_results(self, project_id: str) -> list[ReviewResult]:
    return list(self._results.get(project_id, []))
