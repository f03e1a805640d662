"""Review orchestration and job running."""

from diffcritic.review.job import (
  ReviewJobRunner,
  filter_changed_files,
  review_local_changes,
  style_guide_fingerprint,
)
from diffcritic.review.orchestrator import (
  FileProcessingError,
  ReviewOrchestrator,
  ReviewPath,
  dedupe_issues,
)

__all__ = [
  "FileProcessingError",
  "ReviewJobRunner",
  "ReviewOrchestrator",
  "ReviewPath",
  "dedupe_issues",
  "filter_changed_files",
  "review_local_changes",
  "style_guide_fingerprint",
]
