"""Diff parsing, local extraction and change statistics."""

from diffcritic.diff.extractor import (
  GitError,
  extract_branch_diff,
  extract_staged_diff,
  parse_diff_output,
)
from diffcritic.diff.parser import (
  HUNK_HEADER,
  is_hunk_header,
  parse_diff_content,
  parse_file_diff,
)
from diffcritic.diff.stats import extract_change_stats, generate_change_summary

__all__ = [
  "GitError",
  "HUNK_HEADER",
  "extract_branch_diff",
  "extract_change_stats",
  "extract_staged_diff",
  "generate_change_summary",
  "is_hunk_header",
  "parse_diff_content",
  "parse_diff_output",
  "parse_file_diff",
]
