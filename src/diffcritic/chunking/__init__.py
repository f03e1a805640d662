"""Chunking and summarization of oversized review text."""

from diffcritic.chunking.splitter import (
  DEFAULT_CHUNK_SIZE,
  DEFAULT_OVERLAP_LINES,
  remap_line,
  split_into_chunks,
)
from diffcritic.chunking.summarizer import (
  DEFAULT_SUMMARY_LIMIT,
  Summary,
  summarize_changes,
  summarize_with_line_map,
)

__all__ = [
  "DEFAULT_CHUNK_SIZE",
  "DEFAULT_OVERLAP_LINES",
  "DEFAULT_SUMMARY_LIMIT",
  "Summary",
  "remap_line",
  "split_into_chunks",
  "summarize_changes",
  "summarize_with_line_map",
]
