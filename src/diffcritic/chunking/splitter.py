"""Split oversized review text into overlapping, hunk-aligned chunks."""

import logging
from dataclasses import dataclass

from diffcritic.diff.parser import is_hunk_header
from diffcritic.models import ReviewChunk

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8000
DEFAULT_OVERLAP_LINES = 3
DEFAULT_BOUNDARY_LOOKBACK = 50
DEFAULT_HEADER_SCAN = 20


@dataclass(frozen=True)
class _Span:
  start: int
  end: int
  header_start: int


def split_into_chunks(
  text: str,
  max_chars: int = DEFAULT_CHUNK_SIZE,
  overlap_lines: int = DEFAULT_OVERLAP_LINES,
  boundary_lookback: int = DEFAULT_BOUNDARY_LOOKBACK,
  header_scan: int = DEFAULT_HEADER_SCAN,
) -> list[ReviewChunk]:
  """Split text into chunks of at most max_chars characters.

  Consecutive chunks share ``overlap_lines`` lines. Chunks after the first
  are prefixed with the nearest preceding hunk header (and the lines between
  it and the chunk start) so the model sees which region it is reading.
  A chunk always holds at least one line, so a single line longer than
  max_chars yields an oversized chunk rather than an endless loop.
  """
  lines = text.split("\n")
  if len(text) <= max_chars:
    return [ReviewChunk(
      content=text,
      start_line_offset=0,
      end_line_offset=len(lines),
      index=1,
      total_chunks=1,
    )]

  spans: list[_Span] = []
  start = 0
  while start < len(lines):
    header_start = start
    if start > 0:
      found = _find_preceding_header(lines, start, header_scan)
      if found is not None and _size(lines, found, start) <= max_chars // 2:
        header_start = found

    budget = max_chars - _size(lines, header_start, start)
    end = _fill(lines, start, budget)
    if end < len(lines):
      boundary = _find_boundary(lines, start, end, overlap_lines, boundary_lookback)
      if boundary is not None:
        end = boundary

    spans.append(_Span(start=start, end=end, header_start=header_start))
    if end >= len(lines):
      break
    start = max(end - overlap_lines, start + 1)

  total = len(spans)
  logger.debug("Split %d lines into %d chunks", len(lines), total)
  return [
    ReviewChunk(
      content="\n".join(lines[span.header_start:span.end]),
      start_line_offset=span.start,
      end_line_offset=span.end,
      index=i,
      total_chunks=total,
      header_line_count=span.start - span.header_start,
    )
    for i, span in enumerate(spans, start=1)
  ]


def remap_line(chunk: ReviewChunk, local_line: int, total_lines: int) -> int:
  """Convert a 1-based line inside chunk content to a 1-based file line."""
  absolute = chunk.start_line_offset - chunk.header_line_count + local_line
  return min(max(absolute, 1), max(total_lines, 1))


def _size(lines: list[str], start: int, end: int) -> int:
  return sum(len(line) + 1 for line in lines[start:end])


def _fill(lines: list[str], start: int, budget: int) -> int:
  """Return the exclusive end index of the lines that fit in budget."""
  end = start
  size = 0
  while end < len(lines):
    length = len(lines[end]) + 1
    if size + length > budget and end > start:
      break
    size += length
    end += 1
  return end


def _find_boundary(
  lines: list[str],
  start: int,
  end: int,
  overlap_lines: int,
  lookback: int,
) -> int | None:
  """Nearest hunk header at or before end that leaves enough lines behind."""
  floor = max(start + overlap_lines, end - lookback)
  for i in range(end, floor, -1):
    if is_hunk_header(lines[i]):
      return i
  return None


def _find_preceding_header(lines: list[str], start: int, scan: int) -> int | None:
  """Index of the nearest hunk header within scan lines before start."""
  if is_hunk_header(lines[start]):
    return None
  for i in range(start - 1, max(start - 1 - scan, -1), -1):
    if is_hunk_header(lines[i]):
      return i
  return None
