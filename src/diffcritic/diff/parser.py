"""Unified diff parsing into hunks and line changes."""

import re

from diffcritic.models import ChangeKind, DiffHunk, LineChange, ParsedDiff

# Pattern to parse diff hunk headers: @@ -start,count +start,count @@
HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d*))? \+(\d+)(?:,(\d*))? @@")


def is_hunk_header(line: str) -> bool:
  return HUNK_HEADER.match(line) is not None


def classify_line(line: str) -> ChangeKind | None:
  """Classify a hunk body line, or None if it carries no content."""
  if line.startswith("+") and not line.startswith("+++"):
    return ChangeKind.ADD
  if line.startswith("-") and not line.startswith("---"):
    return ChangeKind.REMOVE
  if line.startswith("\\"):
    # "\ No newline at end of file"
    return None
  # Providers sometimes drop the leading space on context lines
  return ChangeKind.CONTEXT


def parse_diff_content(diff_content: str | None) -> list[DiffHunk]:
  """Parse unified diff text into ordered hunks.

  Text before the first hunk header is ignored. Malformed lines inside a
  hunk are kept as context rather than rejected.
  """
  if not diff_content:
    return []

  hunks: list[DiffHunk] = []
  header: re.Match[str] | None = None
  header_index = 0
  changes: list[LineChange] = []

  def close() -> None:
    if header is None:
      return
    hunks.append(DiffHunk(
      original_start=int(header.group(1)),
      original_length=_range_length(header.group(2)),
      new_start=int(header.group(3)),
      new_length=_range_length(header.group(4)),
      header_line_index=header_index,
      changes=tuple(changes),
    ))

  for index, line in enumerate(diff_content.split("\n"), start=1):
    match = HUNK_HEADER.match(line)
    if match:
      close()
      header = match
      header_index = index
      changes = []
      continue

    if header is None:
      continue

    kind = classify_line(line)
    if kind is None:
      continue
    text = line[1:] if kind != ChangeKind.CONTEXT or line.startswith(" ") else line
    changes.append(LineChange(kind=kind, text=text, source_line_index=index))

  close()
  return hunks


def parse_file_diff(diff_content: str | None) -> ParsedDiff:
  """Parse one file's patch and flatten its added and removed lines."""
  hunks = parse_diff_content(diff_content)
  added = [c for h in hunks for c in h.changes if c.kind == ChangeKind.ADD]
  removed = [c for h in hunks for c in h.changes if c.kind == ChangeKind.REMOVE]
  return ParsedDiff(hunks=hunks, added_lines=added, removed_lines=removed)


def count_patch_lines(diff_content: str | None) -> tuple[int, int]:
  """Return (additions, deletions) counted from a patch."""
  parsed = parse_file_diff(diff_content)
  return len(parsed.added_lines), len(parsed.removed_lines)


def _range_length(value: str | None) -> int:
  # "@@ -3 +3 @@" omits the length, which then means a single line
  if value is None or value == "":
    return 1
  return int(value)
