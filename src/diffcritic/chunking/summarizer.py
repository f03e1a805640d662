"""Reduce oversized change text to its most review-relevant lines."""

from dataclasses import dataclass

DEFAULT_SUMMARY_LIMIT = 10_000

_HEADER_LINES = 10
_MAX_IMPORTANT_LINES = 800
_CONTEXT_WINDOW = 5
_SOFT_CAP = 9000
_EDGE_CHARS = 4500
# Room for the elision notice between the kept edges
_EDGE_NOTICE_CHARS = 64


@dataclass(frozen=True)
class Summary:
  """Summarized text plus, per summary line, the 0-based original line it came from.

  An empty ``source_lines`` means the text was returned unchanged.
  """

  text: str
  source_lines: tuple[int | None, ...] = ()

  def original_line(self, line: int) -> int:
    """Map a 1-based line of the summary back to the original text.

    Lines added by the summary itself (notices, elision markers) map to the
    nearest kept line above them.
    """
    if not self.source_lines:
      return line
    position = min(max(line, 1), len(self.source_lines)) - 1
    for index in range(position, -1, -1):
      source = self.source_lines[index]
      if source is not None:
        return source + 1
    return 1


@dataclass(frozen=True)
class _Important:
  text: str
  index: int
  is_marker: bool = False


def summarize_changes(text: str, limit: int = DEFAULT_SUMMARY_LIMIT) -> str:
  """Summarize text longer than limit; shorter text is returned unchanged.

  Keeps hunk markers, every added and removed line, and context lines close
  to a change. Text without any hunk marker keeps its head and tail around
  an elision marker instead. Never raises.
  """
  return summarize_with_line_map(text, limit).text


def summarize_with_line_map(text: str, limit: int = DEFAULT_SUMMARY_LIMIT) -> Summary:
  """Like summarize_changes, but remembers where each kept line came from."""
  if len(text) <= limit:
    return Summary(text)

  lines = text.split("\n")
  if not any(_is_marker(line) for line in lines):
    return _keep_edges(text, limit)

  kept: list[tuple[str, int | None]] = []
  i = 0
  while i < len(lines) and i < _HEADER_LINES and not _is_marker(lines[i]):
    kept.append((lines[i], i))
    i += 1

  important = _collect_important(lines, i)
  if not important:
    return _keep_edges(text, limit)

  groups: list[list[_Important]] = []
  for item in important:
    if item.is_marker or not groups:
      groups.append([item])
    else:
      groups[-1].append(item)

  soft_cap = min(_SOFT_CAP, int(limit * 0.9))
  length = sum(len(line) + 1 for line, _ in kept)
  for group in groups:
    if length >= soft_cap:
      break
    for item in group:
      kept.append((item.text, item.index))
      length += len(item.text) + 1

  kept += [
    ("", None),
    ("...content summarized by importance...", None),
    (f"Original change had {len(lines)} lines; extracted {len(important)} important lines", None),
  ]
  return Summary(
    text="\n".join(line for line, _ in kept),
    source_lines=tuple(source for _, source in kept),
  )


def _collect_important(lines: list[str], start: int) -> list[_Important]:
  important: list[_Important] = []
  last_change: int | None = None

  for j in range(start, len(lines)):
    if len(important) >= _MAX_IMPORTANT_LINES:
      break
    line = lines[j]
    if _is_marker(line):
      important.append(_Important(line, j, is_marker=True))
    elif line.startswith(("+", "-")):
      important.append(_Important(line, j))
      last_change = j
    elif line.strip() and last_change is not None and j - last_change <= _CONTEXT_WINDOW:
      important.append(_Important(line, j))

  return important


def _keep_edges(text: str, limit: int) -> Summary:
  edge = min(_EDGE_CHARS, max((limit - _EDGE_NOTICE_CHARS) // 2, 0))
  head = text[:edge]
  tail_start = len(text) - edge
  tail = text[tail_start:]
  omitted = tail_start - edge

  head_lines = head.count("\n") + 1
  tail_first = text.count("\n", 0, tail_start)
  source_lines = (
    *range(head_lines),
    None, None, None,
    *range(tail_first, tail_first + tail.count("\n") + 1),
  )
  return Summary(
    text=f"{head}\n...\n[{omitted} characters omitted from the middle]\n...\n{tail}",
    source_lines=source_lines,
  )


def _is_marker(line: str) -> bool:
  return line.startswith("@@")
