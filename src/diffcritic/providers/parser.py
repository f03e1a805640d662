"""Shared response parsing utilities."""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from diffcritic.models import Issue, Severity

logger = logging.getLogger(__name__)

MAX_RESPONSE_LENGTH = 1_000_000  # 1MB limit for regex processing

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_FENCE_MARKER = re.compile(r"```(?:json)?")
_BRACE_SPAN = re.compile(r"\{.*\}", re.DOTALL)


class ParseError(ValueError):
  """Response text could not be turned into JSON."""


@dataclass(frozen=True)
class Parsed:
  """The response parsed; issues may legitimately be empty."""

  issues: Sequence[Issue] = field(default_factory=tuple)


@dataclass(frozen=True)
class ParseFailed:
  """The response could not be parsed into an issue list."""

  reason: str


ParseOutcome = Parsed | ParseFailed


def extract_json(text: str) -> Any:
  """Extract JSON from LLM response, handling markdown code blocks."""
  text = text.strip()

  if len(text) > MAX_RESPONSE_LENGTH:
    raise ParseError(f"Response too large ({len(text)} bytes), max {MAX_RESPONSE_LENGTH}")

  # Try direct JSON parse first
  try:
    return json.loads(text)
  except json.JSONDecodeError:
    pass

  # Try extracting from markdown code block
  fenced = _FENCED_BLOCK.search(text)
  if fenced:
    try:
      return json.loads(fenced.group(1).strip())
    except json.JSONDecodeError:
      pass

  # Try with every fence marker stripped
  try:
    return json.loads(_FENCE_MARKER.sub("", text).strip())
  except json.JSONDecodeError:
    pass

  # Try finding JSON object in text
  brace_match = _BRACE_SPAN.search(text)
  if brace_match:
    try:
      return json.loads(brace_match.group(0))
    except json.JSONDecodeError:
      pass

  raise ParseError(f"Could not extract valid JSON from response: {text[:200]}...")


def parse_review_response(text: str | None) -> ParseOutcome:
  """Parse a review response into issues without ever raising."""
  if not text or not text.strip():
    return ParseFailed("Empty response")

  try:
    data = extract_json(text)
  except ParseError as e:
    logger.warning("Failed to parse review response: %s", e)
    return ParseFailed(str(e))

  if isinstance(data, dict):
    raw = data.get("issues")
  else:
    raw = data
  if not isinstance(raw, list):
    return ParseFailed("Response JSON has no issues array")

  return Parsed(tuple(_to_issues(raw)))


def _to_issues(items: list[Any]) -> list[Issue]:
  issues = []
  for item in items:
    if not isinstance(item, dict):
      continue
    message = str(item.get("message") or "").strip()
    if not message:
      continue
    suggestion = item.get("suggestion")
    issues.append(Issue(
      severity=Severity.coerce(item.get("severity", "medium")),
      line=_to_line(item.get("line")),
      message=message,
      suggestion=str(suggestion) if suggestion else None,
    ))
  return issues


def _to_line(value: Any) -> int:
  try:
    line = int(value)
  except (TypeError, ValueError):
    return 1
  return line if line >= 1 else 1
