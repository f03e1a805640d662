"""Pytest fixtures."""

import asyncio
from typing import Callable

import pytest
from diffcritic.models import ChangedFile, FileReview, FileStatus, Issue, ReviewResult, Severity
from diffcritic.providers.base import ReviewProvider

Responder = Callable[[str], str]


class ScriptedProvider(ReviewProvider):
  """Provider whose responses come from a callable over the user prompt."""

  def __init__(self, responder: Responder | None = None, delay: float = 0.0):
    self._responder = responder or (lambda prompt: '{"issues": []}')
    self._delay = delay
    self.prompts: list[str] = []
    self.in_flight = 0
    self.max_in_flight = 0

  @property
  def name(self) -> str:
    return "scripted"

  @property
  def model(self) -> str:
    return "scripted-model"

  def is_available(self) -> bool:
    return True

  @property
  def calls(self) -> int:
    return len(self.prompts)

  async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
    self.prompts.append(user_prompt)
    self.in_flight += 1
    self.max_in_flight = max(self.max_in_flight, self.in_flight)
    try:
      if self._delay:
        await asyncio.sleep(self._delay)
      return self._responder(user_prompt)
    finally:
      self.in_flight -= 1


@pytest.fixture
def make_provider() -> Callable[..., ScriptedProvider]:
  return ScriptedProvider


@pytest.fixture
def sample_diff() -> str:
  return """diff --git a/test.py b/test.py
index 1234567..abcdefg 100644
--- a/test.py
+++ b/test.py
@@ -1,5 +1,6 @@
 def hello():
-    print("hello")
+    print("hello world")
+    return True
"""


@pytest.fixture
def sample_patch() -> str:
  return """@@ -1,3 +1,4 @@
 def hello():
-    print("hello")
+    print("hello world")
+    return True
@@ -10,2 +11,2 @@ class Greeter:
-    name = None
+    name = "world"
\\ No newline at end of file"""


@pytest.fixture
def sample_changed_file(sample_patch: str) -> ChangedFile:
  return ChangedFile(
    filename="src/app.py",
    status=FileStatus.MODIFIED,
    additions=3,
    deletions=2,
    patch=sample_patch,
  )


@pytest.fixture
def sample_review_result() -> ReviewResult:
  return ReviewResult(
    id="review_1_abc",
    project_id="p1",
    project_name="acme/widgets",
    start_time="2024-01-01T00:00:00+00:00",
    end_time="2024-01-08T00:00:00+00:00",
    file_count=2,
    results=[
      FileReview(
        file="src/app.py",
        status=FileStatus.MODIFIED,
        issues=(
          Issue(Severity.HIGH, 12, "SQL built from user input", "Use query parameters"),
          Issue(Severity.LOW, 3, "Consider adding a docstring"),
        ),
      ),
    ],
  )
