"""Tests for output formatters."""

import json
from dataclasses import replace

import pytest
from diffcritic.diff.stats import extract_change_stats, generate_change_summary
from diffcritic.models import ChangedFile, FileReview, FileStatus, Issue, ReviewResult, Severity
from diffcritic.output.formatter import (
  GitHubFormatter,
  JsonFormatter,
  MarkdownFormatter,
  TerminalFormatter,
  get_formatter,
)
from rich.console import Console


def _result(*issues: Issue, file: str = "test.py") -> ReviewResult:
  results = [FileReview(file=file, status=FileStatus.MODIFIED, issues=issues)] if issues else []
  return ReviewResult(
    id="review_1_abc",
    project_id="p1",
    project_name="acme/widgets",
    start_time="2024-01-01T00:00:00+00:00",
    end_time="2024-01-08T00:00:00+00:00",
    results=results,
    file_count=1,
  )


def _with_changes(result: ReviewResult) -> ReviewResult:
  changed = [
    ChangedFile("src/app.py", FileStatus.MODIFIED, 2, 1, "@@ -1 +1,2 @@\n-a = 0\n+a = 1\n+b = 2"),
    ChangedFile("old.py", FileStatus.REMOVED, 0, 1, "@@ -1 +0,0 @@\n-x"),
  ]
  return replace(
    result,
    change_stats=extract_change_stats(changed),
    change_summary=generate_change_summary(changed[:1]),
  )


class TestJsonFormatter:
  def test_format_empty_result(self) -> None:
    data = json.loads(JsonFormatter().format(_result()))

    assert data["projectName"] == "acme/widgets"
    assert data["fileCount"] == 1
    assert data["results"] == []

  def test_format_with_issues(self, sample_review_result: ReviewResult) -> None:
    data = json.loads(JsonFormatter().format(sample_review_result))

    assert data["results"][0]["file"] == "src/app.py"
    assert data["results"][0]["status"] == "modified"
    assert data["results"][0]["issues"][0] == {
      "severity": "high",
      "line": 12,
      "message": "SQL built from user input",
      "suggestion": "Use query parameters",
    }

  def test_change_stats_are_included_when_present(self) -> None:
    assert "changeStats" not in json.loads(JsonFormatter().format(_result()))

    data = json.loads(JsonFormatter().format(_with_changes(_result())))

    assert data["changeStats"]["totalFiles"] == 2
    assert data["changeStats"]["removedFiles"] == 1
    assert data["changeStats"]["fileTypes"] == {"py": 2}
    assert data["changeSummary"]["addedLines"] == 2
    assert data["changeSummary"]["modifiedFiles"] == [
      {"filename": "src/app.py", "status": "modified", "changes": 3},
    ]


class TestMarkdownFormatter:
  def test_format_empty_result(self) -> None:
    output = MarkdownFormatter().format(_result())

    assert "# Code Review: acme/widgets" in output
    assert "No issues found" in output

  def test_format_with_issues(self, sample_review_result: ReviewResult) -> None:
    output = MarkdownFormatter().format(sample_review_result)

    assert "## src/app.py" in output
    assert "**[HIGH]** line 12: SQL built from user input" in output
    assert "Suggestion: Use query parameters" in output
    assert "**Issues:** 2" in output

  def test_change_line(self) -> None:
    output = MarkdownFormatter().format(_with_changes(_result()))
    assert "**Changes:** +2 / -1 lines in 1 reviewed file(s) (2 changed in window)" in output

  def test_no_change_line_without_stats(self) -> None:
    assert "**Changes:**" not in MarkdownFormatter().format(_result())


class TestTerminalFormatter:
  def test_prints_table(self, sample_review_result: ReviewResult) -> None:
    console = Console(record=True, width=160)
    assert TerminalFormatter(console).format(sample_review_result) == ""

    text = console.export_text()
    assert "SQL built from user input" in text
    assert "2 issue(s) found" in text

  def test_summary_shows_changed_lines(self) -> None:
    console = Console(record=True, width=160)
    TerminalFormatter(console).format(_with_changes(_result()))
    assert "+2 / -1 lines in 1 reviewed file(s)" in console.export_text()

  def test_no_issues(self) -> None:
    console = Console(record=True, width=120)
    TerminalFormatter(console).format(_result())
    assert "No issues found." in console.export_text()


class TestGitHubFormatter:
  def test_format_empty_result(self) -> None:
    assert GitHubFormatter().format(_result()) == ""

  def test_format_high_severity_as_error(self) -> None:
    output = GitHubFormatter().format(_result(Issue(Severity.HIGH, 10, "Bug")))
    assert output == "::error file=test.py,line=10::Bug"

  def test_format_review_failure_as_error(self) -> None:
    output = GitHubFormatter().format(_result(Issue(Severity.ERROR, 1, "Review timed out")))
    assert output == "::error file=test.py,line=1::Review timed out"

  def test_format_medium_severity_as_warning(self) -> None:
    output = GitHubFormatter().format(_result(Issue(Severity.MEDIUM, 5, "Smell")))
    assert output == "::warning file=test.py,line=5::Smell"

  def test_format_low_severity_as_notice(self) -> None:
    output = GitHubFormatter().format(_result(Issue(Severity.LOW, 1, "Info")))
    assert output == "::notice file=test.py,line=1::Info"

  def test_format_encodes_special_chars(self) -> None:
    output = GitHubFormatter().format(_result(Issue(Severity.HIGH, 1, "Error with %\nSee details.")))
    assert output == "::error file=test.py,line=1::Error with %25%0ASee details."


class TestGetFormatter:
  @pytest.mark.parametrize("name,cls", [
    ("terminal", TerminalFormatter),
    ("json", JsonFormatter),
    ("markdown", MarkdownFormatter),
    ("github", GitHubFormatter),
  ])
  def test_known_formatters(self, name, cls) -> None:
    assert isinstance(get_formatter(name), cls)

  def test_unknown_formatter(self) -> None:
    with pytest.raises(ValueError, match="Unknown format"):
      get_formatter("unknown")
