"""Output formatting for review results."""

import json
from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from diffcritic.models import ReviewResult, Severity


class OutputFormatter(ABC):
  """Base output formatter."""

  @abstractmethod
  def format(self, result: ReviewResult) -> str:
    """Format review result for output."""
    ...


class TerminalFormatter(OutputFormatter):
  """Rich terminal output formatter."""

  SEVERITY_STYLES = {
    Severity.ERROR: "bold magenta",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.INFO: "dim",
  }

  def __init__(self, console: Console | None = None):
    self.console = console or Console()

  def format(self, result: ReviewResult) -> str:
    self._print_summary(result)
    self._print_issues(result)
    return ""

  def _print_summary(self, result: ReviewResult) -> None:
    summary = result.summary()
    counts = ", ".join(f"{name}: {count}" for name, count in summary.issue_counts.items())
    body = f"{result.file_count} file(s) reviewed, {summary.total_issues} issue(s)\n{counts}"
    if result.change_summary is not None:
      body += f"\n{_changes_line(result)}"
    if summary.file_with_most_issues:
      body += (
        f"\nMost issues: {summary.file_with_most_issues} "
        f"({summary.max_issues_per_file})"
      )
    self.console.print()
    self.console.print(Panel(
      body,
      title=f"[bold]Code Review[/bold] ({result.project_name})",
      subtitle=f"{result.start_time} .. {result.end_time}",
      border_style="blue",
    ))

  def _print_issues(self, result: ReviewResult) -> None:
    issues = result.issues
    if not issues:
      self.console.print("\n[green]No issues found.[/green]")
      return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Severity", width=10)
    table.add_column("File", width=30)
    table.add_column("Line", width=6, justify="right")
    table.add_column("Issue", min_width=40)

    for file, issue in issues:
      style = self.SEVERITY_STYLES.get(issue.severity, "")
      severity_text = Text(issue.severity.value.upper(), style=style)

      message = issue.message
      if issue.suggestion:
        message += f"\n[dim]Suggestion: {issue.suggestion}[/dim]"

      table.add_row(severity_text, file, str(issue.line), message)

    self.console.print()
    self.console.print(table)
    self.console.print(f"\n[dim]{len(issues)} issue(s) found[/dim]")


class JsonFormatter(OutputFormatter):
  """JSON output formatter using the stored result layout."""

  def format(self, result: ReviewResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


class MarkdownFormatter(OutputFormatter):
  """Markdown output formatter."""

  def format(self, result: ReviewResult) -> str:
    summary = result.summary()
    lines = [
      f"# Code Review: {result.project_name}",
      "",
      f"**Window:** {result.start_time} to {result.end_time}",
      f"**Files reviewed:** {result.file_count}",
    ]
    if result.change_summary is not None:
      lines.append(f"**Changes:** {_changes_line(result)}")
    lines.extend([f"**Issues:** {summary.total_issues}", ""])

    if not result.results:
      lines.extend(["No issues found.", ""])
      return "\n".join(lines)

    for review in result.results:
      lines.extend([f"## {review.file}", ""])
      for issue in review.issues:
        lines.append(f"- **[{issue.severity.value.upper()}]** line {issue.line}: {issue.message}")
        if issue.suggestion:
          lines.append(f"  - Suggestion: {issue.suggestion}")
      lines.append("")

    return "\n".join(lines)


class GitHubFormatter(OutputFormatter):
  """GitHub Actions workflow command formatter for PR annotations."""

  def format(self, result: ReviewResult) -> str:
    lines = []
    for file, issue in result.issues:
      level = self._severity_to_level(issue.severity)
      message = issue.message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
      lines.append(f"::{level} file={file},line={issue.line}::{message}")
    return "\n".join(lines)

  def _severity_to_level(self, severity: Severity) -> str:
    if severity in (Severity.ERROR, Severity.HIGH):
      return "error"
    if severity == Severity.MEDIUM:
      return "warning"
    return "notice"


def _changes_line(result: ReviewResult) -> str:
  changes = result.change_summary
  line = f"+{changes.added_lines} / -{changes.removed_lines} lines in {changes.total_files} reviewed file(s)"
  if result.change_stats is not None:
    line += f" ({result.change_stats.total_files} changed in window)"
  return line


FORMATTERS: dict[str, type[OutputFormatter]] = {
  "terminal": TerminalFormatter,
  "json": JsonFormatter,
  "markdown": MarkdownFormatter,
  "github": GitHubFormatter,
}


def get_formatter(format_type: str) -> OutputFormatter:
  """Get formatter by type name."""
  formatter_class = FORMATTERS.get(format_type)
  if not formatter_class:
    raise ValueError(f"Unknown format: {format_type}")
  return formatter_class()
