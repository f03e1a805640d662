"""Local git diff extraction."""

import subprocess
from pathlib import Path

from diffcritic.diff.parser import count_patch_lines
from diffcritic.models import ChangedFile, FileStatus


class GitError(Exception):
  """Git command failed."""


def _sanitize_error(stderr: str) -> str:
  """Remove potentially sensitive path information from error messages."""
  lines = stderr.strip().split("\n")
  sanitized = []
  for line in lines:
    if "fatal:" in line or "error:" in line:
      sanitized.append(line.split("/")[-1] if "/" in line else line)
    else:
      sanitized.append(line)
  return "\n".join(sanitized)


def run_git(*args: str, cwd: Path | None = None) -> str:
  """Run a git command and return stdout."""
  try:
    result = subprocess.run(
      ["git", *args],
      capture_output=True,
      text=True,
      check=True,
      cwd=cwd,
    )
    return result.stdout
  except subprocess.CalledProcessError as e:
    sanitized = _sanitize_error(e.stderr)
    raise GitError(f"git {' '.join(args)} failed: {sanitized}") from e


def extract_staged_diff(cwd: Path | None = None) -> list[ChangedFile]:
  """Extract changed files from the staged diff."""
  return parse_diff_output(run_git("diff", "--cached", cwd=cwd))


def extract_branch_diff(
  branch: str,
  base: str = "main",
  cwd: Path | None = None,
) -> list[ChangedFile]:
  """Extract changed files between branch and base."""
  return parse_diff_output(run_git("diff", f"{base}...{branch}", cwd=cwd))


def split_git_diff(diff_output: str) -> list[tuple[str, str]]:
  """Split multi-file git diff output into (path, patch) pairs."""
  if not diff_output.strip():
    return []

  files: list[tuple[str, list[str]]] = []
  for line in diff_output.split("\n"):
    if line.startswith("diff --git"):
      parts = line.split(" b/")
      path = parts[-1] if len(parts) > 1 else ""
      files.append((path, [line]))
    elif files:
      files[-1][1].append(line)

  return [(path, "\n".join(lines)) for path, lines in files if path]


def parse_diff_output(diff_output: str) -> list[ChangedFile]:
  """Parse git diff output into changed files."""
  changed: list[ChangedFile] = []

  for path, patch in split_git_diff(diff_output):
    status = FileStatus.MODIFIED
    previous: str | None = None
    for line in patch.split("\n"):
      if line.startswith("@@"):
        break
      if line.startswith("new file"):
        status = FileStatus.ADDED
      elif line.startswith("deleted file"):
        status = FileStatus.REMOVED
      elif line.startswith("rename from "):
        status = FileStatus.RENAMED
        previous = line[len("rename from "):]

    additions, deletions = count_patch_lines(patch)
    changed.append(ChangedFile(
      filename=path,
      status=status,
      additions=additions,
      deletions=deletions,
      patch=patch,
      previous_filename=previous,
    ))

  return changed
