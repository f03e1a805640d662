"""Tests for local diff extraction."""

import subprocess
from pathlib import Path

import pytest
from diffcritic.diff.extractor import (
  GitError,
  _sanitize_error,
  extract_staged_diff,
  parse_diff_output,
  split_git_diff,
)
from diffcritic.models import FileStatus


class TestParseDiffOutput:
  def test_empty_diff(self) -> None:
    result = parse_diff_output("")
    assert result == []

  def test_whitespace_diff(self) -> None:
    result = parse_diff_output("   \n\n  ")
    assert result == []

  def test_single_file_diff(self, sample_diff: str) -> None:
    result = parse_diff_output(sample_diff)
    assert len(result) == 1
    assert result[0].filename == "test.py"
    assert result[0].status == FileStatus.MODIFIED
    assert (result[0].additions, result[0].deletions) == (2, 1)

  def test_new_file_diff(self) -> None:
    diff = """diff --git a/new_file.py b/new_file.py
new file mode 100644
index 0000000..1234567
--- /dev/null
+++ b/new_file.py
@@ -0,0 +1,3 @@
+def new_func():
+    pass
"""
    result = parse_diff_output(diff)
    assert len(result) == 1
    assert result[0].filename == "new_file.py"
    assert result[0].status == FileStatus.ADDED

  def test_deleted_file_diff(self) -> None:
    diff = """diff --git a/old_file.py b/old_file.py
deleted file mode 100644
index 1234567..0000000
--- a/old_file.py
+++ /dev/null
@@ -1,3 +0,0 @@
-def old_func():
-    pass
"""
    result = parse_diff_output(diff)
    assert result[0].status == FileStatus.REMOVED
    assert result[0].deletions == 2

  def test_renamed_file_diff(self) -> None:
    diff = """diff --git a/old_name.py b/new_name.py
similarity index 90%
rename from old_name.py
rename to new_name.py
@@ -1 +1 @@
-old
+new
"""
    result = parse_diff_output(diff)
    assert result[0].filename == "new_name.py"
    assert result[0].status == FileStatus.RENAMED
    assert result[0].previous_filename == "old_name.py"

  def test_multiple_files_diff(self) -> None:
    diff = """diff --git a/file1.py b/file1.py
index 1234567..abcdefg 100644
--- a/file1.py
+++ b/file1.py
@@ -1 +1 @@
-old
+new
diff --git a/file2.py b/file2.py
index 1234567..abcdefg 100644
--- a/file2.py
+++ b/file2.py
@@ -1 +1 @@
-old2
+new2
"""
    result = parse_diff_output(diff)
    assert len(result) == 2
    assert result[0].filename == "file1.py"
    assert result[1].filename == "file2.py"
    assert "+new2" not in result[0].patch


class TestSplitGitDiff:
  def test_lines_before_first_file_are_dropped(self) -> None:
    pairs = split_git_diff("warning: stray\ndiff --git a/x.py b/x.py\n+1")
    assert pairs == [("x.py", "diff --git a/x.py b/x.py\n+1")]


class TestSanitizeError:
  def test_strips_paths_from_fatal_lines(self) -> None:
    message = _sanitize_error("fatal: not a git repository: /home/alice/secret/repo")
    assert "/home/alice" not in message
    assert "repo" in message


class TestExtractStagedDiff:
  def test_reads_staged_changes(self, tmp_path: Path) -> None:
    def git(*args: str) -> None:
      subprocess.run(["git", *args], cwd=tmp_path, capture_output=True, check=True)

    git("init")
    git("config", "user.email", "dev@example.com")
    git("config", "user.name", "Dev")
    (tmp_path / "app.py").write_text("x = 1\n")
    git("add", "app.py")
    git("commit", "-m", "initial")
    (tmp_path / "app.py").write_text("x = 2\n")
    git("add", "app.py")

    files = extract_staged_diff(tmp_path)

    assert len(files) == 1
    assert files[0].filename == "app.py"
    assert (files[0].additions, files[0].deletions) == (1, 1)

  def test_raises_outside_repository(self, tmp_path: Path) -> None:
    with pytest.raises(GitError):
      extract_staged_diff(tmp_path)
