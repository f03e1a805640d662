"""Tests for unified diff parsing."""

from diffcritic.diff.parser import (
  classify_line,
  count_patch_lines,
  is_hunk_header,
  parse_diff_content,
  parse_file_diff,
)
from diffcritic.models import ChangeKind


class TestHunkHeader:
  def test_matches_full_header(self) -> None:
    assert is_hunk_header("@@ -1,5 +1,6 @@")

  def test_matches_header_with_section_name(self) -> None:
    assert is_hunk_header("@@ -10,2 +11,2 @@ class Greeter:")

  def test_rejects_plain_lines(self) -> None:
    assert not is_hunk_header("+@@ not a header")
    assert not is_hunk_header("@@ malformed @@")


class TestClassifyLine:
  def test_added_and_removed(self) -> None:
    assert classify_line("+x = 1") == ChangeKind.ADD
    assert classify_line("-x = 1") == ChangeKind.REMOVE

  def test_file_markers_are_not_changes(self) -> None:
    assert classify_line("+++ b/test.py") == ChangeKind.CONTEXT
    assert classify_line("--- a/test.py") == ChangeKind.CONTEXT

  def test_no_newline_marker_is_skipped(self) -> None:
    assert classify_line("\\ No newline at end of file") is None

  def test_unprefixed_line_is_context(self) -> None:
    assert classify_line("def hello():") == ChangeKind.CONTEXT


class TestParseDiffContent:
  def test_empty_input(self) -> None:
    assert parse_diff_content("") == []
    assert parse_diff_content(None) == []

  def test_hunks_in_file_order(self, sample_patch: str) -> None:
    hunks = parse_diff_content(sample_patch)

    assert len(hunks) == 2
    assert (hunks[0].original_start, hunks[0].original_length) == (1, 3)
    assert (hunks[0].new_start, hunks[0].new_length) == (1, 4)
    assert (hunks[1].original_start, hunks[1].new_start) == (10, 11)

  def test_header_line_index_is_one_based(self, sample_patch: str) -> None:
    hunks = parse_diff_content(sample_patch)
    assert hunks[0].header_line_index == 1
    assert hunks[1].header_line_index == 6

  def test_changes_keep_source_line_index(self, sample_patch: str) -> None:
    first = parse_diff_content(sample_patch)[0]

    assert [c.kind for c in first.changes] == [
      ChangeKind.CONTEXT,
      ChangeKind.REMOVE,
      ChangeKind.ADD,
      ChangeKind.ADD,
    ]
    assert [c.source_line_index for c in first.changes] == [2, 3, 4, 5]
    assert first.changes[2].text == '    print("hello world")'

  def test_new_header_terminates_previous_hunk(self, sample_patch: str) -> None:
    hunks = parse_diff_content(sample_patch)
    assert len(hunks[0].changes) == 4
    assert len(hunks[1].changes) == 2

  def test_missing_length_means_one(self) -> None:
    hunks = parse_diff_content("@@ -3 +3 @@\n-a\n+b")
    assert hunks[0].original_length == 1
    assert hunks[0].new_length == 1

  def test_text_before_first_header_is_ignored(self, sample_diff: str) -> None:
    hunks = parse_diff_content(sample_diff)

    assert len(hunks) == 1
    assert all("+++" not in c.text for c in hunks[0].changes)

  def test_header_roundtrips_through_property(self) -> None:
    hunk = parse_diff_content("@@ -7,2 +8,3 @@\n+x")[0]
    assert hunk.header == "@@ -7,2 +8,3 @@"


class TestParseFileDiff:
  def test_flattens_added_and_removed(self, sample_patch: str) -> None:
    parsed = parse_file_diff(sample_patch)

    assert len(parsed.added_lines) == 3
    assert len(parsed.removed_lines) == 2
    assert parsed.change_count == 5

  def test_count_patch_lines(self, sample_patch: str) -> None:
    assert count_patch_lines(sample_patch) == (3, 2)
    assert count_patch_lines(None) == (0, 0)
