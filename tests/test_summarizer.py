"""Tests for change summarization."""

from diffcritic.chunking import summarize_changes, summarize_with_line_map


def _noisy_patch() -> str:
  lines = ["diff --git a/big.py b/big.py", "--- a/big.py", "+++ b/big.py"]
  for h in range(5):
    lines.append(f"@@ -{h * 400 + 1},300 +{h * 400 + 1},301 @@")
    lines.extend(f" context {h}-{i} " + "c" * 40 for i in range(150))
    lines.append(f"-removed_{h} = True")
    lines.append(f"+added_{h} = False")
    lines.extend(f" trailing {h}-{i} " + "t" * 40 for i in range(150))
  return "\n".join(lines)


class TestSummarizeChanges:
  def test_short_text_unchanged(self) -> None:
    assert summarize_changes("@@ -1 +1 @@\n-a\n+b", limit=100) == "@@ -1 +1 @@\n-a\n+b"

  def test_keeps_every_change_line(self) -> None:
    text = _noisy_patch()
    assert len(text) > 10_000

    summary = summarize_changes(text)

    for h in range(5):
      assert f"-removed_{h} = True" in summary
      assert f"+added_{h} = False" in summary
    assert len(summary) < len(text)

  def test_keeps_header_and_markers(self) -> None:
    summary = summarize_changes(_noisy_patch())

    assert summary.startswith("diff --git a/big.py b/big.py")
    assert "@@ -1,300 +1,301 @@" in summary

  def test_drops_context_far_from_changes(self) -> None:
    summary = summarize_changes(_noisy_patch())

    assert "context 0-10 " not in summary
    assert "trailing 0-2 " in summary
    assert "trailing 0-100 " not in summary

  def test_appends_notice(self) -> None:
    summary = summarize_changes(_noisy_patch())

    assert "...content summarized by importance..." in summary
    assert "Original change had 1518 lines" in summary

  def test_text_without_markers_keeps_edges(self) -> None:
    text = "a" * 6000 + "b" * 6000
    summary = summarize_changes(text)

    assert summary.startswith("a" * 4500)
    assert summary.endswith("b" * 4500)
    assert "[3000 characters omitted from the middle]" in summary

  def test_small_limit_shrinks_edges(self) -> None:
    text = "a" * 3000 + "b" * 3000
    summary = summarize_changes(text, limit=5000)

    assert len(summary) <= 5000
    assert summary.startswith("a" * 2468)
    assert "[1064 characters omitted from the middle]" in summary

  def test_small_limit_caps_important_lines(self) -> None:
    summary = summarize_changes(_noisy_patch(), limit=1000)

    assert "+added_0 = False" in summary
    assert "+added_4 = False" not in summary


class TestLineMap:
  def test_unchanged_text_maps_to_itself(self) -> None:
    summary = summarize_with_line_map("@@ -1 +1 @@\n-a\n+b", limit=100)
    assert summary.original_line(3) == 3

  def test_kept_lines_map_to_their_source(self) -> None:
    text = _noisy_patch()
    original = text.split("\n")
    summary = summarize_with_line_map(text)
    kept = summary.text.split("\n")

    for h in (0, 4):
      at = kept.index(f"+added_{h} = False") + 1
      assert original[summary.original_line(at) - 1] == f"+added_{h} = False"
    assert summary.original_line(1) == 1

  def test_notice_lines_map_to_last_kept_line(self) -> None:
    summary = summarize_with_line_map(_noisy_patch())
    kept = summary.text.split("\n")

    last = summary.original_line(len(kept) - 3)
    assert summary.original_line(len(kept)) == last
    assert summary.original_line(len(kept) + 50) == last

  def test_edges_map_tail_to_original_lines(self) -> None:
    text = "\n".join(f"row {i:04d} " + "r" * 40 for i in range(400))
    original = text.split("\n")
    summary = summarize_with_line_map(text)
    kept = summary.text.split("\n")

    assert summary.original_line(2) == 2
    assert original[summary.original_line(len(kept)) - 1] == kept[-1]
    assert original[summary.original_line(len(kept) - 1) - 1] == kept[-2]
