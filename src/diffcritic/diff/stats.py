"""Aggregate change statistics for reporting."""

from dataclasses import dataclass, field
from typing import Any, Sequence

from diffcritic.diff.parser import parse_file_diff
from diffcritic.models import ChangedFile, FileStatus


@dataclass
class ChangeStats:
  """File-level counts across a change set."""

  total_files: int = 0
  added_files: int = 0
  modified_files: int = 0
  removed_files: int = 0
  renamed_files: int = 0
  total_additions: int = 0
  total_deletions: int = 0
  file_types: dict[str, int] = field(default_factory=dict)

  def to_dict(self) -> dict[str, Any]:
    return {
      "totalFiles": self.total_files,
      "addedFiles": self.added_files,
      "modifiedFiles": self.modified_files,
      "removedFiles": self.removed_files,
      "renamedFiles": self.renamed_files,
      "totalAdditions": self.total_additions,
      "totalDeletions": self.total_deletions,
      "fileTypes": dict(self.file_types),
    }


@dataclass
class ExtensionChanges:
  added: int = 0
  removed: int = 0
  count: int = 0


@dataclass(frozen=True)
class ModifiedFile:
  filename: str
  status: FileStatus
  changes: int


@dataclass
class ChangeSummary:
  """Line-level counts derived from the patches themselves."""

  total_files: int = 0
  total_changes: int = 0
  added_lines: int = 0
  removed_lines: int = 0
  modified_files: list[ModifiedFile] = field(default_factory=list)
  file_type_changes: dict[str, ExtensionChanges] = field(default_factory=dict)

  def to_dict(self) -> dict[str, Any]:
    return {
      "totalFiles": self.total_files,
      "totalChanges": self.total_changes,
      "addedLines": self.added_lines,
      "removedLines": self.removed_lines,
      "modifiedFiles": [
        {"filename": m.filename, "status": m.status.value, "changes": m.changes}
        for m in self.modified_files
      ],
      "fileTypeChanges": {
        ext: {"added": c.added, "removed": c.removed, "count": c.count}
        for ext, c in self.file_type_changes.items()
      },
    }


_STATUS_COUNTERS = {
  FileStatus.ADDED: "added_files",
  FileStatus.MODIFIED: "modified_files",
  FileStatus.REMOVED: "removed_files",
  FileStatus.RENAMED: "renamed_files",
}


def extract_change_stats(files: Sequence[ChangedFile]) -> ChangeStats:
  """Count files by status and extension and sum reported line stats."""
  stats = ChangeStats(total_files=len(files))
  for f in files:
    attr = _STATUS_COUNTERS[f.status]
    setattr(stats, attr, getattr(stats, attr) + 1)
    stats.total_additions += f.additions
    stats.total_deletions += f.deletions
    stats.file_types[f.extension] = stats.file_types.get(f.extension, 0) + 1
  return stats


def generate_change_summary(files: Sequence[ChangedFile]) -> ChangeSummary:
  """Summarize added and removed lines per file and per extension."""
  summary = ChangeSummary(total_files=len(files))

  for f in files:
    parsed = parse_file_diff(f.patch)
    added = len(parsed.added_lines)
    removed = len(parsed.removed_lines)

    summary.total_changes += added + removed
    summary.added_lines += added
    summary.removed_lines += removed

    if added or removed:
      summary.modified_files.append(ModifiedFile(f.filename, f.status, added + removed))

    bucket = summary.file_type_changes.setdefault(f.extension, ExtensionChanges())
    bucket.added += added
    bucket.removed += removed
    bucket.count += 1

  return summary

