"""Re-segment unified diffs into per-file blocks with semantic line tags.

The per-file ``diff --git`` marker and its ``index``/``---``/``+++`` preamble
are replaced by a three-line header (rule, filename, rule). The renderer maps
each :class:`DiffTag` to a style and slices the parsed output for scrolling.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

FILE_MARKER = "diff --git "
RULE_WIDTH = 60
RULE_TEXT = "─" * RULE_WIDTH
_ELIDED_HEADER_PREFIXES = ("index ", "--- ", "+++ ")


class DiffTag(Enum):
    RULE = "rule"
    FILENAME = "filename"
    ADDED = "added"
    REMOVED = "removed"
    HUNK = "hunk"
    CONTEXT = "context"
    BLANK = "blank"


@dataclass(frozen=True)
class DiffLine:
    tag: DiffTag
    text: str


def marker_path(line: str) -> str | None:
    """Extract ``<path>`` from ``diff --git a/<path> b/<path>``."""
    parts = line.split()
    if len(parts) < 4:
        return None
    b_path = parts[3]
    return b_path[2:] if b_path.startswith("b/") else b_path


def _is_elided_header_line(line: str) -> bool:
    return line.startswith(_ELIDED_HEADER_PREFIXES) or line in {"---", "+++"}


def classify_line(line: str) -> DiffTag:
    if line.startswith("@@"):
        return DiffTag.HUNK
    if line.startswith("+"):
        return DiffTag.ADDED
    if line.startswith("-"):
        return DiffTag.REMOVED
    return DiffTag.CONTEXT


def segment_diff(text: str) -> list[DiffLine]:
    """Parse ``text`` once into tagged display lines.

    Preamble lines are only elided between a file marker and that file's
    first hunk, so a removed line that happens to start with ``---`` inside a
    hunk is kept.
    """
    out: list[DiffLine] = []
    files_seen = 0
    in_file_header = False
    for line in text.splitlines():
        if line.startswith(FILE_MARKER):
            path = marker_path(line)
            if path is not None:
                if files_seen:
                    out.append(DiffLine(DiffTag.BLANK, ""))
                out.append(DiffLine(DiffTag.RULE, RULE_TEXT))
                out.append(DiffLine(DiffTag.FILENAME, f">> {path}"))
                out.append(DiffLine(DiffTag.RULE, RULE_TEXT))
                files_seen += 1
                in_file_header = True
                continue
        if in_file_header:
            if _is_elided_header_line(line):
                continue
            if line.startswith("@@"):
                in_file_header = False
        out.append(DiffLine(classify_line(line), line))
    return out


def diff_window(lines: list[DiffLine], offset: int, height: int) -> list[DiffLine]:
    """Return the visible slice ``[offset, offset + height)`` without re-parsing."""
    offset = max(0, offset)
    return lines[offset : offset + max(0, height)]


def file_header_count(lines: list[DiffLine]) -> int:
    return sum(1 for line in lines if line.tag is DiffTag.FILENAME)


__all__ = [
    "DiffLine",
    "DiffTag",
    "classify_line",
    "diff_window",
    "file_header_count",
    "marker_path",
    "segment_diff",
]
