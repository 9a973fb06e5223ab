"""Text pipeline: ANSI stripping, diff segmentation, and log search."""

from __future__ import annotations

from .ansi import strip_ansi
from .diff import DiffLine, DiffTag, diff_window, segment_diff
from .search import LogSearch, find_matching_lines

__all__ = [
    "DiffLine",
    "DiffTag",
    "LogSearch",
    "diff_window",
    "find_matching_lines",
    "segment_diff",
    "strip_ansi",
]
