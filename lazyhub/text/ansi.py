"""ANSI-aware text helpers.

``strip_ansi`` turns raw CI log lines into plain text before search and
display. The clip/slice helpers measure and cut already-styled rows for the
renderer without counting escape sequences toward width.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
ESC = "\x1b"
TAB_SPACES = "    "


def strip_ansi(line: str) -> str:
    """Remove CSI escape sequences and control characters from ``line``.

    An ``ESC [`` sequence is skipped up to and including its first ASCII
    letter; a dangling sequence consumes the rest of the input. Tabs become
    four spaces, newlines survive, every other ASCII control is dropped.
    """
    out: list[str] = []
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        i += 1
        if ch == ESC:
            if i < n and line[i] == "[":
                i += 1
                while i < n:
                    terminator = line[i]
                    i += 1
                    if terminator.isascii() and terminator.isalpha():
                        break
            continue
        if ch == "\t":
            out.append(TAB_SPACES)
            continue
        if ch != "\n" and (ord(ch) < 0x20 or ord(ch) == 0x7F):
            continue
        out.append(ch)
    return "".join(out)


def char_display_width(ch: str) -> int:
    """Return terminal columns used by ``ch`` (wide glyphs take two)."""
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    plain = ANSI_ESCAPE_RE.sub("", text)
    return sum(char_display_width(ch) for ch in plain)


def slice_ansi_line(text: str, start_cols: int, max_cols: int) -> str:
    """Cut a window of ``max_cols`` display columns out of a styled line.

    The slice starts ``start_cols`` display columns in and spans at most
    ``max_cols`` columns. Escape sequences are kept; the latest SGR sequence
    seen before the viewport is replayed so visible text keeps its style.
    """
    if max_cols <= 0 or not text:
        return ""
    start_cols = max(0, start_cols)

    out: list[str] = []
    col = 0
    shown = 0
    i = 0
    n = len(text)
    pending_sgr = ""
    while i < n and shown < max_cols:
        if text[i] == ESC:
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                seq = match.group(0)
                if col >= start_cols:
                    if pending_sgr and not seq.endswith("m"):
                        out.append(pending_sgr)
                    pending_sgr = ""
                    out.append(seq)
                elif seq.endswith("m"):
                    pending_sgr = seq
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch)
        i += 1
        if col + w <= start_cols:
            col += w
            continue
        if pending_sgr:
            out.append(pending_sgr)
            pending_sgr = ""
        if shown + w > max_cols:
            break
        out.append(ch)
        shown += w
        col += w
    return "".join(out)


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns."""
    return slice_ansi_line(text, 0, max_cols)


def pad_ansi_line(text: str, width: int) -> str:
    """Clip ``text`` to ``width`` columns and pad the remainder with spaces."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))


__all__ = [
    "ANSI_ESCAPE_RE",
    "char_display_width",
    "clip_ansi_line",
    "display_width",
    "pad_ansi_line",
    "slice_ansi_line",
    "strip_ansi",
]
