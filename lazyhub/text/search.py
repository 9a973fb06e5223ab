"""Case-insensitive line search over the plain-text log buffer."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


def find_matching_lines(lines: Sequence[str], query: str) -> list[int]:
    """Return indices of ``lines`` containing ``query``, ignoring case."""
    needle = query.casefold()
    if not needle:
        return []
    return [idx for idx, line in enumerate(lines) if needle in line.casefold()]


@dataclass
class LogSearch:
    """Active query, its ordered match list, and a cyclic cursor into it."""

    query: str | None = None
    matches: list[int] = field(default_factory=list)
    index: int = 0

    def apply(self, query: str, lines: Sequence[str]) -> int | None:
        """Recompute matches for ``query``; return the first matched line."""
        self.query = query
        self.matches = find_matching_lines(lines, query)
        self.index = 0
        return self.current_line

    @property
    def current_line(self) -> int | None:
        if not self.matches:
            return None
        return self.matches[self.index]

    def next(self) -> int | None:
        if not self.matches:
            return None
        self.index = (self.index + 1) % len(self.matches)
        return self.matches[self.index]

    def previous(self) -> int | None:
        if not self.matches:
            return None
        n = len(self.matches)
        self.index = (self.index + n - 1) % n
        return self.matches[self.index]

    def clear(self) -> None:
        self.query = None
        self.matches = []
        self.index = 0

    def position_label(self) -> str:
        """``'<query>' (i/n)`` for the status bar, 0/0 when nothing matched."""
        current = self.index + 1 if self.matches else 0
        return f"'{self.query or ''}' ({current}/{len(self.matches)})"


__all__ = ["LogSearch", "find_matching_lines"]
