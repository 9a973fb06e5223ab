"""Process-lifetime cache for remote artifacts that never change once created.

Only two artifact kinds qualify: a commit's diff and a completed job's log.
Entries are written once and never evicted. Mutable resources (pull-request
diffs, run lists, reviews) must not be routed through here.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable
from enum import Enum

logger = logging.getLogger(__name__)


class ArtifactKind(Enum):
    COMMIT_DIFF = "commit-diff"
    JOB_LOG = "job-log"


class ArtifactCache:
    """Thread-safe read-through map of ``(kind, key) -> text``.

    The lock guards the dict only and is never held while ``fetch_fn`` runs,
    so concurrent misses for one key may both reach the gateway. The first
    insert wins; the value is identical for immutable artifacts anyway.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[tuple[ArtifactKind, Hashable], str] = {}

    def get(self, kind: ArtifactKind, key: Hashable) -> str | None:
        with self._lock:
            return self._entries.get((kind, key))

    def get_or_fetch(self, kind: ArtifactKind, key: Hashable, fetch_fn: Callable[[], str]) -> str:
        """Return the cached artifact, calling ``fetch_fn`` only on a miss.

        Exceptions from ``fetch_fn`` propagate and leave the cache untouched.
        """
        cached = self.get(kind, key)
        if cached is not None:
            logger.debug("cache hit %s %s", kind.value, key)
            return cached

        logger.debug("cache miss %s %s", kind.value, key)
        value = fetch_fn()
        with self._lock:
            return self._entries.setdefault((kind, key), value)

    def __contains__(self, item: tuple[ArtifactKind, Hashable]) -> bool:
        with self._lock:
            return item in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["ArtifactCache", "ArtifactKind"]
