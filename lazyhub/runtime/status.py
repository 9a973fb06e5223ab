"""Transient and persistent footer status text."""

from __future__ import annotations

import time
from dataclasses import dataclass

DEFAULT_NOTIFICATION_SECONDS = 3.0


@dataclass(frozen=True)
class StatusMessage:
    """A notification (auto-expiring) or a prompt (kept until replaced).

    ``expires_at`` is a ``time.monotonic()`` instant; prompts carry ``None``.
    """

    text: str
    expires_at: float | None = None

    @classmethod
    def notification(
        cls,
        text: str,
        duration: float = DEFAULT_NOTIFICATION_SECONDS,
        now: float | None = None,
    ) -> StatusMessage:
        start = time.monotonic() if now is None else now
        return cls(text=text, expires_at=start + duration)

    @classmethod
    def prompt(cls, text: str) -> StatusMessage:
        return cls(text=text, expires_at=None)

    @property
    def is_prompt(self) -> bool:
        return self.expires_at is None

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        current = time.monotonic() if now is None else now
        return current >= self.expires_at


__all__ = ["DEFAULT_NOTIFICATION_SECONDS", "StatusMessage"]
