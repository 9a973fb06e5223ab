"""Unbounded multi-producer channel from background tasks to the state loop."""

from __future__ import annotations

from queue import Empty, Queue

from .messages import AsyncMessage


class MessageChannel:
    """Thin ``Queue`` wrapper: ``send`` never blocks, ``drain`` never waits."""

    def __init__(self) -> None:
        self._queue: Queue[AsyncMessage] = Queue()

    def send(self, message: AsyncMessage) -> None:
        self._queue.put(message)

    def drain(self) -> list[AsyncMessage]:
        """Return every queued message in send order; empty list when idle."""
        out: list[AsyncMessage] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except Empty:
                break
        return out


__all__ = ["MessageChannel"]
