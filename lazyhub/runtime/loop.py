"""Main interactive event loop for the terminal UI.

Each iteration drains background results, expires the status notification,
tracks the terminal size, redraws when anything changed, then waits at most
one tick for a key. The tick guarantees finished fetches show up promptly
even while the user is idle.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from .core import StateCore
from .keys import KeyHandler
from .state import AppState
from .terminal import TerminalController

logger = logging.getLogger(__name__)

DEFAULT_TICK_MS = 100


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    tick_ms: int = DEFAULT_TICK_MS


RenderFrame = Callable[[AppState, int, int], str]


def run_main_loop(
    core: StateCore,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
    render_frame: RenderFrame,
    *,
    read_key_fn: Callable[..., str] = read_key,
) -> None:
    """Run the interactive loop until a quit action sets ``should_quit``."""
    state = core.state
    keys = KeyHandler(core)
    dirty = True

    with terminal.raw_mode():
        while not state.should_quit:
            if core.drain_messages():
                dirty = True
            if core.expire_status():
                dirty = True
            columns, rows = terminal.size()
            if core.resize(columns, rows):
                dirty = True

            if dirty:
                width, height = state.viewport
                terminal.write_frame(render_frame(state, width, height))
                dirty = False

            try:
                key = read_key_fn(stdin_fd, timeout_ms=timing.tick_ms)
            except KeyboardInterrupt:
                key = "CTRL_C"
            if key == "":
                continue
            keys.handle(key)
            dirty = True


__all__ = ["DEFAULT_TICK_MS", "RenderFrame", "RuntimeLoopTiming", "run_main_loop"]
