"""Runtime orchestration: state core, dispatcher, message channel and event loop.

The session entry point (`run_session`) and the loop runner are imported
lazily so importing a submodule never pulls in terminal setup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .loop import RuntimeLoopTiming


def run_session(*args, **kwargs):
    """Lazily import session entrypoint to avoid terminal bootstrap on import."""
    from .app import run_session as _run_session

    return _run_session(*args, **kwargs)


def run_main_loop(*args, **kwargs):
    """Lazily import loop runner to avoid package-import cycles."""
    from .loop import run_main_loop as _run_main_loop

    return _run_main_loop(*args, **kwargs)


def __getattr__(name: str):
    if name == "RuntimeLoopTiming":
        from . import loop as _loop

        return getattr(_loop, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["RuntimeLoopTiming", "run_main_loop", "run_session"]
