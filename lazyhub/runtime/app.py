"""Session bootstrap for the interactive terminal UI.

Builds the gateway, cache, message channel, dispatcher and state core for
one repository, then hands control to the main loop until the user quits.
"""

from __future__ import annotations

import logging
import os
import sys
from functools import partial

from ..cache import ArtifactCache
from ..gateway import GitHubGateway, resolve_token
from ..render import render_frame, resolve_theme
from .channel import MessageChannel
from .config import Settings
from .core import StateCore
from .dispatcher import TaskDispatcher
from .loop import RuntimeLoopTiming, run_main_loop
from .state import AppState
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def split_repo(repo: str) -> tuple[str, str]:
    """Split ``owner/name`` into its two parts."""
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Invalid repository {repo!r}; expected owner/repo")
    return owner, name


def build_core(
    repo: str,
    gateway: GitHubGateway,
    settings: Settings,
    *,
    pending_pr_number: int | None = None,
) -> StateCore:
    """Wire the state core and its collaborators for ``repo``."""
    owner, name = split_repo(repo)
    channel = MessageChannel()
    dispatcher = TaskDispatcher(gateway, ArtifactCache(), channel, owner, name)
    state = AppState(
        repo=repo,
        owner=owner,
        repo_name=name,
        pending_pr_number=pending_pr_number,
    )
    return StateCore(
        state,
        dispatcher,
        channel,
        notification_seconds=settings.notification_seconds,
    )


def run_session(
    repo: str,
    settings: Settings,
    *,
    pr_number: int | None = None,
    theme_name: str | None = None,
    style: str | None = None,
) -> None:
    """Run the UI for ``repo`` until quit; token lookup errors propagate."""
    if not os.isatty(sys.stdin.fileno()) or not os.isatty(sys.stdout.fileno()):
        raise SystemExit("lazyhub needs an interactive terminal.")

    gateway = GitHubGateway(resolve_token())
    core = build_core(repo, gateway, settings, pending_pr_number=pr_number)
    logger.info("session started for %s (pr=%s)", repo, pr_number)
    core.start()

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    frame = partial(
        render_frame,
        theme=resolve_theme(theme_name or settings.theme),
        style=style or settings.style,
    )
    run_main_loop(
        core,
        terminal,
        stdin_fd,
        RuntimeLoopTiming(tick_ms=settings.tick_ms),
        frame,
    )
    logger.info("session ended")


__all__ = ["build_core", "run_session", "split_repo"]
