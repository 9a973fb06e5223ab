"""Actions delegated to external programs: the ``gh`` CLI and clipboard tools."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys

logger = logging.getLogger(__name__)

HELPER_TIMEOUT_SECONDS = 120


class HelperError(RuntimeError):
    """Raised when an external helper is missing or exits non-zero."""


def _run(cmd: list[str], *, stdin_text: str | None = None) -> None:
    logger.debug("running %s", cmd)
    try:
        result = subprocess.run(
            cmd,
            input=stdin_text,
            capture_output=True,
            text=True,
            timeout=HELPER_TIMEOUT_SECONDS,
            check=False,
        )
    except FileNotFoundError as exc:
        raise HelperError(f"{cmd[0]} is not installed") from exc
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise HelperError(str(exc)) from exc
    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip()
        raise HelperError(detail or f"{cmd[0]} exited with {result.returncode}")


def checkout_pr(repo: str, number: int) -> None:
    _run(["gh", "pr", "checkout", str(number), "--repo", repo])


def open_pr_create(repo: str) -> None:
    _run(["gh", "pr", "create", "--web", "--repo", repo])


def open_pr_in_browser(repo: str, number: int) -> None:
    _run(["gh", "pr", "view", str(number), "--web", "--repo", repo])


def clipboard_command(platform: str = sys.platform) -> list[str] | None:
    """Return the first available clipboard writer for ``platform``."""
    if platform == "darwin":
        candidates = [["pbcopy"]]
    elif platform.startswith("win"):
        candidates = [["clip"]]
    else:
        candidates = [["wl-copy"], ["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]]
    for cmd in candidates:
        if shutil.which(cmd[0]) is not None:
            return cmd
    return None


def copy_to_clipboard(text: str) -> None:
    cmd = clipboard_command()
    if cmd is None:
        raise HelperError("no clipboard tool found (pbcopy, wl-copy, xclip or xsel)")
    _run(cmd, stdin_text=text)


__all__ = [
    "HelperError",
    "checkout_pr",
    "clipboard_command",
    "copy_to_clipboard",
    "open_pr_create",
    "open_pr_in_browser",
]
