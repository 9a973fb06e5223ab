"""Command-line front door for lazyhub.

Parses CLI options, resolves the target repository and the optional PR to
open, configures file logging, then dispatches into the interactive runtime.
"""

from __future__ import annotations

import argparse
import logging
import re
import subprocess
from collections.abc import Callable
from pathlib import Path

from .diagnostics import configure_logging
from .gateway import AuthError
from .render import available_theme_names
from .runtime import run_session
from .runtime.config import FALLBACK_REPO, load_settings

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 5

_REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")
_PR_URL_RE = re.compile(r"^https?://github\.com/([\w.-]+)/([\w.-]+)/pull/(\d+)(?:[/?#].*)?$")
_REMOTE_RES = (
    re.compile(r"^git@github\.com:([\w.-]+)/([\w.-]+?)(?:\.git)?/?$"),
    re.compile(r"^ssh://git@github\.com/([\w.-]+)/([\w.-]+?)(?:\.git)?/?$"),
    re.compile(r"^https?://(?:[^@/]+@)?github\.com/([\w.-]+)/([\w.-]+?)(?:\.git)?/?$"),
)


def _repo_arg(value: str) -> str:
    """argparse type for ``owner/repo`` values."""
    candidate = value.strip()
    if not _REPO_RE.match(candidate):
        raise argparse.ArgumentTypeError(f"invalid repository {value!r}; expected owner/repo")
    return candidate


def parse_pr_arg(value: str) -> tuple[str | None, int]:
    """Parse ``--pr``: a bare number, ``#N`` or a pull-request URL.

    Returns ``(repo, number)`` where ``repo`` is only set for URLs.
    """
    candidate = value.strip().lstrip("#")
    if candidate.isdigit() and int(candidate) > 0:
        return None, int(candidate)
    match = _PR_URL_RE.match(candidate)
    if match is None:
        raise ValueError(f"invalid PR reference {value!r}; expected a number or a pull request URL")
    owner, name, number = match.groups()
    return f"{owner}/{name}", int(number)


def parse_remote_url(url: str) -> str | None:
    """Return ``owner/repo`` for an SSH or HTTPS GitHub remote URL."""
    candidate = url.strip()
    for pattern in _REMOTE_RES:
        match = pattern.match(candidate)
        if match is not None:
            return f"{match.group(1)}/{match.group(2)}"
    return None


def detect_repo(cwd: Path | None = None) -> str | None:
    """Read the ``origin`` remote of the enclosing git checkout, if any."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("git remote lookup failed: %s", exc)
        return None
    if result.returncode != 0:
        return None
    return parse_remote_url(result.stdout)


def resolve_repo(
    cli_repo: str | None,
    pr_repo: str | None,
    default_repo: str | None,
    *,
    detect: Callable[[], str | None] | None = None,
) -> str:
    """Pick the repository: CLI, then ``--pr`` URL, git remote, config, fallback."""
    if cli_repo:
        return cli_repo
    if pr_repo:
        return pr_repo
    detected = (detect or detect_repo)()
    if detected:
        return detected
    return default_repo or FALLBACK_REPO


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyhub",
        description="Browse pull requests and GitHub Actions runs in a terminal UI.",
    )
    parser.add_argument(
        "repo",
        nargs="?",
        type=_repo_arg,
        default=None,
        help="Repository as owner/repo. Defaults to the origin remote of the current checkout.",
    )
    parser.add_argument("--repo", dest="repo_option", type=_repo_arg, default=None, help="Repository as owner/repo.")
    parser.add_argument("--pr", metavar="NUMBER|URL", default=None, help="Open this pull request on startup.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--style", default=None, help="Pygments style name for PR descriptions.")
    parser.add_argument("--debug", action="store_true", help="Write debug-level records to the log file.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch the UI for the resolved repository."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.repo is not None and args.repo_option is not None and args.repo != args.repo_option:
        parser.error("Cannot combine a positional repository with a different --repo.")

    pr_repo: str | None = None
    pr_number: int | None = None
    if args.pr is not None:
        try:
            pr_repo, pr_number = parse_pr_arg(args.pr)
        except ValueError as exc:
            parser.error(str(exc))

    log_path = configure_logging(debug=args.debug)
    settings = load_settings()
    repo = resolve_repo(args.repo or args.repo_option, pr_repo, settings.default_repo)
    logger.info("starting for %s; logging to %s", repo, log_path)

    try:
        run_session(repo, settings, pr_number=pr_number, theme_name=args.theme, style=args.style)
    except AuthError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
