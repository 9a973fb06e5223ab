"""Access-token discovery.

Lookup order: environment variables, dotenv files in the working directory,
the ``gh`` credential helper, then the helper's ``hosts.yml`` file.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path

import yaml
from dotenv import dotenv_values

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS: tuple[str, ...] = ("GITHUB_TOKEN", "GH_TOKEN")
DOTENV_FILENAMES: tuple[str, ...] = (".env.local", ".env")
GH_HOSTS_PATH = Path.home() / ".config" / "gh" / "hosts.yml"
GH_HOST = "github.com"
GH_TIMEOUT_SECONDS = 5


class AuthError(RuntimeError):
    """Raised when no usable access token can be found."""


def token_from_env(env: Mapping[str, str]) -> str | None:
    for name in TOKEN_ENV_VARS:
        value = env.get(name, "").strip()
        if value:
            return value
    return None


def token_from_dotenv(directory: Path) -> str | None:
    for filename in DOTENV_FILENAMES:
        path = directory / filename
        if not path.is_file():
            continue
        values = dotenv_values(path)
        for name in TOKEN_ENV_VARS:
            value = (values.get(name) or "").strip()
            if value:
                logger.debug("token loaded from %s", path)
                return value
    return None


def token_from_gh_cli() -> str | None:
    if shutil.which("gh") is None:
        return None
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=GH_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("gh auth token failed: %s", exc)
        return None
    token = result.stdout.strip()
    return token if result.returncode == 0 and token else None


def token_from_gh_hosts(path: Path = GH_HOSTS_PATH) -> str | None:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return None
    host = data.get(GH_HOST) if isinstance(data, dict) else None
    token = host.get("oauth_token") if isinstance(host, dict) else None
    return token.strip() if isinstance(token, str) and token.strip() else None


def resolve_token(
    env: Mapping[str, str] | None = None,
    directory: Path | None = None,
    hosts_path: Path = GH_HOSTS_PATH,
) -> str:
    """Return the first token found, or raise :class:`AuthError`."""
    token = (
        token_from_env(os.environ if env is None else env)
        or token_from_dotenv(Path.cwd() if directory is None else directory)
        or token_from_gh_cli()
        or token_from_gh_hosts(hosts_path)
    )
    if token is None:
        raise AuthError("No GitHub token found. Set GITHUB_TOKEN or log in with `gh auth login`.")
    return token


__all__ = ["AuthError", "resolve_token"]
