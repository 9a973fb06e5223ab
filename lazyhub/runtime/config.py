"""Read-only JSON settings file.

All access is defensive: a missing, unreadable or malformed file, or a value
of the wrong type, falls back to the built-in default for that key.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .loop import DEFAULT_TICK_MS
from .status import DEFAULT_NOTIFICATION_SECONDS

logger = logging.getLogger(__name__)

APP_NAME = "lazyhub"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
FALLBACK_REPO = "shopsys/shopsys"


@dataclass(frozen=True)
class Settings:
    tick_ms: int = DEFAULT_TICK_MS
    notification_seconds: float = DEFAULT_NOTIFICATION_SECONDS
    default_repo: str = FALLBACK_REPO
    theme: str | None = None
    style: str | None = None


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _positive_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _positive_float(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return default
    return float(value)


def _name(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _repo(value: object) -> str | None:
    name = _name(value)
    if name is None or name.count("/") != 1 or name.startswith("/") or name.endswith("/"):
        return None
    return name


def load_settings(path: Path | None = None) -> Settings:
    data = load_config(path)
    return Settings(
        tick_ms=_positive_int(data.get("tick_ms"), DEFAULT_TICK_MS),
        notification_seconds=_positive_float(data.get("notification_seconds"), DEFAULT_NOTIFICATION_SECONDS),
        default_repo=_repo(data.get("default_repo")) or FALLBACK_REPO,
        theme=_name(data.get("theme")),
        style=_name(data.get("style")),
    )


__all__ = ["CONFIG_PATH", "FALLBACK_REPO", "Settings", "load_config", "load_settings"]
