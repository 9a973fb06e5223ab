"""File logging for the interactive session.

The terminal belongs to the UI while it runs, so log records go to a file
under the platform's user log directory instead of stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "lazyhub"
LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / "lazyhub.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def configure_logging(debug: bool = False, log_path: Path | None = None) -> Path:
    """Route ``lazyhub`` logging to ``log_path`` (INFO, or DEBUG when ``debug``)."""
    path = LOG_PATH if log_path is None else log_path
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(path),
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return path


__all__ = ["LOG_PATH", "configure_logging"]
