"""Flatten downloaded CI log payloads into one text stream."""

from __future__ import annotations

import io
import logging
import zipfile

logger = logging.getLogger(__name__)


def flatten_log_bundle(data: bytes) -> str:
    """Return log text for a raw download.

    Run-level downloads are zip archives with one file per job step; those are
    joined in name order with a ``=== <name> ===`` separator before each entry.
    Anything that does not open as an archive is decoded as UTF-8 plain text
    with replacement characters. An empty archive yields an empty string.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = sorted(info.filename for info in archive.infolist() if not info.is_dir())
            chunks: list[str] = []
            for name in names:
                chunks.append(f"\n=== {name} ===\n")
                chunks.append(archive.read(name).decode("utf-8", errors="replace"))
    except (zipfile.BadZipFile, OSError, KeyError) as exc:
        logger.debug("log payload is not a readable archive (%s); using plain text", exc)
        return data.decode("utf-8", errors="replace")
    return "".join(chunks)


__all__ = ["flatten_log_bundle"]
