"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens:
single printable characters, or names such as ``UP``, ``PAGE_DOWN``,
``SHIFT_TAB``, ``ENTER`` and ``CTRL_C``. An empty string means the timeout
elapsed without input.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_TOKENS = {
    b"\x03": "CTRL_C",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL_TOKENS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"Z": "SHIFT_TAB",
}

_CSI_TILDE_TOKENS = {
    b"1": "HOME",
    b"3": "DELETE",
    b"4": "END",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, lead: bytes) -> bytes:
    """Complete a multi-byte UTF-8 character whose first byte is ``lead``."""
    first = lead[0]
    if first >= 0xF0:
        missing = 3
    elif first >= 0xE0:
        missing = 2
    elif first >= 0xC0:
        missing = 1
    else:
        return lead
    data = lead
    for _ in range(missing):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data


def _read_csi(fd: int) -> str:
    """Decode the remainder of ``ESC [``; modifier parameters are ignored."""
    params = b""
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "ESC"
        if part == b"~" or part.isalpha():
            break
        params += part
        if len(params) > 8:
            return "ESC"
    if part == b"~":
        return _CSI_TILDE_TOKENS.get(params.split(b";")[0], "ESC")
    return _CSI_FINAL_TOKENS.get(part, "ESC")


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    token = _CONTROL_TOKENS.get(ch)
    if token is not None:
        return token

    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch).decode("utf-8", errors="replace")

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        return _CSI_FINAL_TOKENS.get(final, "ESC")
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"
    return _read_csi(fd)


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "read_key"]
