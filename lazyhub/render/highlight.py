"""Pygments colouring for pull-request descriptions.

Descriptions are Markdown; they are highlighted with the ``MarkdownLexer`` and
a 256-colour terminal formatter. Unknown style names fall back to monokai.
Terminal control bytes in the source are neutralized before highlighting so a
hostile description cannot move the cursor or ring the bell.
"""

from __future__ import annotations

import re

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import MarkdownLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_LEXER = MarkdownLexer()
_FORMATTERS: dict[str, Terminal256Formatter] = {}
_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()


def sanitize_terminal_text(source: str) -> str:
    """Drop terminal control bytes (newline and tab excepted)."""
    if _CONTROL_RE.search(source) is None:
        return source
    return _CONTROL_RE.sub("", source)


def normalize_style(style: str | None) -> str:
    if not style:
        return DEFAULT_STYLE
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return DEFAULT_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        return DEFAULT_STYLE
    _VALID_STYLES.add(style)
    return style


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = Terminal256Formatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def highlight_markdown(source: str, style: str | None = DEFAULT_STYLE) -> list[str]:
    """Return ANSI-coloured lines for a Markdown ``source``."""
    text = sanitize_terminal_text(source.replace("\r\n", "\n")).expandtabs(4)
    if not text.strip():
        return []
    rendered = highlight(text, _LEXER, _formatter_for_style(normalize_style(style)))
    return rendered.rstrip("\n").split("\n")


__all__ = ["DEFAULT_STYLE", "highlight_markdown", "normalize_style", "sanitize_terminal_text"]
