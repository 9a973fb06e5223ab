"""Frame rendering: themes, help overlay, Pygments descriptions and the screen."""

from __future__ import annotations

from .screen import render_frame
from .theme import UITheme, available_theme_names, resolve_theme

__all__ = ["UITheme", "available_theme_names", "render_frame", "resolve_theme"]
