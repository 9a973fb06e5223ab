"""Colour palettes for the PR and Actions screens.

Themes are UI-only ANSI palettes (chrome, lists, diff and log styling). The
Pygments style used for PR descriptions remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Escape codes for every styled element of a frame (tabs, panes, diff, logs, help)."""

    name: str
    divider: str
    reverse: str
    reset: str
    bold: str
    dim: str
    tab_active: str
    tab_inactive: str
    pane_title: str
    pane_title_focused: str
    selected: str
    pr_open: str
    pr_draft: str
    pr_closed: str
    pr_merged: str
    ok: str
    failed: str
    running: str
    diff_added: str
    diff_removed: str
    diff_hunk: str
    diff_rule: str
    diff_filename: str
    search_hit: str
    search_current: str
    error: str
    message: str
    loading: str
    help_heading: str
    help_key: str
    help_border: str


DEFAULT_THEME = UITheme(
    name="default",
    divider="\033[2m",
    reverse="\033[7m",
    reset="\033[0m",
    bold="\033[1m",
    dim="\033[2;38;5;250m",
    tab_active="\033[1;7;38;5;81m",
    tab_inactive="\033[38;5;250m",
    pane_title="\033[38;5;250m",
    pane_title_focused="\033[1;38;5;81m",
    selected="\033[7m",
    pr_open="\033[38;5;42m",
    pr_draft="\033[38;5;245m",
    pr_closed="\033[38;5;203m",
    pr_merged="\033[38;5;141m",
    ok="\033[38;5;42m",
    failed="\033[38;5;203m",
    running="\033[38;5;214m",
    diff_added="\033[38;5;42m",
    diff_removed="\033[38;5;203m",
    diff_hunk="\033[38;5;44m",
    diff_rule="\033[2;38;5;244m",
    diff_filename="\033[1;38;5;229m",
    search_hit="\033[48;5;58m",
    search_current="\033[30;48;5;214m",
    error="\033[1;38;5;203m",
    message="\033[38;5;229m",
    loading="\033[1;38;5;42m",
    help_heading="\033[1;38;5;81m",
    help_key="\033[38;5;229m",
    help_border="\033[38;5;45m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    divider="\033[2;38;5;31m",
    reverse="\033[7m",
    reset="\033[0m",
    bold="\033[1m",
    dim="\033[2;38;5;110m",
    tab_active="\033[1;7;38;5;45m",
    tab_inactive="\033[38;5;110m",
    pane_title="\033[38;5;110m",
    pane_title_focused="\033[1;38;5;45m",
    selected="\033[7m",
    pr_open="\033[38;5;84m",
    pr_draft="\033[38;5;244m",
    pr_closed="\033[38;5;209m",
    pr_merged="\033[38;5;147m",
    ok="\033[38;5;84m",
    failed="\033[38;5;209m",
    running="\033[38;5;215m",
    diff_added="\033[38;5;84m",
    diff_removed="\033[38;5;209m",
    diff_hunk="\033[38;5;39m",
    diff_rule="\033[2;38;5;31m",
    diff_filename="\033[1;38;5;153m",
    search_hit="\033[48;5;24m",
    search_current="\033[30;48;5;45m",
    error="\033[1;38;5;209m",
    message="\033[38;5;153m",
    loading="\033[1;38;5;45m",
    help_heading="\033[1;38;5;45m",
    help_key="\033[38;5;153m",
    help_border="\033[38;5;39m",
)

PLAIN_THEME = UITheme(
    name="plain",
    divider="",
    reverse="",
    reset="",
    bold="",
    dim="",
    tab_active="",
    tab_inactive="",
    pane_title="",
    pane_title_focused="",
    selected="",
    pr_open="",
    pr_draft="",
    pr_closed="",
    pr_merged="",
    ok="",
    failed="",
    running="",
    diff_added="",
    diff_removed="",
    diff_hunk="",
    diff_rule="",
    diff_filename="",
    search_hit="",
    search_current="",
    error="",
    message="",
    loading="",
    help_heading="",
    help_key="",
    help_border="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
    PLAIN_THEME.name: PLAIN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Map a user-supplied theme name onto a known palette name."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None) -> UITheme:
    return _THEMES[normalize_theme_name(name)]


def paint(theme_code: str, text: str, reset: str) -> str:
    """Wrap ``text`` in ``theme_code`` ... ``reset`` unless the code is empty."""
    if not theme_code:
        return text
    return f"{theme_code}{text}{reset}"


__all__ = [
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "UITheme",
    "available_theme_names",
    "normalize_theme_name",
    "paint",
    "resolve_theme",
]
