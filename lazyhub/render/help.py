"""Help overlay content and rendering.

Rendering helpers here are presentation-only and side-effect free.
"""

from __future__ import annotations

from ..text.ansi import display_width, pad_ansi_line
from .theme import UITheme, paint

HELP_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Global Keys",
        (
            ("Tab", "Next tab / Shift+Tab: previous tab"),
            ("1/2/3", "Jump to tab (PRs/Actions/Logs)"),
            ("r", "Refresh current view"),
            ("Esc", "Dismiss error"),
            ("?", "Toggle help"),
            ("q", "Quit"),
        ),
    ),
    (
        "PRs Tab",
        (
            ("j/k", "Navigate list / scroll diff"),
            ("h/l", "Switch between list, detail and CI panels"),
            ("Enter", "View PR details / jobs of a CI check"),
            ("d", "View full diff"),
            ("v", "Approve PR"),
            ("x", "Request changes"),
            ("c", "Add comment"),
            ("m", "Merge PR (squash)"),
            ("C", "Checkout PR branch"),
            ("y", "Copy branch name to clipboard"),
            ("Y", "Copy checkout command to clipboard"),
            ("u", "Copy PR URL to clipboard"),
            ("f", "Cycle filter (All/Mine/Review)"),
            ("n", "Create new PR (opens browser)"),
            ("o", "Cycle focus: List -> Detail -> CI Checks"),
            ("R", "Rerun selected CI check (in CI panel)"),
            ("L", "View jobs for CI check (in CI panel)"),
            ("e", "Edit PR title"),
            ("a", "Add reviewer"),
            ("b", "Add label"),
            ("w", "Open PR in browser"),
            ("p", "Toggle commit view (full diff / per-commit)"),
            ("[/]", "Previous/next commit (in commit view)"),
        ),
    ),
    (
        "Actions Tab",
        (
            ("j/k", "Navigate runs/jobs"),
            ("Enter", "View jobs for run"),
            ("L", "View logs"),
            ("R", "Rerun workflow"),
            ("Esc", "Back to runs"),
        ),
    ),
    (
        "Logs Tab",
        (
            ("j/k", "Scroll up/down"),
            ("h/l", "Scroll left/right"),
            ("PgUp/PgDn", "Scroll a page"),
            ("g/G", "Go to top/bottom"),
            ("0", "Scroll to line start"),
            ("/", "Search"),
            ("n/N", "Next/previous match"),
            ("Esc", "Return to Actions"),
        ),
    ),
)

KEY_COLUMN_WIDTH = 11


def help_lines(theme: UITheme) -> list[str]:
    lines: list[str] = []
    for heading, entries in HELP_SECTIONS:
        if lines:
            lines.append("")
        lines.append(paint(theme.help_heading, heading, theme.reset))
        for key, description in entries:
            lines.append("  " + paint(theme.help_key, key.ljust(KEY_COLUMN_WIDTH), theme.reset) + description)
    lines.append("")
    lines.append(paint(theme.dim, "Press ? or Esc to close", theme.reset))
    return lines


def render_help_box(theme: UITheme, width: int, height: int) -> list[str]:
    """Return ``height`` rows with a bordered help box centred in ``width`` columns.

    When the content is taller than the box it is cut at the bottom, keeping
    the closing hint visible as the last row.
    """
    body = help_lines(theme)
    inner_width = min(max(display_width(line) for line in body) + 2, max(1, width - 4))
    inner_rows = max(1, height - 2)
    if len(body) > inner_rows:
        body = body[: inner_rows - 1] + body[-1:]
    left_pad = " " * max(0, (width - inner_width - 2) // 2)
    top_pad = max(0, (height - len(body) - 2) // 2)

    border = theme.help_border
    rows = [""] * top_pad
    rows.append(left_pad + paint(border, "┌ Help " + "─" * max(0, inner_width - 6) + "┐", theme.reset))
    for line in body:
        content = pad_ansi_line(" " + line, inner_width)
        if theme.reset and "\033" in content:
            content += theme.reset
        rows.append(left_pad + paint(border, "│", theme.reset) + content + paint(border, "│", theme.reset))
    rows.append(left_pad + paint(border, "└" + "─" * inner_width + "┘", theme.reset))
    rows.extend([""] * max(0, height - len(rows)))
    return rows[:height]


__all__ = ["HELP_SECTIONS", "help_lines", "render_help_box"]
