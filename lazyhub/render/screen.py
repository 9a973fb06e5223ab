"""Full-frame rendering of :class:`AppState` into one ANSI string.

``render_frame`` is pure: it reads state, never mutates it, and returns the
rows joined with ``\\r\\n`` (the terminal is in raw mode). Every row is
clipped and padded to exactly ``width`` display columns.

Layout, top to bottom: header (tabs and repository), a divider, the tab
content, a divider carrying the loading banner, and the footer line (error,
then status message, then context hints). The help box replaces the tab
content; an open input overlay takes the last content row.
"""

from __future__ import annotations

from ..models import Job, PullRequest, WorkflowRun
from ..runtime.navigation import DiffMode, Focus, Tab, View
from ..runtime.state import AppState
from ..text.ansi import ANSI_ESCAPE_RE, display_width, pad_ansi_line, slice_ansi_line
from ..text.diff import DiffLine, DiffTag, diff_window
from .help import render_help_box
from .highlight import DEFAULT_STYLE, highlight_markdown
from .theme import DEFAULT_THEME, UITheme, paint

HEADER_ROWS = 2
FOOTER_ROWS = 2
LIST_PANE_PERCENT = 40
DESCRIPTION_MAX_ROWS = 8
CHECKS_MAX_ROWS = 8
DIVIDER = "│"
RULE = "─"

TAB_TITLES = ((Tab.PRS, "[1] PRs"), (Tab.ACTIONS, "[2] Actions"), (Tab.LOGS, "[3] Logs"))


def _fit(text: str, width: int, theme: UITheme) -> str:
    row = pad_ansi_line(text, width)
    if theme.reset and "\033" in row:
        row += theme.reset
    return row


def _block(lines: list[str], width: int, rows: int, theme: UITheme) -> list[str]:
    """Clip/pad ``lines`` into exactly ``rows`` rows of ``width`` columns."""
    out = [_fit(line, width, theme) for line in lines[:rows]]
    out.extend(" " * width for _ in range(rows - len(out)))
    return out


def _side_by_side(left: list[str], right: list[str], theme: UITheme) -> list[str]:
    divider = paint(theme.divider, DIVIDER, theme.reset)
    return [f"{lhs}{divider}{rhs}" for lhs, rhs in zip(left, right)]


def _split_width(width: int) -> tuple[int, int]:
    left = max(1, (width * LIST_PANE_PERCENT) // 100)
    right = max(1, width - left - 1)
    return left, right


def _window_start(selected: int | None, count: int, rows: int) -> int:
    """First visible index that keeps ``selected`` inside a ``rows``-tall window."""
    if selected is None or rows <= 0 or selected < rows:
        return 0
    return min(selected - rows + 1, max(0, count - rows))


def _title(text: str, focused: bool, theme: UITheme) -> str:
    return paint(theme.pane_title_focused if focused else theme.pane_title, text, theme.reset)


def _list_rows(
    items: list[str],
    selected: int | None,
    rows: int,
    highlight: bool,
    theme: UITheme,
    width: int,
) -> list[str]:
    start = _window_start(selected, len(items), rows)
    out: list[str] = []
    for idx in range(start, min(len(items), start + rows)):
        line = items[idx]
        if idx == selected and highlight and theme.selected:
            plain = ANSI_ESCAPE_RE.sub("", line)
            line = paint(theme.selected, plain + " " * max(0, width - display_width(plain)), theme.reset)
        elif idx == selected:
            line = "> " + line
        out.append(line)
    return out


def _run_color(status: str, conclusion: str | None, theme: UITheme) -> str:
    if conclusion == "success":
        return theme.ok
    if conclusion == "failure":
        return theme.failed
    if status in {"in_progress", "queued"}:
        return theme.running
    return theme.dim


def _pr_color(pr: PullRequest, theme: UITheme) -> str:
    if pr.merged:
        return theme.pr_merged
    if pr.state == "closed":
        return theme.pr_closed
    if pr.draft:
        return theme.pr_draft
    return theme.pr_open


def _diff_line(line: DiffLine, theme: UITheme) -> str:
    code = {
        DiffTag.RULE: theme.diff_rule,
        DiffTag.FILENAME: theme.diff_filename,
        DiffTag.ADDED: theme.diff_added,
        DiffTag.REMOVED: theme.diff_removed,
        DiffTag.HUNK: theme.diff_hunk,
    }.get(line.tag, "")
    return paint(code, line.text.expandtabs(4), theme.reset)


# Header and footer.


def render_header(state: AppState, width: int, theme: UITheme) -> list[str]:
    parts = []
    for tab, title in TAB_TITLES:
        code = theme.tab_active if state.nav.tab is tab else theme.tab_inactive
        if not code and state.nav.tab is tab:
            title = f"*{title}*"
        parts.append(paint(code, f" {title} ", theme.reset))
    left = paint(theme.bold, " lazyhub ", theme.reset) + " ".join(parts)
    right = paint(theme.dim, state.repo + " ", theme.reset)
    gap = width - display_width(left) - display_width(right)
    line = left + " " * gap + right if gap >= 1 else left
    return [_fit(line, width, theme), _fit(paint(theme.divider, RULE * width, theme.reset), width, theme)]


def footer_hints(state: AppState) -> str:
    nav = state.nav
    if nav.tab is Tab.PRS:
        if nav.view is View.DIFF:
            return "j/k:scroll  PgUp/PgDn:fast  p:mode  [/]:commit  Esc:back  ?:help  q:quit"
        if nav.focus is Focus.LIST:
            if state.selected_pr is not None:
                return "j/k:nav  Enter:detail  o:focus  f:filter  n:new PR  r:refresh  ?:help  q:quit"
            return "j/k:nav  Enter:detail  f:filter  n:new PR  r:refresh  ?:help  q:quit"
        if nav.focus is Focus.DETAIL:
            if nav.diff_mode is DiffMode.BY_COMMIT:
                return "j/k:scroll  [/]:prev/next commit  p:full diff  v:approve  m:merge  ?:help"
            return "j/k:scroll  p:commits  v:approve  m:merge  e:title  a:reviewer  b:label  d:diff  ?:help"
        return "j/k:nav  Enter/L:jobs  R:rerun  o:focus  ?:help  q:quit"
    if nav.tab is Tab.ACTIONS:
        if nav.view is View.JOBS:
            return "j/k:nav  Enter/L:logs  R:rerun  Esc:back  ?:help  q:quit"
        return "j/k:nav  Enter:jobs  R:rerun  r:refresh  ?:help  q:quit"
    return "j/k:scroll  h/l:pan  g/G:top/bottom  /:search  n/N:match  Esc:back  ?:help  q:quit"


def render_footer(state: AppState, width: int, theme: UITheme) -> list[str]:
    if state.loading:
        banner = f"{RULE * 2} ⟳ {state.loading_what or 'Loading...'} "
        divider = paint(theme.loading, banner, theme.reset) + paint(
            theme.divider, RULE * max(0, width - display_width(banner)), theme.reset
        )
    else:
        divider = paint(theme.divider, RULE * width, theme.reset)

    if state.error is not None:
        line = paint(theme.error, f"Error: {state.error}", theme.reset)
    elif state.status is not None:
        line = paint(theme.message, state.status.text, theme.reset)
    else:
        line = paint(theme.dim, footer_hints(state), theme.reset)
    return [_fit(divider, width, theme), _fit(line, width, theme)]


def render_input_line(state: AppState, width: int, theme: UITheme) -> str:
    assert state.input_mode is not None
    label = paint(theme.pane_title_focused, f" {state.input_mode.value}: ", theme.reset)
    text = state.input_buffer + "█"
    available = max(1, width - display_width(label))
    overflow = max(0, display_width(text) - available)
    return _fit(label + slice_ansi_line(text, overflow, available), width, theme)


# PRs tab.


def _pr_list_pane(state: AppState, width: int, rows: int, theme: UITheme) -> list[str]:
    focused = state.nav.focus is Focus.LIST
    title = f" Pull Requests [{state.nav.pr_filter.value}] ({len(state.prs)})"
    lines = [_title(title, focused, theme)]
    if not state.prs:
        message = "Loading..." if state.loading and not state.all_prs else "No pull requests"
        lines.append(paint(theme.dim, f" {message}", theme.reset))
        return _block(lines, width, rows, theme)
    items = [
        f" {paint(_pr_color(pr, theme), pr.status_icon, theme.reset)} #{pr.number} {pr.title}"
        + paint(theme.dim, f"  {pr.author}", theme.reset)
        for pr in state.prs
    ]
    lines.extend(_list_rows(items, state.pr_selected, rows - 1, focused, theme, width))
    return _block(lines, width, rows, theme)


def _pr_summary_lines(pr: PullRequest, state: AppState, width: int, theme: UITheme, style: str) -> list[str]:
    lines = [
        paint(theme.bold, f" #{pr.number} {pr.title}", theme.reset),
        f" {paint(_pr_color(pr, theme), pr.status_label, theme.reset)}"
        f" · {pr.author} · {pr.head.ref} → {pr.base.ref}",
        f" Mergeable: {pr.mergeable_label}",
    ]
    if pr.labels:
        lines.append(" Labels: " + ", ".join(label.name for label in pr.labels))
    if pr.requested_reviewers:
        lines.append(" Review requested: " + ", ".join(pr.requested_reviewers))
    if state.pr_reviews:
        lines.append(" Reviews: " + ", ".join(f"{r.status_icon} {r.reviewer}" for r in state.pr_reviews))
    body = highlight_markdown(pr.body, style)
    if body:
        lines.append("")
        shown = body[:DESCRIPTION_MAX_ROWS]
        lines.extend(" " + line for line in shown)
        if len(body) > len(shown):
            lines.append(paint(theme.dim, f" … {len(body) - len(shown)} more lines", theme.reset))
    return lines


def _diff_section(state: AppState, rows: int, theme: UITheme) -> list[str]:
    if rows <= 0:
        return []
    if state.nav.diff_mode is DiffMode.BY_COMMIT:
        commit = state.highlighted_commit
        if commit is None:
            return [paint(theme.dim, " No commits loaded", theme.reset)]
        position = f"{(state.pr_commits_selected or 0) + 1}/{len(state.pr_commits)}"
        header = paint(
            theme.pane_title,
            f" Commit {position} {commit.short_sha} {commit.first_line} ({commit.author})",
            theme.reset,
        )
        if state.commit_diff is None:
            return [header, paint(theme.dim, " Loading commit diff...", theme.reset)]
        body = diff_window(state.commit_diff_lines, state.diff_scroll, rows - 1)
        return [header] + [_diff_line(line, theme) for line in body]

    header = paint(theme.pane_title, f" Diff ({len(state.pr_diff_lines)} lines)", theme.reset)
    if state.pr_diff is None:
        return [header, paint(theme.dim, " Loading diff...", theme.reset)]
    body = diff_window(state.pr_diff_lines, state.diff_scroll, rows - 1)
    return [header] + [_diff_line(line, theme) for line in body]


def _checks_section(state: AppState, width: int, rows: int, theme: UITheme) -> list[str]:
    focused = state.nav.focus is Focus.PR_CHECKS
    lines = [_title(f" CI Checks ({len(state.pr_checks)})", focused, theme)]
    if not state.pr_checks:
        lines.append(paint(theme.dim, " No checks", theme.reset))
        return lines
    items = [
        f" {paint(_run_color(run.status, run.conclusion, theme), run.status_icon, theme.reset)}"
        f" {run.name}" + paint(theme.dim, f"  {run.status_text}", theme.reset)
        for run in state.pr_checks
    ]
    lines.extend(_list_rows(items, state.pr_checks_selected, rows - 1, focused, theme, width))
    return lines


def _pr_detail_pane(state: AppState, width: int, rows: int, theme: UITheme, style: str) -> list[str]:
    focused = state.nav.focus is Focus.DETAIL
    pr = state.selected_pr
    if pr is None:
        hint = state.highlighted_pr
        lines = [_title(" Details", focused, theme)]
        if hint is not None:
            lines.append(paint(theme.dim, f" Press Enter to open #{hint.number}", theme.reset))
        return _block(lines, width, rows, theme)

    checks_rows = min(CHECKS_MAX_ROWS, max(2, len(state.pr_checks) + 1), max(0, rows // 3))
    top_rows = rows - checks_rows
    lines = [_title(" Details", focused, theme)]
    lines.extend(_pr_summary_lines(pr, state, width, theme, style))
    lines.append("")
    lines.extend(_diff_section(state, top_rows - len(lines), theme))
    top = _block(lines, width, top_rows, theme)
    bottom = _block(_checks_section(state, width, checks_rows, theme), width, checks_rows, theme)
    return top + bottom


def render_full_diff(state: AppState, width: int, rows: int, theme: UITheme) -> list[str]:
    pr = state.selected_pr
    if state.nav.diff_mode is DiffMode.BY_COMMIT:
        lines = _diff_section(state, rows, theme)
        return _block(lines, width, rows, theme)
    source = state.pr_diff_lines
    total = len(source)
    first = min(total, state.diff_scroll + 1)
    last = min(total, state.diff_scroll + rows - 1)
    title = f" Diff: #{pr.number} {pr.title}" if pr is not None else " Diff"
    lines = [_title(f"{title}  ({first}-{last}/{total})", True, theme)]
    if state.pr_diff is None:
        lines.append(paint(theme.dim, " Loading diff...", theme.reset))
    else:
        lines.extend(_diff_line(line, theme) for line in diff_window(source, state.diff_scroll, rows - 1))
    return _block(lines, width, rows, theme)


def render_prs_tab(state: AppState, width: int, rows: int, theme: UITheme, style: str) -> list[str]:
    if state.nav.view is View.DIFF:
        return render_full_diff(state, width, rows, theme)
    left_width, right_width = _split_width(width)
    left = _pr_list_pane(state, left_width, rows, theme)
    right = _pr_detail_pane(state, right_width, rows, theme, style)
    return _side_by_side(left, right, theme)


# Actions tab.


def _run_item(run: WorkflowRun, theme: UITheme) -> str:
    icon = paint(_run_color(run.status, run.conclusion, theme), run.status_icon, theme.reset)
    meta = paint(theme.dim, f"  #{run.run_number} {run.head_branch} · {run.event} · {run.status_text}", theme.reset)
    return f" {icon} {run.name}{meta}"


def _run_list_pane(state: AppState, width: int, rows: int, theme: UITheme, focused: bool) -> list[str]:
    lines = [_title(f" Workflow Runs ({len(state.runs)})", focused, theme)]
    if not state.runs:
        lines.append(paint(theme.dim, " No workflow runs", theme.reset))
        return _block(lines, width, rows, theme)
    items = [_run_item(run, theme) for run in state.runs]
    lines.extend(_list_rows(items, state.run_selected, rows - 1, focused, theme, width))
    return _block(lines, width, rows, theme)


def _job_items(jobs: list[Job], selected: int | None, theme: UITheme) -> tuple[list[str], int | None]:
    """Flatten jobs (and the selected job's steps) into rows; return the cursor row."""
    items: list[str] = []
    cursor = None
    for idx, job in enumerate(jobs):
        icon = paint(_run_color(job.status, job.conclusion, theme), job.status_icon, theme.reset)
        if idx == selected:
            cursor = len(items)
        items.append(f" {icon} {job.name}" + paint(theme.dim, f"  {job.status_text} · {job.duration_label}", theme.reset))
        if idx == selected:
            for step in job.steps:
                step_icon = paint(_run_color(step.status, step.conclusion, theme), step.status_icon, theme.reset)
                items.append(f"     {step_icon} {step.number}. {step.name}")
    return items, cursor


def _jobs_pane(state: AppState, width: int, rows: int, theme: UITheme) -> list[str]:
    run = state.selected_run
    title = f" Jobs: {run.name} #{run.run_number}" if run is not None else " Jobs"
    lines = [_title(title, True, theme)]
    if not state.jobs:
        message = "Loading jobs..." if state.loading else "No jobs"
        lines.append(paint(theme.dim, f" {message}", theme.reset))
        return _block(lines, width, rows, theme)
    items, cursor = _job_items(state.jobs, state.job_selected, theme)
    lines.extend(_list_rows(items, cursor, rows - 1, True, theme, width))
    return _block(lines, width, rows, theme)


def render_actions_tab(state: AppState, width: int, rows: int, theme: UITheme) -> list[str]:
    if state.nav.view is not View.JOBS:
        return _run_list_pane(state, width, rows, theme, True)
    left_width, right_width = _split_width(width)
    left = _run_list_pane(state, left_width, rows, theme, False)
    right = _jobs_pane(state, right_width, rows, theme)
    return _side_by_side(left, right, theme)


# Logs tab.


def _logs_title(state: AppState) -> str:
    parts = [" Logs"]
    if state.selected_run is not None:
        parts.append(f": {state.selected_run.name}")
        job = state.highlighted_job
        if job is not None:
            parts.append(f" / {job.name}")
    total = len(state.log_lines)
    if total:
        parts.append(f"  (line {min(total, state.log_scroll + 1)}/{total}")
        if state.log_h_scroll:
            parts.append(f", col {state.log_h_scroll + 1}")
        parts.append(")")
    if state.log_search.query:
        parts.append(f"  search {state.log_search.position_label()}")
    return "".join(parts)


def render_logs_tab(state: AppState, width: int, rows: int, theme: UITheme) -> list[str]:
    lines = [_title(_logs_title(state), True, theme)]
    if not state.log_lines:
        if state.loading:
            message = "Loading logs..."
        elif state.selected_run is None:
            message = "No logs loaded. Select a job in the Actions tab and press Enter."
        else:
            message = "Log is empty."
        lines.append(paint(theme.dim, f" {message}", theme.reset))
        return _block(lines, width, rows, theme)

    matches = set(state.log_search.matches)
    current = state.log_search.current_line
    end = min(len(state.log_lines), state.log_scroll + rows - 1)
    for idx in range(state.log_scroll, end):
        text = slice_ansi_line(state.log_lines[idx], state.log_h_scroll, width)
        if idx == current:
            text = paint(theme.search_current, pad_ansi_line(text, width), theme.reset) if theme.search_current else "> " + text
        elif idx in matches:
            text = paint(theme.search_hit, text, theme.reset) if theme.search_hit else "* " + text
        lines.append(text)
    return _block(lines, width, rows, theme)


# Frame.


def render_frame(
    state: AppState,
    width: int,
    height: int,
    theme: UITheme = DEFAULT_THEME,
    style: str = DEFAULT_STYLE,
) -> str:
    width = max(1, width)
    height = max(HEADER_ROWS + FOOTER_ROWS + 1, height)
    content_rows = height - HEADER_ROWS - FOOTER_ROWS

    if state.show_help:
        content = [_fit(line, width, theme) for line in render_help_box(theme, width, content_rows)]
    elif state.nav.tab is Tab.PRS:
        content = render_prs_tab(state, width, content_rows, theme, style)
    elif state.nav.tab is Tab.ACTIONS:
        content = render_actions_tab(state, width, content_rows, theme)
    else:
        content = render_logs_tab(state, width, content_rows, theme)

    if state.input_mode is not None:
        content[-1] = render_input_line(state, width, theme)

    rows = render_header(state, width, theme) + content + render_footer(state, width, theme)
    return "\r\n".join(rows)


__all__ = ["footer_hints", "render_frame"]
