"""Single owner and sole mutator of :class:`AppState`.

``StateCore`` applies channel messages as plain state transitions and exposes
the mutators invoked by key handlers. It never performs I/O itself: every
remote interaction goes through the :class:`TaskDispatcher`, whose units
report back through the message channel.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from ..models import PullRequest, WorkflowRun
from ..text.ansi import strip_ansi
from ..text.diff import segment_diff
from .channel import MessageChannel
from .dispatcher import TaskDispatcher
from .messages import (
    AsyncMessage,
    CommitDiffLoaded,
    CommitsLoaded,
    CurrentUserLoaded,
    DiffLoaded,
    Error,
    JobsLoaded,
    LogsLoaded,
    Notice,
    PrChecksLoaded,
    PrLabelsAdded,
    PrMerged,
    PrReviewersAdded,
    PrTitleEdited,
    PrsLoaded,
    RerunTriggered,
    ReviewsLoaded,
    RunsLoaded,
)
from .navigation import DiffMode, InputMode, PrFilter, Tab, View
from .state import AppState
from .status import DEFAULT_NOTIFICATION_SECONDS, StatusMessage

logger = logging.getLogger(__name__)

PAGE_LINES = 20
LOG_H_STEP = 10

INPUT_PROMPTS = {
    InputMode.SEARCH: "Search:",
    InputMode.COMMENT: "Enter comment:",
    InputMode.REQUEST_CHANGES: "Enter comment for request changes:",
    InputMode.EDIT_TITLE: "New title:",
    InputMode.ADD_LABEL: "Labels (comma-separated):",
    InputMode.ADD_REVIEWER: "Reviewers (comma-separated):",
}


def filter_prs(prs: Iterable[PullRequest], pr_filter: PrFilter, current_user: str | None) -> list[PullRequest]:
    """Return the visible subset of ``prs``; user filters are empty until the user is known."""
    if pr_filter is PrFilter.ALL:
        return list(prs)
    if not current_user:
        return []
    if pr_filter is PrFilter.MINE:
        return [pr for pr in prs if pr.author == current_user]
    return [pr for pr in prs if current_user in pr.requested_reviewers]


def split_names(text: str) -> tuple[str, ...]:
    """Split comma/space separated names, dropping blanks and duplicates."""
    names: list[str] = []
    for chunk in text.replace(",", " ").split():
        if chunk not in names:
            names.append(chunk)
    return tuple(names)


def _cycle(index: int | None, length: int, step: int) -> int | None:
    if length == 0:
        return None
    if index is None:
        return 0
    return (index + step) % length


def _clamp_cursor(index: int | None, length: int) -> int | None:
    if length == 0:
        return None
    if index is None:
        return 0
    return max(0, min(index, length - 1))


class StateCore:
    def __init__(
        self,
        state: AppState,
        dispatcher: TaskDispatcher,
        channel: MessageChannel,
        *,
        clock: Callable[[], float] = time.monotonic,
        notification_seconds: float = DEFAULT_NOTIFICATION_SECONDS,
    ) -> None:
        self.state = state
        self.dispatcher = dispatcher
        self.channel = channel
        self.clock = clock
        self.notification_seconds = notification_seconds
        self._handlers: dict[type, Callable[..., None]] = {
            PrsLoaded: self._on_prs_loaded,
            RunsLoaded: self._on_runs_loaded,
            DiffLoaded: self._on_diff_loaded,
            PrChecksLoaded: self._on_pr_checks_loaded,
            JobsLoaded: self._on_jobs_loaded,
            LogsLoaded: self._on_logs_loaded,
            CommitsLoaded: self._on_commits_loaded,
            CommitDiffLoaded: self._on_commit_diff_loaded,
            ReviewsLoaded: self._on_reviews_loaded,
            CurrentUserLoaded: self._on_current_user_loaded,
            PrMerged: self._on_pr_merged,
            PrTitleEdited: self._on_pr_title_edited,
            PrLabelsAdded: self._on_pr_labels_added,
            PrReviewersAdded: self._on_pr_reviewers_added,
            RerunTriggered: self._on_rerun_triggered,
            Notice: self._on_notice,
            Error: self._on_error,
        }

    # Lifecycle.

    def start(self) -> None:
        """Kick off the initial fetches."""
        self._begin("Loading PRs and workflows...")
        self.dispatcher.fetch_prs()
        self.dispatcher.fetch_runs()
        self.dispatcher.fetch_current_user()

    def drain_messages(self) -> int:
        messages = self.channel.drain()
        for message in messages:
            self.apply_message(message)
        return len(messages)

    def expire_status(self) -> bool:
        """Clear an expired notification; prompts are left alone."""
        status = self.state.status
        if status is None or not status.is_expired(self.clock()):
            return False
        self.state.status = None
        return True

    def resize(self, columns: int, rows: int) -> bool:
        viewport = (max(1, columns), max(1, rows))
        if viewport == self.state.viewport:
            return False
        self.state.viewport = viewport
        return True

    def notify(self, text: str) -> None:
        self.state.status = StatusMessage.notification(text, self.notification_seconds, now=self.clock())

    def prompt(self, text: str) -> None:
        self.state.status = StatusMessage.prompt(text)

    def _begin(self, what: str, *, clear_error: bool = True) -> None:
        """Show the loading banner; follow-up fetches issued by a message keep the error slot."""
        if clear_error:
            self.state.error = None
        self.state.loading = True
        self.state.loading_what = what

    def _done(self) -> None:
        self.state.loading = False
        self.state.loading_what = None

    # Message transitions.

    def apply_message(self, message: AsyncMessage) -> None:
        handler = self._handlers.get(type(message))
        if handler is None:
            logger.warning("ignoring unknown message %r", message)
            return
        handler(message)

    def _on_prs_loaded(self, message: PrsLoaded) -> None:
        state = self.state
        state.all_prs = list(message.prs)
        self.apply_filter()
        self._done()
        if state.pending_pr_number is not None:
            number = state.pending_pr_number
            state.pending_pr_number = None
            self._open_pending_pr(number)

    def _open_pending_pr(self, number: int) -> None:
        state = self.state
        for idx, pr in enumerate(state.prs):
            if pr.number == number:
                state.pr_selected = idx
                if self.select_pr(clear_error=False):
                    state.nav.open_detail()
                return
        self.notify(f"PR #{number} not found among open PRs")

    def _on_runs_loaded(self, message: RunsLoaded) -> None:
        state = self.state
        state.runs = list(message.runs)
        state.run_selected = _clamp_cursor(state.run_selected, len(state.runs))
        # At startup the banner stays up until the PR list arrives.
        if state.nav.tab is Tab.ACTIONS:
            self._done()

    def _on_diff_loaded(self, message: DiffLoaded) -> None:
        state = self.state
        state.pr_diff = message.diff
        state.pr_diff_lines = segment_diff(message.diff)
        self._done()

    def _on_pr_checks_loaded(self, message: PrChecksLoaded) -> None:
        state = self.state
        state.pr_checks = list(message.runs)
        state.pr_checks_selected = _clamp_cursor(state.pr_checks_selected, len(state.pr_checks))

    def _on_jobs_loaded(self, message: JobsLoaded) -> None:
        state = self.state
        state.jobs = list(message.jobs)
        state.job_selected = _clamp_cursor(state.job_selected, len(state.jobs))
        self._done()

    def _on_logs_loaded(self, message: LogsLoaded) -> None:
        state = self.state
        state.logs = message.text
        state.log_lines = [strip_ansi(line) for line in message.text.splitlines()]
        state.log_scroll = 0
        state.log_h_scroll = 0
        state.log_search.clear()
        self._done()

    def _on_commits_loaded(self, message: CommitsLoaded) -> None:
        state = self.state
        state.pr_commits = list(message.commits)
        state.pr_commits_selected = 0 if state.pr_commits else None
        state.commit_diff = None
        state.commit_diff_lines = []
        if state.nav.diff_mode is DiffMode.BY_COMMIT:
            self._fetch_highlighted_commit_diff(clear_error=False)

    def _on_commit_diff_loaded(self, message: CommitDiffLoaded) -> None:
        state = self.state
        state.commit_diff = message.diff
        state.commit_diff_lines = segment_diff(message.diff)
        self._done()

    def _on_reviews_loaded(self, message: ReviewsLoaded) -> None:
        self.state.pr_reviews = list(message.reviews)

    def _on_current_user_loaded(self, message: CurrentUserLoaded) -> None:
        self.state.current_user = message.login
        self.apply_filter()

    def _on_pr_merged(self, message: PrMerged) -> None:
        state = self.state
        state.all_prs = [pr for pr in state.all_prs if pr.number != message.number]
        self.apply_filter()
        if state.selected_pr is not None and state.selected_pr.number == message.number:
            state.selected_pr = None
            if state.nav.tab is Tab.PRS:
                state.nav.close_detail()
        self._done()
        self.notify(f"Merged PR #{message.number}")
        self.dispatcher.fetch_prs()

    def _patch_pr(self, number: int, patch: Callable[[PullRequest], PullRequest]) -> None:
        state = self.state
        state.all_prs = [patch(pr) if pr.number == number else pr for pr in state.all_prs]
        state.prs = [patch(pr) if pr.number == number else pr for pr in state.prs]
        if state.selected_pr is not None and state.selected_pr.number == number:
            state.selected_pr = patch(state.selected_pr)

    def _on_pr_title_edited(self, message: PrTitleEdited) -> None:
        self._patch_pr(message.number, lambda pr: pr.with_title(message.title))
        self._done()
        self.notify(f"Updated title of PR #{message.number}")

    def _on_pr_labels_added(self, message: PrLabelsAdded) -> None:
        self._patch_pr(message.number, lambda pr: pr.with_labels(message.labels))
        self._done()
        self.notify(f"Added {', '.join(message.labels)} to PR #{message.number}")

    def _on_pr_reviewers_added(self, message: PrReviewersAdded) -> None:
        self._patch_pr(message.number, lambda pr: pr.with_reviewers(message.reviewers))
        self._done()
        self.notify(f"Requested review from {', '.join(message.reviewers)} on PR #{message.number}")

    def _on_rerun_triggered(self, message: RerunTriggered) -> None:
        state = self.state

        def queued(run: WorkflowRun) -> WorkflowRun:
            return run.with_status("queued") if run.id == message.run_id else run

        in_checks = any(run.id == message.run_id for run in state.pr_checks)
        in_runs = any(run.id == message.run_id for run in state.runs)
        state.pr_checks = [queued(run) for run in state.pr_checks]
        state.runs = [queued(run) for run in state.runs]
        if state.selected_run is not None and state.selected_run.id == message.run_id:
            state.selected_run = queued(state.selected_run)
        self._done()
        self.notify(f"Rerun triggered for {message.name} ({message.scope.value})")
        if in_checks and state.selected_pr is not None:
            self.dispatcher.fetch_pr_checks(state.selected_pr.head.sha)
        if in_runs or not in_checks:
            self.dispatcher.fetch_runs()

    def _on_notice(self, message: Notice) -> None:
        self._done()
        self.notify(message.text)

    def _on_error(self, message: Error) -> None:
        self.state.error = message.text
        self._done()

    # Filtering.

    def apply_filter(self) -> None:
        """Recompute the visible PR list from the full list; never fetches."""
        state = self.state
        state.prs = filter_prs(state.all_prs, state.nav.pr_filter, state.current_user)
        state.pr_selected = _clamp_cursor(state.pr_selected, len(state.prs))

    def cycle_filter(self) -> PrFilter:
        pr_filter = self.state.nav.cycle_filter()
        self.apply_filter()
        self._begin("Filtering PRs...")
        self.dispatcher.fetch_prs()
        self.notify(f"Filter: {pr_filter.value}")
        return pr_filter

    # Cursors.

    def next_pr(self) -> None:
        self.state.pr_selected = _cycle(self.state.pr_selected, len(self.state.prs), 1)

    def previous_pr(self) -> None:
        self.state.pr_selected = _cycle(self.state.pr_selected, len(self.state.prs), -1)

    def next_pr_check(self) -> None:
        self.state.pr_checks_selected = _cycle(self.state.pr_checks_selected, len(self.state.pr_checks), 1)

    def previous_pr_check(self) -> None:
        self.state.pr_checks_selected = _cycle(self.state.pr_checks_selected, len(self.state.pr_checks), -1)

    def next_run(self) -> None:
        self.state.run_selected = _cycle(self.state.run_selected, len(self.state.runs), 1)

    def previous_run(self) -> None:
        self.state.run_selected = _cycle(self.state.run_selected, len(self.state.runs), -1)

    def next_job(self) -> None:
        self.state.job_selected = _cycle(self.state.job_selected, len(self.state.jobs), 1)

    def previous_job(self) -> None:
        self.state.job_selected = _cycle(self.state.job_selected, len(self.state.jobs), -1)

    def step_commit(self, step: int) -> bool:
        """Move the commit cursor in by-commit mode and fetch that commit's diff."""
        state = self.state
        if state.nav.diff_mode is not DiffMode.BY_COMMIT or not state.pr_commits:
            return False
        state.pr_commits_selected = _cycle(state.pr_commits_selected, len(state.pr_commits), step)
        state.diff_scroll = 0
        self._fetch_highlighted_commit_diff()
        return True

    def scroll_diff(self, delta: int) -> None:
        state = self.state
        lines = state.commit_diff_lines if state.nav.diff_mode is DiffMode.BY_COMMIT else state.pr_diff_lines
        state.diff_scroll = max(0, min(state.diff_scroll + delta, max(0, len(lines) - 1)))

    # Selection and drill-down.

    def select_pr(self, *, clear_error: bool = True) -> bool:
        """Open the highlighted PR and fetch its diff, checks, reviews and commits."""
        state = self.state
        pr = state.highlighted_pr
        if pr is None:
            return False
        state.selected_pr = pr
        state.pr_diff = None
        state.pr_diff_lines = []
        state.diff_scroll = 0
        state.pr_checks = []
        state.pr_checks_selected = None
        state.pr_reviews = []
        state.pr_commits = []
        state.pr_commits_selected = None
        state.commit_diff = None
        state.commit_diff_lines = []
        self._begin("Loading diff...", clear_error=clear_error)
        self.dispatcher.fetch_diff(pr.number)
        self.dispatcher.fetch_pr_checks(pr.head.sha)
        self.dispatcher.fetch_reviews(pr.number)
        self.dispatcher.fetch_commits(pr.number)
        return True

    def _open_run(self, run: WorkflowRun) -> None:
        state = self.state
        state.selected_run = run
        state.jobs = []
        state.job_selected = None
        self._begin("Loading jobs...")
        self.dispatcher.fetch_jobs(run.id)
        state.nav.open_jobs()

    def select_run(self) -> bool:
        run = self.state.highlighted_run
        if run is None:
            return False
        self._open_run(run)
        return True

    def open_check_jobs(self) -> bool:
        """Drill into the jobs of the highlighted PR check on the Actions tab."""
        check = self.state.highlighted_check
        if check is None:
            return False
        self._open_run(check)
        return True

    def fetch_logs(self) -> bool:
        state = self.state
        run = state.selected_run
        if run is None:
            return False
        job = state.highlighted_job
        self._begin("Loading logs...")
        if job is None:
            self.dispatcher.fetch_logs(run.id)
        else:
            self.dispatcher.fetch_logs(run.id, job.id, completed=job.is_completed)
        state.nav.open_logs()
        return True

    def refresh(self) -> None:
        state = self.state
        state.status = None
        tab = state.nav.tab
        if tab is Tab.PRS:
            self._begin("Refreshing PRs...")
            self.dispatcher.fetch_prs()
            if state.selected_pr is not None:
                self.dispatcher.fetch_pr_checks(state.selected_pr.head.sha)
        elif tab is Tab.ACTIONS:
            self._begin("Refreshing workflows...")
            self.dispatcher.fetch_runs()
            if state.nav.view is View.JOBS and state.selected_run is not None:
                self.dispatcher.fetch_jobs(state.selected_run.id)
        else:
            self._begin("Refreshing logs...")
            if state.selected_run is None:
                self._done()
                return
            job = state.highlighted_job
            if job is None:
                self.dispatcher.fetch_logs(state.selected_run.id)
            else:
                self.dispatcher.fetch_logs(state.selected_run.id, job.id, completed=job.is_completed)

    def toggle_diff_mode(self) -> DiffMode:
        state = self.state
        mode = state.nav.toggle_diff_mode()
        state.diff_scroll = 0
        if mode is DiffMode.BY_COMMIT:
            if state.pr_commits_selected is None and state.pr_commits:
                state.pr_commits_selected = 0
            if state.commit_diff is None:
                self._fetch_highlighted_commit_diff()
            self.notify("Diff mode: by commit")
        else:
            self.notify("Diff mode: full")
        return mode

    def _fetch_highlighted_commit_diff(self, *, clear_error: bool = True) -> None:
        commit = self.state.highlighted_commit
        if commit is None:
            return
        self._begin(f"Loading commit {commit.short_sha}...", clear_error=clear_error)
        self.dispatcher.fetch_commit_diff(commit.sha)

    # Remote actions on the opened (or highlighted) PR.

    def _target_pr(self) -> PullRequest | None:
        state = self.state
        pr = state.selected_pr if state.nav.view is not View.LIST else None
        pr = pr or state.highlighted_pr or state.selected_pr
        if pr is None:
            self.notify("No PR selected")
        return pr

    def approve(self) -> None:
        pr = self._target_pr()
        if pr is not None:
            self._begin("Approving PR...")
            self.dispatcher.approve(pr.number)

    def merge(self) -> None:
        pr = self._target_pr()
        if pr is not None:
            self._begin("Merging PR...")
            self.dispatcher.merge(pr.number)

    def checkout(self) -> None:
        pr = self._target_pr()
        if pr is not None:
            self._begin(f"Checking out PR #{pr.number}...")
            self.dispatcher.checkout(pr.number)

    def create_pr(self) -> None:
        self.state.error = None
        self.dispatcher.create_pr()

    def open_in_browser(self) -> None:
        pr = self._target_pr()
        if pr is not None:
            self.state.error = None
            self.dispatcher.open_in_browser(pr.number)

    def _rerun(self, run: WorkflowRun | None) -> None:
        if run is None:
            self.notify("No run selected")
            return
        self._begin("Triggering rerun...")
        self.dispatcher.rerun(run.id, run.name)

    def rerun_selected_check(self) -> None:
        self._rerun(self.state.highlighted_check)

    def rerun_selected_run(self) -> None:
        state = self.state
        run = state.selected_run if state.nav.view is View.JOBS else state.highlighted_run
        self._rerun(run)

    def copy_branch(self) -> None:
        pr = self._target_pr()
        if pr is not None:
            self.dispatcher.copy_to_clipboard(pr.head.ref, f"branch {pr.head.ref}")

    def copy_checkout_command(self) -> None:
        pr = self._target_pr()
        if pr is not None:
            command = f"gh pr checkout {pr.number} --repo {self.state.full_repo}"
            self.dispatcher.copy_to_clipboard(command, "checkout command")

    def copy_pr_url(self) -> None:
        pr = self._target_pr()
        if pr is not None:
            url = pr.html_url or f"https://github.com/{self.state.full_repo}/pull/{pr.number}"
            self.dispatcher.copy_to_clipboard(url, f"URL of PR #{pr.number}")

    # Input overlay.

    def begin_input(self, mode: InputMode) -> bool:
        state = self.state
        if mode is not InputMode.SEARCH and self._target_pr() is None:
            return False
        state.input_mode = mode
        state.input_buffer = ""
        if mode is InputMode.EDIT_TITLE and state.selected_pr is not None:
            state.input_buffer = state.selected_pr.title
        self.prompt(INPUT_PROMPTS[mode])
        return True

    def input_char(self, ch: str) -> None:
        self.state.input_buffer += ch

    def input_backspace(self) -> None:
        self.state.input_buffer = self.state.input_buffer[:-1]

    def cancel_input(self) -> None:
        state = self.state
        state.input_mode = None
        state.input_buffer = ""
        state.status = None

    def commit_input(self) -> None:
        """Submit the buffer to the mode's action, then close the overlay."""
        state = self.state
        mode = state.input_mode
        text = state.input_buffer
        self.cancel_input()
        if mode is None:
            return
        if mode is InputMode.SEARCH:
            self.search_logs(text)
            return

        pr = self._target_pr()
        if pr is None:
            return
        if mode is InputMode.COMMENT:
            if text.strip():
                self._begin("Posting comment...")
                self.dispatcher.comment(pr.number, text)
        elif mode is InputMode.REQUEST_CHANGES:
            self._begin("Requesting changes...")
            self.dispatcher.request_changes(pr.number, text)
        elif mode is InputMode.EDIT_TITLE:
            title = text.strip()
            if title and title != pr.title:
                self._begin("Updating title...")
                self.dispatcher.edit_title(pr.number, title)
        elif mode is InputMode.ADD_LABEL:
            labels = split_names(text)
            if labels:
                self._begin("Adding labels...")
                self.dispatcher.add_labels(pr.number, labels)
        elif mode is InputMode.ADD_REVIEWER:
            reviewers = split_names(text)
            if reviewers:
                self._begin("Requesting reviewers...")
                self.dispatcher.add_reviewers(pr.number, reviewers)

    # Log viewer.

    def search_logs(self, query: str) -> None:
        state = self.state
        if not query:
            state.log_search.clear()
            return
        line = state.log_search.apply(query, state.log_lines)
        if line is None:
            self.notify(f"No matches for '{query}'")
            return
        state.log_scroll = line

    def next_log_match(self) -> None:
        line = self.state.log_search.next()
        if line is not None:
            self.state.log_scroll = line

    def previous_log_match(self) -> None:
        line = self.state.log_search.previous()
        if line is not None:
            self.state.log_scroll = line

    def scroll_logs(self, delta: int) -> None:
        state = self.state
        state.log_scroll = max(0, min(state.log_scroll + delta, max(0, len(state.log_lines) - 1)))

    def scroll_logs_horizontal(self, delta: int) -> None:
        self.state.log_h_scroll = max(0, self.state.log_h_scroll + delta)

    def logs_top(self) -> None:
        self.state.log_scroll = 0
        self.state.log_h_scroll = 0

    def logs_bottom(self) -> None:
        self.state.log_scroll = max(0, len(self.state.log_lines) - PAGE_LINES)

    def logs_line_start(self) -> None:
        self.state.log_h_scroll = 0

    def close_logs(self) -> None:
        self.state.log_search.clear()
        self.state.nav.close_logs()

    # Misc.

    def dismiss_error(self) -> bool:
        if self.state.error is None:
            return False
        self.state.error = None
        return True

    def toggle_help(self) -> None:
        self.state.show_help = not self.state.show_help

    def quit(self) -> None:
        self.state.should_quit = True


__all__ = ["INPUT_PROMPTS", "PAGE_LINES", "StateCore", "filter_prs", "split_names"]
