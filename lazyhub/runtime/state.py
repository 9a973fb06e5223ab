from __future__ import annotations

from dataclasses import dataclass, field

from ..models import Commit, Job, PullRequest, Review, WorkflowRun
from ..text.diff import DiffLine
from ..text.search import LogSearch
from .navigation import InputMode, NavigationState
from .status import StatusMessage


@dataclass
class AppState:
    repo: str
    owner: str
    repo_name: str
    nav: NavigationState = field(default_factory=NavigationState)
    input_mode: InputMode | None = None
    input_buffer: str = ""
    all_prs: list[PullRequest] = field(default_factory=list)
    prs: list[PullRequest] = field(default_factory=list)
    pr_selected: int | None = None
    selected_pr: PullRequest | None = None
    pr_diff: str | None = None
    pr_diff_lines: list[DiffLine] = field(default_factory=list)
    diff_scroll: int = 0
    pr_checks: list[WorkflowRun] = field(default_factory=list)
    pr_checks_selected: int | None = None
    pr_commits: list[Commit] = field(default_factory=list)
    pr_commits_selected: int | None = None
    commit_diff: str | None = None
    commit_diff_lines: list[DiffLine] = field(default_factory=list)
    pr_reviews: list[Review] = field(default_factory=list)
    runs: list[WorkflowRun] = field(default_factory=list)
    run_selected: int | None = None
    selected_run: WorkflowRun | None = None
    jobs: list[Job] = field(default_factory=list)
    job_selected: int | None = None
    logs: str = ""
    log_lines: list[str] = field(default_factory=list)
    log_scroll: int = 0
    log_h_scroll: int = 0
    log_search: LogSearch = field(default_factory=LogSearch)
    loading: bool = False
    loading_what: str | None = None
    error: str | None = None
    status: StatusMessage | None = None
    should_quit: bool = False
    show_help: bool = False
    current_user: str | None = None
    pending_pr_number: int | None = None
    viewport: tuple[int, int] = (80, 24)

    @property
    def full_repo(self) -> str:
        return f"{self.owner}/{self.repo_name}"

    @property
    def highlighted_pr(self) -> PullRequest | None:
        """PR under the list cursor (not necessarily the opened one)."""
        if self.pr_selected is None or not 0 <= self.pr_selected < len(self.prs):
            return None
        return self.prs[self.pr_selected]

    @property
    def highlighted_check(self) -> WorkflowRun | None:
        if self.pr_checks_selected is None or not 0 <= self.pr_checks_selected < len(self.pr_checks):
            return None
        return self.pr_checks[self.pr_checks_selected]

    @property
    def highlighted_run(self) -> WorkflowRun | None:
        if self.run_selected is None or not 0 <= self.run_selected < len(self.runs):
            return None
        return self.runs[self.run_selected]

    @property
    def highlighted_job(self) -> Job | None:
        if self.job_selected is None or not 0 <= self.job_selected < len(self.jobs):
            return None
        return self.jobs[self.job_selected]

    @property
    def highlighted_commit(self) -> Commit | None:
        if self.pr_commits_selected is None or not 0 <= self.pr_commits_selected < len(self.pr_commits):
            return None
        return self.pr_commits[self.pr_commits_selected]


__all__ = ["AppState"]
