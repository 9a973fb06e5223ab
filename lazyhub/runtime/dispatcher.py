"""Background task units: one remote call per unit, one message per outcome.

Every public method snapshots its arguments, spawns one unit and returns
immediately. The unit performs exactly one gateway (or helper) operation and
posts exactly one message to the channel: the matching ``*Loaded``/action
message on success, ``Error`` on any failure. There are no retries and no
cancellation; a stale result simply lands and is overwritten by later ones.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import ModuleType
from typing import Any

from ..cache import ArtifactCache, ArtifactKind
from ..gateway import helper as default_helper
from ..gateway.client import LogsUnavailable
from .channel import MessageChannel
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

logger = logging.getLogger(__name__)

LOGS_UNAVAILABLE_TEXT = "Logs not available yet. The run may still be in progress or queued."

SpawnFn = Callable[[str, Callable[[], None]], None]


def spawn_thread(label: str, unit: Callable[[], None]) -> None:
    """Run ``unit`` on a fresh daemon thread."""
    worker = threading.Thread(target=unit, name=f"lazyhub-task-{label}", daemon=True)
    worker.start()


class TaskDispatcher:
    """Spawns background units against one repository."""

    def __init__(
        self,
        gateway: Any,
        cache: ArtifactCache,
        channel: MessageChannel,
        owner: str,
        repo: str,
        *,
        helper: ModuleType | Any = default_helper,
        spawn: SpawnFn = spawn_thread,
    ) -> None:
        self.gateway = gateway
        self.cache = cache
        self.channel = channel
        self.owner = owner
        self.repo = repo
        self.helper = helper
        self._spawn = spawn

    @property
    def full_repo(self) -> str:
        return f"{self.owner}/{self.repo}"

    def _submit(self, label: str, error_prefix: str, work: Callable[[], AsyncMessage]) -> None:
        def unit() -> None:
            try:
                message = work()
            except Exception as exc:
                logger.warning("%s failed: %s", label, exc)
                message = Error(f"{error_prefix}: {exc}")
            self.channel.send(message)

        logger.debug("spawning %s", label)
        self._spawn(label, unit)

    # Fetches.

    def fetch_prs(self) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo
        self._submit(
            "prs",
            "Failed to fetch PRs",
            lambda: PrsLoaded(tuple(gw.list_pull_requests(owner, repo))),
        )

    def fetch_runs(self) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo
        self._submit(
            "runs",
            "Failed to fetch runs",
            lambda: RunsLoaded(tuple(gw.list_runs(owner, repo))),
        )

    def fetch_current_user(self) -> None:
        gw = self.gateway
        self._submit("user", "Failed to fetch current user", lambda: CurrentUserLoaded(gw.current_user()))

    def fetch_diff(self, number: int) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo
        self._submit(
            f"diff-{number}",
            "Failed to fetch diff",
            lambda: DiffLoaded(number, gw.pull_request_diff(owner, repo, number)),
        )

    def fetch_pr_checks(self, head_sha: str) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo
        self._submit(
            f"checks-{head_sha[:7]}",
            "Failed to fetch PR checks",
            lambda: PrChecksLoaded(head_sha, tuple(gw.list_runs_for_commit(owner, repo, head_sha))),
        )

    def fetch_reviews(self, number: int) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo
        self._submit(
            f"reviews-{number}",
            "Failed to fetch reviews",
            lambda: ReviewsLoaded(number, tuple(gw.list_reviews(owner, repo, number))),
        )

    def fetch_commits(self, number: int) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo
        self._submit(
            f"commits-{number}",
            "Failed to fetch commits",
            lambda: CommitsLoaded(number, tuple(gw.list_commits(owner, repo, number))),
        )

    def fetch_commit_diff(self, sha: str) -> None:
        gw, cache, owner, repo = self.gateway, self.cache, self.owner, self.repo

        def work() -> AsyncMessage:
            diff = cache.get_or_fetch(
                ArtifactKind.COMMIT_DIFF,
                sha,
                lambda: gw.commit_diff(owner, repo, sha),
            )
            return CommitDiffLoaded(sha, diff)

        self._submit(f"commit-diff-{sha[:7]}", "Failed to fetch commit diff", work)

    def fetch_jobs(self, run_id: int) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo
        self._submit(
            f"jobs-{run_id}",
            "Failed to fetch jobs",
            lambda: JobsLoaded(run_id, tuple(gw.list_jobs(owner, repo, run_id))),
        )

    def fetch_logs(self, run_id: int, job_id: int | None = None, *, completed: bool = False) -> None:
        """Fetch a job's (or whole run's) log text.

        Only logs of a completed job are cached; anything else may still grow.
        A missing bundle is reported as placeholder text, not as an error.
        """
        gw, cache, owner, repo = self.gateway, self.cache, self.owner, self.repo

        def work() -> AsyncMessage:
            try:
                if job_id is not None and completed:
                    text = cache.get_or_fetch(
                        ArtifactKind.JOB_LOG,
                        job_id,
                        lambda: gw.run_logs(owner, repo, run_id, job_id),
                    )
                else:
                    text = gw.run_logs(owner, repo, run_id, job_id)
            except LogsUnavailable:
                text = LOGS_UNAVAILABLE_TEXT
            return LogsLoaded(run_id, job_id, text)

        label = f"logs-{run_id}" if job_id is None else f"logs-{run_id}-{job_id}"
        self._submit(label, "Failed to fetch logs", work)

    # Remote actions.

    def approve(self, number: int) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo

        def work() -> AsyncMessage:
            gw.approve(owner, repo, number)
            return Notice(f"Approved PR #{number}")

        self._submit(f"approve-{number}", "Failed to approve", work)

    def request_changes(self, number: int, body: str) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo

        def work() -> AsyncMessage:
            gw.request_changes(owner, repo, number, body)
            return Notice(f"Requested changes on PR #{number}")

        self._submit(f"request-changes-{number}", "Failed to request changes", work)

    def comment(self, number: int, body: str) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo

        def work() -> AsyncMessage:
            gw.comment(owner, repo, number, body)
            return Notice(f"Comment added to PR #{number}")

        self._submit(f"comment-{number}", "Failed to comment", work)

    def merge(self, number: int) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo

        def work() -> AsyncMessage:
            gw.merge(owner, repo, number)
            return PrMerged(number)

        self._submit(f"merge-{number}", "Failed to merge", work)

    def edit_title(self, number: int, title: str) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo

        def work() -> AsyncMessage:
            gw.edit_title(owner, repo, number, title)
            return PrTitleEdited(number, title)

        self._submit(f"edit-title-{number}", "Failed to edit title", work)

    def add_labels(self, number: int, labels: tuple[str, ...]) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo

        def work() -> AsyncMessage:
            gw.add_labels(owner, repo, number, labels)
            return PrLabelsAdded(number, labels)

        self._submit(f"labels-{number}", "Failed to add labels", work)

    def add_reviewers(self, number: int, reviewers: tuple[str, ...]) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo

        def work() -> AsyncMessage:
            gw.add_reviewers(owner, repo, number, reviewers)
            return PrReviewersAdded(number, reviewers)

        self._submit(f"reviewers-{number}", "Failed to add reviewers", work)

    def rerun(self, run_id: int, name: str) -> None:
        gw, owner, repo = self.gateway, self.owner, self.repo

        def work() -> AsyncMessage:
            scope = gw.rerun(owner, repo, run_id)
            return RerunTriggered(run_id, name, scope)

        self._submit(f"rerun-{run_id}", "Failed to rerun", work)

    # Local helpers.

    def checkout(self, number: int) -> None:
        helper, full_repo = self.helper, self.full_repo

        def work() -> AsyncMessage:
            helper.checkout_pr(full_repo, number)
            return Notice(f"Checked out PR #{number}")

        self._submit(f"checkout-{number}", "Checkout failed", work)

    def create_pr(self) -> None:
        helper, full_repo = self.helper, self.full_repo

        def work() -> AsyncMessage:
            helper.open_pr_create(full_repo)
            return Notice("Opened PR creation in browser")

        self._submit("create-pr", "Failed to create PR", work)

    def open_in_browser(self, number: int) -> None:
        helper, full_repo = self.helper, self.full_repo

        def work() -> AsyncMessage:
            helper.open_pr_in_browser(full_repo, number)
            return Notice(f"Opened PR #{number} in browser")

        self._submit(f"browse-{number}", "Failed to open browser", work)

    def copy_to_clipboard(self, text: str, description: str) -> None:
        helper = self.helper

        def work() -> AsyncMessage:
            helper.copy_to_clipboard(text)
            return Notice(f"Copied {description}")

        self._submit("clipboard", "Failed to copy", work)


__all__ = ["LOGS_UNAVAILABLE_TEXT", "SpawnFn", "TaskDispatcher", "spawn_thread"]
