"""Outcome messages posted by background tasks to the state loop.

One variant per fetchable entity plus action confirmations, ``Notice`` for
informational text and ``Error`` for any failure.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..gateway.client import RerunScope
from ..models import Commit, Job, PullRequest, Review, WorkflowRun


@dataclass(frozen=True)
class PrsLoaded:
    prs: tuple[PullRequest, ...]


@dataclass(frozen=True)
class RunsLoaded:
    runs: tuple[WorkflowRun, ...]


@dataclass(frozen=True)
class DiffLoaded:
    number: int
    diff: str


@dataclass(frozen=True)
class PrChecksLoaded:
    head_sha: str
    runs: tuple[WorkflowRun, ...]


@dataclass(frozen=True)
class JobsLoaded:
    run_id: int
    jobs: tuple[Job, ...]


@dataclass(frozen=True)
class LogsLoaded:
    run_id: int
    job_id: int | None
    text: str


@dataclass(frozen=True)
class CommitsLoaded:
    number: int
    commits: tuple[Commit, ...]


@dataclass(frozen=True)
class CommitDiffLoaded:
    sha: str
    diff: str


@dataclass(frozen=True)
class ReviewsLoaded:
    number: int
    reviews: tuple[Review, ...]


@dataclass(frozen=True)
class CurrentUserLoaded:
    login: str


@dataclass(frozen=True)
class PrMerged:
    number: int


@dataclass(frozen=True)
class PrTitleEdited:
    number: int
    title: str


@dataclass(frozen=True)
class PrLabelsAdded:
    number: int
    labels: tuple[str, ...]


@dataclass(frozen=True)
class PrReviewersAdded:
    number: int
    reviewers: tuple[str, ...]


@dataclass(frozen=True)
class RerunTriggered:
    run_id: int
    name: str
    scope: RerunScope


@dataclass(frozen=True)
class Notice:
    text: str


@dataclass(frozen=True)
class Error:
    text: str


AsyncMessage = (
    PrsLoaded
    | RunsLoaded
    | DiffLoaded
    | PrChecksLoaded
    | JobsLoaded
    | LogsLoaded
    | CommitsLoaded
    | CommitDiffLoaded
    | ReviewsLoaded
    | CurrentUserLoaded
    | PrMerged
    | PrTitleEdited
    | PrLabelsAdded
    | PrReviewersAdded
    | RerunTriggered
    | Notice
    | Error
)

__all__ = [
    "AsyncMessage",
    "CommitDiffLoaded",
    "CommitsLoaded",
    "CurrentUserLoaded",
    "DiffLoaded",
    "Error",
    "JobsLoaded",
    "LogsLoaded",
    "Notice",
    "PrChecksLoaded",
    "PrLabelsAdded",
    "PrMerged",
    "PrReviewersAdded",
    "PrTitleEdited",
    "PrsLoaded",
    "ReviewsLoaded",
    "RerunTriggered",
    "RunsLoaded",
]
