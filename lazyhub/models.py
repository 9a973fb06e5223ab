"""Typed entities fetched from the hosting provider.

Every constructor is tolerant of missing or ``null`` fields so a partial API
payload degrades to empty strings instead of raising. Instances are frozen:
the state core replaces them wholesale or swaps in patched copies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

SHORT_SHA_LENGTH = 7


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def _optional_text(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def _login(value: object) -> str:
    if isinstance(value, dict):
        return _text(value.get("login"))
    return ""


def _run_status_icon(status: str, conclusion: str | None) -> str:
    if conclusion == "success":
        return "✓"
    if conclusion == "failure":
        return "✗"
    if conclusion in {"cancelled", "skipped"}:
        return "⊘"
    if status == "in_progress":
        return "◷"
    if status == "queued":
        return "◯"
    return "○"


@dataclass(frozen=True)
class Label:
    name: str
    color: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Label:
        return cls(name=_text(payload.get("name")), color=_text(payload.get("color")))


@dataclass(frozen=True)
class Branch:
    ref: str
    sha: str

    @classmethod
    def from_api(cls, payload: object) -> Branch:
        if not isinstance(payload, dict):
            return cls(ref="", sha="")
        return cls(ref=_text(payload.get("ref")), sha=_text(payload.get("sha")))


@dataclass(frozen=True)
class PullRequest:
    """One pull request as listed by the provider."""

    number: int
    title: str
    body: str
    state: str
    draft: bool
    merged: bool
    author: str
    head: Branch
    base: Branch
    mergeable: bool | None = None
    labels: tuple[Label, ...] = ()
    requested_reviewers: tuple[str, ...] = ()
    created_at: str = ""
    updated_at: str = ""
    html_url: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> PullRequest:
        mergeable = payload.get("mergeable")
        return cls(
            number=_int(payload.get("number")),
            title=_text(payload.get("title")),
            body=_text(payload.get("body")),
            state=_text(payload.get("state")),
            draft=bool(payload.get("draft")),
            merged=bool(payload.get("merged_at")) or bool(payload.get("merged")),
            author=_login(payload.get("user")),
            head=Branch.from_api(payload.get("head")),
            base=Branch.from_api(payload.get("base")),
            mergeable=mergeable if isinstance(mergeable, bool) else None,
            labels=tuple(
                Label.from_api(item) for item in payload.get("labels") or () if isinstance(item, dict)
            ),
            requested_reviewers=tuple(
                login for login in (_login(item) for item in payload.get("requested_reviewers") or ()) if login
            ),
            created_at=_text(payload.get("created_at")),
            updated_at=_text(payload.get("updated_at")),
            html_url=_text(payload.get("html_url")),
        )

    @property
    def lifecycle(self) -> str:
        """Collapse provider state + merge marker into open/closed/merged."""
        if self.merged:
            return "merged"
        if self.state == "closed":
            return "closed"
        return "open"

    @property
    def status_icon(self) -> str:
        if self.merged:
            return "⊗"
        if self.state == "closed":
            return "✗"
        if self.draft:
            return "◯"
        return "◉"

    @property
    def status_label(self) -> str:
        if self.lifecycle != "open":
            return self.lifecycle.capitalize()
        return "Draft" if self.draft else "Open"

    @property
    def mergeable_label(self) -> str:
        if self.mergeable is None:
            return "unknown"
        return "yes" if self.mergeable else "no"

    def with_title(self, title: str) -> PullRequest:
        return replace(self, title=title)

    def with_labels(self, names: tuple[str, ...]) -> PullRequest:
        """Return a copy with ``names`` added; existing labels keep their color."""
        known = {label.name for label in self.labels}
        added = tuple(Label(name=name) for name in names if name not in known)
        return replace(self, labels=self.labels + added)

    def with_reviewers(self, logins: tuple[str, ...]) -> PullRequest:
        known = set(self.requested_reviewers)
        added = tuple(login for login in logins if login not in known)
        return replace(self, requested_reviewers=self.requested_reviewers + added)


@dataclass(frozen=True)
class WorkflowRun:
    id: int
    name: str
    head_branch: str
    head_sha: str
    status: str
    conclusion: str | None
    run_number: int
    event: str
    created_at: str = ""
    updated_at: str = ""
    html_url: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> WorkflowRun:
        return cls(
            id=_int(payload.get("id")),
            name=_text(payload.get("name")),
            head_branch=_text(payload.get("head_branch")),
            head_sha=_text(payload.get("head_sha")),
            status=_text(payload.get("status")),
            conclusion=_optional_text(payload.get("conclusion")),
            run_number=_int(payload.get("run_number")),
            event=_text(payload.get("event")),
            created_at=_text(payload.get("created_at")),
            updated_at=_text(payload.get("updated_at")),
            html_url=_text(payload.get("html_url")),
        )

    @property
    def status_icon(self) -> str:
        return _run_status_icon(self.status, self.conclusion)

    @property
    def status_text(self) -> str:
        return self.conclusion or self.status

    def with_status(self, status: str, conclusion: str | None = None) -> WorkflowRun:
        return replace(self, status=status, conclusion=conclusion)


@dataclass(frozen=True)
class Step:
    name: str
    status: str
    conclusion: str | None
    number: int

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Step:
        return cls(
            name=_text(payload.get("name")),
            status=_text(payload.get("status")),
            conclusion=_optional_text(payload.get("conclusion")),
            number=_int(payload.get("number")),
        )

    @property
    def status_icon(self) -> str:
        return _run_status_icon(self.status, self.conclusion)


@dataclass(frozen=True)
class Job:
    id: int
    run_id: int
    name: str
    status: str
    conclusion: str | None
    started_at: str = ""
    completed_at: str | None = None
    steps: tuple[Step, ...] = ()

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Job:
        steps = [Step.from_api(item) for item in payload.get("steps") or () if isinstance(item, dict)]
        steps.sort(key=lambda step: step.number)
        return cls(
            id=_int(payload.get("id")),
            run_id=_int(payload.get("run_id")),
            name=_text(payload.get("name")),
            status=_text(payload.get("status")),
            conclusion=_optional_text(payload.get("conclusion")),
            started_at=_text(payload.get("started_at")),
            completed_at=_optional_text(payload.get("completed_at")),
            steps=tuple(steps),
        )

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def status_icon(self) -> str:
        return _run_status_icon(self.status, self.conclusion)

    @property
    def status_text(self) -> str:
        return self.conclusion or self.status

    @property
    def duration_label(self) -> str:
        if self.completed_at:
            return "completed"
        if self.started_at:
            return "running..."
        return "-"


@dataclass(frozen=True)
class Commit:
    sha: str
    message: str
    author: str
    date: str

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Commit:
        commit = payload.get("commit") if isinstance(payload.get("commit"), dict) else {}
        author = commit.get("author") if isinstance(commit.get("author"), dict) else {}
        return cls(
            sha=_text(payload.get("sha")),
            message=_text(commit.get("message")),
            author=_text(author.get("name")) or "unknown",
            date=_text(author.get("date")),
        )

    @property
    def short_sha(self) -> str:
        return self.sha[:SHORT_SHA_LENGTH]

    @property
    def first_line(self) -> str:
        lines = self.message.splitlines()
        return lines[0] if lines else ""


@dataclass(frozen=True)
class Review:
    reviewer: str
    state: str
    submitted_at: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Review:
        return cls(
            reviewer=_login(payload.get("user")),
            state=_text(payload.get("state")).upper(),
            submitted_at=_optional_text(payload.get("submitted_at")),
        )

    @property
    def status_icon(self) -> str:
        return {
            "APPROVED": "✓",
            "CHANGES_REQUESTED": "✗",
            "COMMENTED": "💬",
            "PENDING": "◯",
            "DISMISSED": "⊘",
        }.get(self.state, "○")


__all__ = [
    "Branch",
    "Commit",
    "Job",
    "Label",
    "PullRequest",
    "Review",
    "Step",
    "WorkflowRun",
]
