"""REST client for the hosting provider's pull-request and Actions endpoints.

Each public method is one remote action and either returns typed entities or
raises :class:`GatewayError`. Calls are blocking and are only ever issued from
dispatcher worker threads, never from the UI loop.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import requests

from ..models import Commit, Job, PullRequest, Review, WorkflowRun
from .logs import flatten_log_bundle

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "lazyhub"
DIFF_MEDIA_TYPE = "application/vnd.github.diff"
REQUEST_TIMEOUT_SECONDS = 30
HTTP_ERROR_STATUS = 400
HTTP_NOT_FOUND = 404


class GatewayError(RuntimeError):
    """Raised when a remote call fails; the message is user-presentable."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class LogsUnavailable(GatewayError):
    """Raised when logs do not exist yet (queued or still running)."""


class RerunScope(Enum):
    FAILED = "failed jobs"
    ALL = "all jobs"


@dataclass
class GitHubGateway:
    """Blocking client scoped to one token; safe to share across threads."""

    token: str
    base_url: str = DEFAULT_API_URL
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/vnd.github+json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
        accept: str | None = None,
    ) -> requests.Response:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        headers = {"Accept": accept} if accept else None
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            raise GatewayError(f"{method} {path} failed: {exc}") from exc
        if response.status_code >= HTTP_ERROR_STATUS:
            raise GatewayError(
                f"{method} {path} failed with {response.status_code}{_error_detail(response)}",
                status=response.status_code,
            )
        return response

    def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"{method} {path} returned malformed JSON") from exc

    # ---- identity -----------------------------------------------------
    def current_user(self) -> str:
        data = self._json("GET", "/user")
        login = data.get("login") if isinstance(data, dict) else None
        if not isinstance(login, str) or not login:
            raise GatewayError("No login field in user response")
        return login

    # ---- pull requests ------------------------------------------------
    def list_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        data = self._json(
            "GET",
            f"/repos/{owner}/{repo}/pulls",
            params={"state": "open", "per_page": 50},
        )
        return [PullRequest.from_api(item) for item in _objects(data)]

    def pull_request_diff(self, owner: str, repo: str, number: int) -> str:
        return self._request("GET", f"/repos/{owner}/{repo}/pulls/{number}", accept=DIFF_MEDIA_TYPE).text

    def list_commits(self, owner: str, repo: str, number: int) -> list[Commit]:
        data = self._json(
            "GET",
            f"/repos/{owner}/{repo}/pulls/{number}/commits",
            params={"per_page": 100},
        )
        return [Commit.from_api(item) for item in _objects(data)]

    def commit_diff(self, owner: str, repo: str, sha: str) -> str:
        return self._request("GET", f"/repos/{owner}/{repo}/commits/{sha}", accept=DIFF_MEDIA_TYPE).text

    def list_reviews(self, owner: str, repo: str, number: int) -> list[Review]:
        data = self._json("GET", f"/repos/{owner}/{repo}/pulls/{number}/reviews")
        return [Review.from_api(item) for item in _objects(data)]

    def approve(self, owner: str, repo: str, number: int) -> None:
        self._request("POST", f"/repos/{owner}/{repo}/pulls/{number}/reviews", json_body={"event": "APPROVE"})

    def request_changes(self, owner: str, repo: str, number: int, body: str) -> None:
        self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls/{number}/reviews",
            json_body={"event": "REQUEST_CHANGES", "body": body},
        )

    def comment(self, owner: str, repo: str, number: int, body: str) -> None:
        # Pull requests share the issue number space for conversation comments.
        self._request("POST", f"/repos/{owner}/{repo}/issues/{number}/comments", json_body={"body": body})

    def merge(self, owner: str, repo: str, number: int) -> None:
        self._request(
            "PUT",
            f"/repos/{owner}/{repo}/pulls/{number}/merge",
            json_body={"merge_method": "squash"},
        )

    def edit_title(self, owner: str, repo: str, number: int, title: str) -> None:
        self._request("PATCH", f"/repos/{owner}/{repo}/pulls/{number}", json_body={"title": title})

    def add_labels(self, owner: str, repo: str, number: int, labels: Iterable[str]) -> None:
        names = list(labels)
        if not names:
            return
        self._request("POST", f"/repos/{owner}/{repo}/issues/{number}/labels", json_body={"labels": names})

    def add_reviewers(self, owner: str, repo: str, number: int, reviewers: Iterable[str]) -> None:
        logins = list(reviewers)
        if not logins:
            return
        self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls/{number}/requested_reviewers",
            json_body={"reviewers": logins},
        )

    # ---- actions ------------------------------------------------------
    def list_runs(self, owner: str, repo: str) -> list[WorkflowRun]:
        return self._runs(f"/repos/{owner}/{repo}/actions/runs", {"per_page": 30})

    def list_runs_for_commit(self, owner: str, repo: str, sha: str) -> list[WorkflowRun]:
        return self._runs(f"/repos/{owner}/{repo}/actions/runs", {"head_sha": sha, "per_page": 20})

    def _runs(self, path: str, params: dict[str, Any]) -> list[WorkflowRun]:
        data = self._json("GET", path, params=params)
        items = data.get("workflow_runs") if isinstance(data, dict) else None
        return [WorkflowRun.from_api(item) for item in _objects(items)]

    def list_jobs(self, owner: str, repo: str, run_id: int) -> list[Job]:
        data = self._json("GET", f"/repos/{owner}/{repo}/actions/runs/{run_id}/jobs", params={"per_page": 50})
        items = data.get("jobs") if isinstance(data, dict) else None
        return [Job.from_api(item) for item in _objects(items)]

    def run_logs(self, owner: str, repo: str, run_id: int, job_id: int | None = None) -> str:
        """Fetch logs for one job, or the whole run's log bundle when ``job_id`` is None."""
        if job_id is not None:
            path = f"/repos/{owner}/{repo}/actions/jobs/{job_id}/logs"
        else:
            path = f"/repos/{owner}/{repo}/actions/runs/{run_id}/logs"
        try:
            response = self._request("GET", path)
        except GatewayError as exc:
            if exc.status == HTTP_NOT_FOUND:
                raise LogsUnavailable(str(exc), status=exc.status) from exc
            raise
        return flatten_log_bundle(response.content)

    def rerun(self, owner: str, repo: str, run_id: int) -> RerunScope:
        """Rerun failed jobs only, falling back to a full rerun when rejected."""
        try:
            self._request("POST", f"/repos/{owner}/{repo}/actions/runs/{run_id}/rerun-failed-jobs")
            return RerunScope.FAILED
        except GatewayError as exc:
            logger.info("rerun-failed-jobs rejected for run %s (%s); retrying full rerun", run_id, exc)
        self._request("POST", f"/repos/{owner}/{repo}/actions/runs/{run_id}/rerun")
        return RerunScope.ALL


def _objects(data: object) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


def _error_detail(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return ""
    message = data.get("message") if isinstance(data, dict) else None
    return f": {message}" if isinstance(message, str) and message else ""


__all__ = [
    "DEFAULT_API_URL",
    "GatewayError",
    "GitHubGateway",
    "LogsUnavailable",
    "RerunScope",
]
