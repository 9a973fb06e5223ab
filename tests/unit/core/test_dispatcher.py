"""Tests for background task units: one remote call, one message."""

from __future__ import annotations

import threading
import unittest
from types import SimpleNamespace
from unittest import mock

from lazyhub.cache import ArtifactCache, ArtifactKind
from lazyhub.gateway.client import GatewayError, LogsUnavailable, RerunScope
from lazyhub.gateway.helper import HelperError
from lazyhub.models import Branch, PullRequest
from lazyhub.runtime.channel import MessageChannel
from lazyhub.runtime.dispatcher import LOGS_UNAVAILABLE_TEXT, TaskDispatcher, spawn_thread
from lazyhub.runtime.messages import (
    CommitDiffLoaded,
    Error,
    LogsLoaded,
    Notice,
    PrMerged,
    PrsLoaded,
    RerunTriggered,
)


def _pr(number: int) -> PullRequest:
    return PullRequest(
        number=number,
        title=f"PR {number}",
        body="",
        state="open",
        draft=False,
        merged=False,
        author="octocat",
        head=Branch(ref=f"feature-{number}", sha=f"sha{number}"),
        base=Branch(ref="main", sha="base"),
    )


class _SyncSpawn:
    """Runs each unit inline and records the task labels."""

    def __init__(self) -> None:
        self.labels: list[str] = []

    def __call__(self, label, unit) -> None:
        self.labels.append(label)
        unit()


def _make_dispatcher(gateway=None, helper=None):
    channel = MessageChannel()
    spawn = _SyncSpawn()
    cache = ArtifactCache()
    dispatcher = TaskDispatcher(
        gateway or mock.Mock(),
        cache,
        channel,
        "acme",
        "widgets",
        helper=helper or mock.Mock(),
        spawn=spawn,
    )
    return dispatcher, channel, spawn, cache


class TaskDispatcherFetchTests(unittest.TestCase):
    def test_fetch_prs_posts_prs_loaded(self) -> None:
        gateway = mock.Mock()
        gateway.list_pull_requests.return_value = [_pr(5), _pr(7)]
        dispatcher, channel, spawn, _cache = _make_dispatcher(gateway)

        dispatcher.fetch_prs()

        gateway.list_pull_requests.assert_called_once_with("acme", "widgets")
        self.assertEqual(channel.drain(), [PrsLoaded((_pr(5), _pr(7)))])
        self.assertEqual(spawn.labels, ["prs"])

    def test_failure_becomes_prefixed_error(self) -> None:
        gateway = mock.Mock()
        gateway.list_pull_requests.side_effect = GatewayError("GET /repos/acme/widgets/pulls failed with 502")
        dispatcher, channel, _spawn, _cache = _make_dispatcher(gateway)

        dispatcher.fetch_prs()

        self.assertEqual(
            channel.drain(),
            [Error("Failed to fetch PRs: GET /repos/acme/widgets/pulls failed with 502")],
        )

    def test_unexpected_exception_still_posts_exactly_one_message(self) -> None:
        gateway = mock.Mock()
        gateway.list_runs.side_effect = KeyError("workflow_runs")
        dispatcher, channel, _spawn, _cache = _make_dispatcher(gateway)

        dispatcher.fetch_runs()

        messages = channel.drain()
        self.assertEqual(len(messages), 1)
        self.assertIsInstance(messages[0], Error)
        self.assertTrue(messages[0].text.startswith("Failed to fetch runs: "))

    def test_commit_diff_is_served_from_cache_on_second_request(self) -> None:
        gateway = mock.Mock()
        gateway.commit_diff.return_value = "diff --git a/x b/x"
        dispatcher, channel, _spawn, cache = _make_dispatcher(gateway)

        dispatcher.fetch_commit_diff("abc1234")
        dispatcher.fetch_commit_diff("abc1234")

        gateway.commit_diff.assert_called_once_with("acme", "widgets", "abc1234")
        self.assertEqual(channel.drain(), [CommitDiffLoaded("abc1234", "diff --git a/x b/x")] * 2)
        self.assertIn((ArtifactKind.COMMIT_DIFF, "abc1234"), cache)

    def test_completed_job_logs_are_cached(self) -> None:
        gateway = mock.Mock()
        gateway.run_logs.return_value = "step 1\nstep 2"
        dispatcher, channel, _spawn, cache = _make_dispatcher(gateway)

        dispatcher.fetch_logs(10, 20, completed=True)
        dispatcher.fetch_logs(10, 20, completed=True)

        gateway.run_logs.assert_called_once_with("acme", "widgets", 10, 20)
        self.assertIn((ArtifactKind.JOB_LOG, 20), cache)
        self.assertEqual(channel.drain(), [LogsLoaded(10, 20, "step 1\nstep 2")] * 2)

    def test_running_job_logs_are_not_cached(self) -> None:
        gateway = mock.Mock()
        gateway.run_logs.return_value = "partial"
        dispatcher, _channel, _spawn, cache = _make_dispatcher(gateway)

        dispatcher.fetch_logs(10, 20, completed=False)
        dispatcher.fetch_logs(10, 20, completed=False)

        self.assertEqual(gateway.run_logs.call_count, 2)
        self.assertEqual(len(cache), 0)

    def test_run_level_logs_are_not_cached(self) -> None:
        gateway = mock.Mock()
        gateway.run_logs.return_value = "bundle"
        dispatcher, channel, _spawn, cache = _make_dispatcher(gateway)

        dispatcher.fetch_logs(10)

        gateway.run_logs.assert_called_once_with("acme", "widgets", 10, None)
        self.assertEqual(len(cache), 0)
        self.assertEqual(channel.drain(), [LogsLoaded(10, None, "bundle")])

    def test_missing_logs_become_placeholder_text(self) -> None:
        gateway = mock.Mock()
        gateway.run_logs.side_effect = LogsUnavailable("not found", status=404)
        dispatcher, channel, _spawn, cache = _make_dispatcher(gateway)

        dispatcher.fetch_logs(10, 20, completed=True)

        self.assertEqual(channel.drain(), [LogsLoaded(10, 20, LOGS_UNAVAILABLE_TEXT)])
        self.assertEqual(len(cache), 0)


class TaskDispatcherActionTests(unittest.TestCase):
    def test_approve_posts_notice(self) -> None:
        gateway = mock.Mock()
        dispatcher, channel, _spawn, _cache = _make_dispatcher(gateway)

        dispatcher.approve(5)

        gateway.approve.assert_called_once_with("acme", "widgets", 5)
        self.assertEqual(channel.drain(), [Notice("Approved PR #5")])

    def test_merge_posts_pr_merged(self) -> None:
        dispatcher, channel, _spawn, _cache = _make_dispatcher()

        dispatcher.merge(9)

        self.assertEqual(channel.drain(), [PrMerged(9)])

    def test_rerun_reports_scope(self) -> None:
        gateway = mock.Mock()
        gateway.rerun.return_value = RerunScope.ALL
        dispatcher, channel, _spawn, _cache = _make_dispatcher(gateway)

        dispatcher.rerun(77, "CI")

        self.assertEqual(channel.drain(), [RerunTriggered(77, "CI", RerunScope.ALL)])

    def test_checkout_uses_helper_with_full_repo(self) -> None:
        helper = mock.Mock()
        dispatcher, channel, _spawn, _cache = _make_dispatcher(helper=helper)

        dispatcher.checkout(5)

        helper.checkout_pr.assert_called_once_with("acme/widgets", 5)
        self.assertEqual(channel.drain(), [Notice("Checked out PR #5")])

    def test_checkout_failure_message(self) -> None:
        helper = SimpleNamespace(checkout_pr=mock.Mock(side_effect=HelperError("gh is not installed")))
        dispatcher, channel, _spawn, _cache = _make_dispatcher(helper=helper)

        dispatcher.checkout(5)

        self.assertEqual(channel.drain(), [Error("Checkout failed: gh is not installed")])

    def test_clipboard_notice_names_what_was_copied(self) -> None:
        helper = mock.Mock()
        dispatcher, channel, _spawn, _cache = _make_dispatcher(helper=helper)

        dispatcher.copy_to_clipboard("feature-5", "branch feature-5")

        helper.copy_to_clipboard.assert_called_once_with("feature-5")
        self.assertEqual(channel.drain(), [Notice("Copied branch feature-5")])


class SpawnThreadTests(unittest.TestCase):
    def test_unit_runs_on_named_daemon_thread(self) -> None:
        seen: dict[str, object] = {}
        done = threading.Event()

        def unit() -> None:
            current = threading.current_thread()
            seen["name"] = current.name
            seen["daemon"] = current.daemon
            done.set()

        spawn_thread("prs", unit)

        self.assertTrue(done.wait(timeout=5))
        self.assertEqual(seen, {"name": "lazyhub-task-prs", "daemon": True})


if __name__ == "__main__":
    unittest.main()
