"""End-to-end state transitions: keys and channel messages through StateCore."""

from __future__ import annotations

import unittest
from unittest import mock

from lazyhub.gateway.client import RerunScope
from lazyhub.models import Branch, Commit, Job, PullRequest, WorkflowRun
from lazyhub.runtime.channel import MessageChannel
from lazyhub.runtime.core import StateCore, filter_prs, split_names
from lazyhub.runtime.dispatcher import TaskDispatcher
from lazyhub.runtime.keys import KeyHandler
from lazyhub.runtime.messages import (
    CommitsLoaded,
    CurrentUserLoaded,
    DiffLoaded,
    Error,
    JobsLoaded,
    LogsLoaded,
    Notice,
    PrChecksLoaded,
    PrMerged,
    PrsLoaded,
    PrTitleEdited,
    RerunTriggered,
    RunsLoaded,
)
from lazyhub.runtime.navigation import DiffMode, Focus, InputMode, PrFilter, Tab, View
from lazyhub.runtime.state import AppState


class _Clock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _pr(number: int, author: str = "octocat", reviewers: tuple[str, ...] = ()) -> PullRequest:
    return PullRequest(
        number=number,
        title=f"PR {number}",
        body="",
        state="open",
        draft=False,
        merged=False,
        author=author,
        head=Branch(ref=f"feature-{number}", sha=f"sha{number}"),
        base=Branch(ref="main", sha="base"),
        requested_reviewers=reviewers,
    )


def _run(run_id: int, name: str = "CI", status: str = "completed", conclusion: str | None = "failure") -> WorkflowRun:
    return WorkflowRun(
        id=run_id,
        name=name,
        head_branch="main",
        head_sha=f"sha{run_id}",
        status=status,
        conclusion=conclusion,
        run_number=run_id,
        event="push",
    )


def _make_core(**state_kwargs) -> tuple[StateCore, mock.Mock, MessageChannel, _Clock]:
    channel = MessageChannel()
    dispatcher = mock.Mock(spec=TaskDispatcher)
    clock = _Clock()
    state = AppState(repo="acme/widgets", owner="acme", repo_name="widgets", **state_kwargs)
    core = StateCore(state, dispatcher, channel, clock=clock)
    return core, dispatcher, channel, clock


PRS = (_pr(5), _pr(7, author="hubot", reviewers=("octocat",)), _pr(9, author="octocat"))


class PullRequestFlowTests(unittest.TestCase):
    def test_start_fetches_prs_runs_and_user(self) -> None:
        core, dispatcher, _channel, _clock = _make_core()

        core.start()

        dispatcher.fetch_prs.assert_called_once_with()
        dispatcher.fetch_runs.assert_called_once_with()
        dispatcher.fetch_current_user.assert_called_once_with()
        self.assertTrue(core.state.loading)

    def test_enter_on_first_pr_spawns_four_requests(self) -> None:
        core, dispatcher, channel, _clock = _make_core()
        keys = KeyHandler(core)
        channel.send(PrsLoaded(PRS))
        core.drain_messages()

        self.assertEqual([pr.number for pr in core.state.prs], [5, 7, 9])
        self.assertEqual(core.state.pr_selected, 0)
        self.assertFalse(core.state.loading)

        keys.handle("ENTER")

        dispatcher.fetch_diff.assert_called_once_with(5)
        dispatcher.fetch_pr_checks.assert_called_once_with("sha5")
        dispatcher.fetch_reviews.assert_called_once_with(5)
        dispatcher.fetch_commits.assert_called_once_with(5)
        self.assertEqual(core.state.selected_pr.number, 5)
        self.assertEqual((core.state.nav.view, core.state.nav.focus), (View.DETAIL, Focus.DETAIL))

    def test_cursor_wraps_around_list(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        keys = KeyHandler(core)
        channel.send(PrsLoaded(PRS))
        core.drain_messages()

        keys.handle("k")
        self.assertEqual(core.state.highlighted_pr.number, 9)
        keys.handle("j")
        self.assertEqual(core.state.highlighted_pr.number, 5)

    def test_diff_arrives_after_switching_tabs(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        keys = KeyHandler(core)
        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        keys.handle("ENTER")
        keys.handle("2")

        channel.send(DiffLoaded(5, "diff --git a/a.py b/a.py\n@@ -1 +1 @@\n-x\n+y"))
        core.drain_messages()

        self.assertIs(core.state.nav.tab, Tab.ACTIONS)
        self.assertEqual(core.state.pr_diff_lines[1].text, ">> a.py")

    def test_pending_pr_opens_once_prs_load(self) -> None:
        core, dispatcher, channel, _clock = _make_core(pending_pr_number=7)

        channel.send(PrsLoaded(PRS))
        core.drain_messages()

        self.assertIsNone(core.state.pending_pr_number)
        self.assertEqual(core.state.selected_pr.number, 7)
        self.assertIs(core.state.nav.view, View.DETAIL)
        dispatcher.fetch_diff.assert_called_once_with(7)

    def test_pending_pr_not_found_is_reported(self) -> None:
        core, dispatcher, channel, _clock = _make_core(pending_pr_number=404)

        channel.send(PrsLoaded(PRS))
        core.drain_messages()

        self.assertEqual(core.state.status.text, "PR #404 not found among open PRs")
        dispatcher.fetch_diff.assert_not_called()

    def test_merge_removes_pr_and_refetches(self) -> None:
        core, dispatcher, channel, _clock = _make_core()
        keys = KeyHandler(core)
        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        keys.handle("ENTER")
        keys.handle("m")
        dispatcher.merge.assert_called_once_with(5)

        channel.send(PrMerged(5))
        core.drain_messages()

        self.assertEqual([pr.number for pr in core.state.prs], [7, 9])
        self.assertIsNone(core.state.selected_pr)
        self.assertIs(core.state.nav.view, View.LIST)
        self.assertEqual(core.state.status.text, "Merged PR #5")
        dispatcher.fetch_prs.assert_called_once_with()

    def test_title_edit_patches_every_copy(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        core.select_pr()

        channel.send(PrTitleEdited(5, "Renamed"))
        core.drain_messages()

        self.assertEqual(core.state.selected_pr.title, "Renamed")
        self.assertEqual(core.state.prs[0].title, "Renamed")
        self.assertEqual(core.state.all_prs[0].title, "Renamed")

    def test_error_is_shown_until_escape(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        keys = KeyHandler(core)
        core.start()

        channel.send(Error("Failed to fetch PRs: boom"))
        core.drain_messages()

        self.assertEqual(core.state.error, "Failed to fetch PRs: boom")
        self.assertFalse(core.state.loading)
        keys.handle("ESC")
        self.assertIsNone(core.state.error)

    def test_pending_pr_open_keeps_earlier_error(self) -> None:
        core, dispatcher, channel, _clock = _make_core(pending_pr_number=7)
        channel.send(Error("Failed to fetch runs: boom"))
        channel.send(PrsLoaded(PRS))
        core.drain_messages()

        dispatcher.fetch_diff.assert_called_once_with(7)
        self.assertEqual(core.state.error, "Failed to fetch runs: boom")

    def test_new_action_clears_error(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        channel.send(Error("Failed to fetch runs: boom"))
        core.drain_messages()

        core.refresh()

        self.assertIsNone(core.state.error)


class FilterTests(unittest.TestCase):
    def test_filter_is_idempotent(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        channel.send(CurrentUserLoaded("octocat"))
        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        core.state.nav.pr_filter = PrFilter.MINE

        core.apply_filter()
        first = list(core.state.prs)
        core.apply_filter()

        self.assertEqual(core.state.prs, first)
        self.assertEqual([pr.number for pr in first], [5, 9])

    def test_cycle_filter_refilters_locally_and_refetches(self) -> None:
        core, dispatcher, channel, _clock = _make_core()
        channel.send(CurrentUserLoaded("octocat"))
        channel.send(PrsLoaded(PRS))
        core.drain_messages()

        self.assertIs(core.cycle_filter(), PrFilter.MINE)
        self.assertIs(core.cycle_filter(), PrFilter.REVIEW_REQUESTED)

        self.assertEqual([pr.number for pr in core.state.prs], [7])
        self.assertEqual(core.state.status.text, "Filter: Review Requested")
        self.assertEqual(dispatcher.fetch_prs.call_count, 2)

    def test_user_filters_are_empty_until_user_known(self) -> None:
        self.assertEqual(filter_prs(PRS, PrFilter.MINE, None), [])
        self.assertEqual(len(filter_prs(PRS, PrFilter.ALL, None)), 3)

    def test_cursor_clamped_after_filter_shrinks_list(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        channel.send(CurrentUserLoaded("octocat"))
        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        core.state.pr_selected = 2
        core.state.nav.pr_filter = PrFilter.REVIEW_REQUESTED

        core.apply_filter()

        self.assertEqual(core.state.pr_selected, 0)

    def test_split_names(self) -> None:
        self.assertEqual(split_names("bug, ui  bug,,docs"), ("bug", "ui", "docs"))


class StatusExpiryTests(unittest.TestCase):
    def test_notification_expires_after_three_seconds(self) -> None:
        core, _dispatcher, channel, clock = _make_core()
        channel.send(Notice("Approved PR #5"))
        core.drain_messages()

        clock.now = 2.9
        self.assertFalse(core.expire_status())
        self.assertEqual(core.state.status.text, "Approved PR #5")
        clock.now = 3.1
        self.assertTrue(core.expire_status())
        self.assertIsNone(core.state.status)

    def test_prompt_survives_expiry(self) -> None:
        core, _dispatcher, channel, clock = _make_core()
        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        core.begin_input(InputMode.COMMENT)

        clock.now = 3600.0

        self.assertFalse(core.expire_status())
        self.assertEqual(core.state.status.text, "Enter comment:")


class InputFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.core, self.dispatcher, channel, _clock = _make_core()
        self.keys = KeyHandler(self.core)
        channel.send(PrsLoaded(PRS))
        self.core.drain_messages()
        self.keys.handle("ENTER")

    def _type(self, text: str) -> None:
        for ch in text:
            self.keys.handle(ch)

    def test_comment_is_submitted(self) -> None:
        self.keys.handle("c")
        self._type("LGTM")
        self.keys.handle("ENTER")

        self.dispatcher.comment.assert_called_once_with(5, "LGTM")
        self.assertIsNone(self.core.state.input_mode)

    def test_blank_comment_is_ignored(self) -> None:
        self.keys.handle("c")
        self._type("   ")
        self.keys.handle("ENTER")

        self.dispatcher.comment.assert_not_called()

    def test_keys_are_captured_while_typing(self) -> None:
        self.keys.handle("c")
        self._type("q?")

        self.assertFalse(self.core.state.should_quit)
        self.assertFalse(self.core.state.show_help)
        self.assertEqual(self.core.state.input_buffer, "q?")

    def test_escape_cancels_without_submitting(self) -> None:
        self.keys.handle("x")
        self._type("please fix")
        self.keys.handle("ESC")

        self.dispatcher.request_changes.assert_not_called()
        self.assertIsNone(self.core.state.status)

    def test_title_edit_is_prefilled_and_skips_unchanged(self) -> None:
        self.keys.handle("e")
        self.assertEqual(self.core.state.input_buffer, "PR 5")
        self.keys.handle("ENTER")
        self.dispatcher.edit_title.assert_not_called()

        self.keys.handle("e")
        self.keys.handle("BACKSPACE")
        self._type("6")
        self.keys.handle("ENTER")
        self.dispatcher.edit_title.assert_called_once_with(5, "PR 6")

    def test_labels_and_reviewers_are_split(self) -> None:
        self.keys.handle("b")
        self._type("bug, ui")
        self.keys.handle("ENTER")
        self.keys.handle("a")
        self._type("hubot")
        self.keys.handle("ENTER")

        self.dispatcher.add_labels.assert_called_once_with(5, ("bug", "ui"))
        self.dispatcher.add_reviewers.assert_called_once_with(5, ("hubot",))

    def test_copy_checkout_command(self) -> None:
        self.keys.handle("Y")

        self.dispatcher.copy_to_clipboard.assert_called_once_with(
            "gh pr checkout 5 --repo acme/widgets", "checkout command"
        )


class CommitModeTests(unittest.TestCase):
    def test_by_commit_mode_fetches_highlighted_commit(self) -> None:
        core, dispatcher, channel, _clock = _make_core()
        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        core.select_pr()
        commits = (
            Commit(sha="aaaaaaa111", message="first", author="a", date=""),
            Commit(sha="bbbbbbb222", message="second", author="b", date=""),
        )
        channel.send(CommitsLoaded(5, commits))
        core.drain_messages()
        dispatcher.fetch_commit_diff.assert_not_called()

        self.assertIs(core.toggle_diff_mode(), DiffMode.BY_COMMIT)
        dispatcher.fetch_commit_diff.assert_called_once_with("aaaaaaa111")

        self.assertTrue(core.step_commit(1))
        dispatcher.fetch_commit_diff.assert_called_with("bbbbbbb222")
        self.assertTrue(core.step_commit(1))
        self.assertEqual(core.state.pr_commits_selected, 0)

    def test_commits_arriving_in_by_commit_mode_keep_sibling_error(self) -> None:
        core, dispatcher, channel, _clock = _make_core()
        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        core.select_pr()
        core.toggle_diff_mode()

        channel.send(Error("Failed to fetch diff: boom"))
        channel.send(CommitsLoaded(5, (Commit(sha="ccccccc333", message="only", author="c", date=""),)))
        core.drain_messages()

        dispatcher.fetch_commit_diff.assert_called_once_with("ccccccc333")
        self.assertEqual(core.state.error, "Failed to fetch diff: boom")

    def test_step_commit_ignored_in_full_mode(self) -> None:
        core, _dispatcher, _channel, _clock = _make_core()

        self.assertFalse(core.step_commit(1))


class ActionsAndLogsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.core, self.dispatcher, self.channel, _clock = _make_core()
        self.keys = KeyHandler(self.core)
        self.channel.send(RunsLoaded((_run(10), _run(11, name="Deploy"))))
        self.core.drain_messages()
        self.keys.handle("2")

    def test_enter_opens_jobs_and_l_fetches_job_logs(self) -> None:
        self.keys.handle("ENTER")
        self.dispatcher.fetch_jobs.assert_called_once_with(10)
        self.assertIs(self.core.state.nav.view, View.JOBS)

        job = Job(id=20, run_id=10, name="test", status="completed", conclusion="failure")
        self.channel.send(JobsLoaded(10, (job,)))
        self.core.drain_messages()
        self.keys.handle("L")

        self.dispatcher.fetch_logs.assert_called_once_with(10, 20, completed=True)
        self.assertIs(self.core.state.nav.tab, Tab.LOGS)

    def test_logs_are_stripped_and_searchable(self) -> None:
        self.channel.send(LogsLoaded(10, 20, "\x1b[32mok\x1b[0m\nERROR one\nfine\nerror two"))
        self.core.drain_messages()
        self.keys.handle("3")

        self.assertEqual(self.core.state.log_lines[0], "ok")
        self.keys.handle("/")
        for ch in "error":
            self.keys.handle(ch)
        self.keys.handle("ENTER")

        self.assertEqual(self.core.state.log_search.matches, [1, 3])
        self.assertEqual(self.core.state.log_scroll, 1)
        self.keys.handle("n")
        self.assertEqual(self.core.state.log_scroll, 3)
        self.keys.handle("N")
        self.assertEqual(self.core.state.log_scroll, 1)

    def test_search_without_matches_notifies(self) -> None:
        self.channel.send(LogsLoaded(10, None, "alpha\nbeta"))
        self.core.drain_messages()

        self.core.search_logs("gamma")

        self.assertEqual(self.core.state.status.text, "No matches for 'gamma'")

    def test_new_logs_reset_scroll_and_search(self) -> None:
        self.channel.send(LogsLoaded(10, None, "\n".join(f"line {idx}" for idx in range(50))))
        self.core.drain_messages()
        self.core.search_logs("line 4")
        self.core.scroll_logs_horizontal(10)

        self.channel.send(LogsLoaded(10, None, "fresh"))
        self.core.drain_messages()

        self.assertEqual((self.core.state.log_scroll, self.core.state.log_h_scroll), (0, 0))
        self.assertIsNone(self.core.state.log_search.query)

    def test_rerun_marks_run_queued_and_refetches_runs(self) -> None:
        self.keys.handle("R")
        self.dispatcher.rerun.assert_called_once_with(10, "CI")

        self.channel.send(RerunTriggered(10, "CI", RerunScope.FAILED))
        self.core.drain_messages()

        self.assertEqual((self.core.state.runs[0].status, self.core.state.runs[0].conclusion), ("queued", None))
        self.assertEqual(self.core.state.status.text, "Rerun triggered for CI (failed jobs)")
        self.dispatcher.fetch_runs.assert_called_once_with()

    def test_rerun_of_pr_check_refetches_checks(self) -> None:
        self.channel.send(PrsLoaded(PRS))
        self.core.drain_messages()
        self.core.state.nav.jump_to_tab(Tab.PRS)
        self.core.select_pr()
        self.channel.send(PrChecksLoaded("sha5", (_run(30, name="Lint"),)))
        self.core.drain_messages()
        self.dispatcher.reset_mock()

        self.channel.send(RerunTriggered(30, "Lint", RerunScope.ALL))
        self.core.drain_messages()

        self.assertEqual(self.core.state.pr_checks[0].status, "queued")
        self.dispatcher.fetch_pr_checks.assert_called_once_with("sha5")
        self.dispatcher.fetch_runs.assert_not_called()

    def test_refresh_is_tab_relative(self) -> None:
        self.core.refresh()
        self.dispatcher.fetch_runs.assert_called_once_with()
        self.dispatcher.fetch_prs.assert_not_called()

    def test_refreshed_runs_clear_loading_banner(self) -> None:
        self.keys.handle("r")
        self.assertTrue(self.core.state.loading)

        self.channel.send(RunsLoaded((_run(12),)))
        self.core.drain_messages()

        self.assertFalse(self.core.state.loading)
        self.assertIsNone(self.core.state.loading_what)
        self.assertEqual([run.id for run in self.core.state.runs], [12])

    def test_startup_banner_waits_for_prs_when_runs_arrive_first(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        core.start()

        channel.send(RunsLoaded((_run(10),)))
        core.drain_messages()
        self.assertTrue(core.state.loading)

        channel.send(PrsLoaded(PRS))
        core.drain_messages()
        self.assertFalse(core.state.loading)


class DrainIndependenceTests(unittest.TestCase):
    def test_messages_apply_in_arrival_order_regardless_of_origin(self) -> None:
        core, _dispatcher, channel, _clock = _make_core()
        channel.send(RunsLoaded((_run(10),)))
        channel.send(PrsLoaded(PRS))
        channel.send(RunsLoaded((_run(11),)))

        self.assertEqual(core.drain_messages(), 3)
        self.assertEqual([run.id for run in core.state.runs], [11])
        self.assertEqual(len(core.state.prs), 3)
        self.assertEqual(core.drain_messages(), 0)


if __name__ == "__main__":
    unittest.main()
