"""Tests for key dispatch precedence across overlays, globals and panes."""

from __future__ import annotations

import unittest
from unittest import mock

from lazyhub.models import Branch, PullRequest
from lazyhub.runtime.channel import MessageChannel
from lazyhub.runtime.core import StateCore
from lazyhub.runtime.dispatcher import TaskDispatcher
from lazyhub.runtime.keys import KeyBinding, KeyHandler, KeyTable, handle_key
from lazyhub.runtime.messages import PrsLoaded
from lazyhub.runtime.navigation import Focus, InputMode, Tab, View
from lazyhub.runtime.state import AppState


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


def _make_handler(with_prs: bool = True) -> tuple[KeyHandler, mock.Mock]:
    dispatcher = mock.Mock(spec=TaskDispatcher)
    core = StateCore(AppState(repo="acme/widgets", owner="acme", repo_name="widgets"), dispatcher, MessageChannel())
    if with_prs:
        core.apply_message(PrsLoaded((_pr(5), _pr(7))))
    return KeyHandler(core), dispatcher


class KeyTableTests(unittest.TestCase):
    def test_dispatch_reports_whether_key_was_bound(self) -> None:
        calls: list[str] = []
        table = KeyTable(KeyBinding(("a", "b"), lambda: calls.append("hit")))

        self.assertTrue(table.dispatch("b"))
        self.assertFalse(table.dispatch("z"))
        self.assertIn("a", table)
        self.assertEqual(calls, ["hit"])


class KeyPrecedenceTests(unittest.TestCase):
    def test_ctrl_c_quits_even_while_typing(self) -> None:
        handler, _dispatcher = _make_handler()
        handler.core.begin_input(InputMode.COMMENT)

        self.assertTrue(handler.handle("CTRL_C"))
        self.assertTrue(handler.state.should_quit)

    def test_q_quits_outside_input(self) -> None:
        handler, _dispatcher = _make_handler()

        handler.handle("q")

        self.assertTrue(handler.state.should_quit)

    def test_help_swallows_other_keys(self) -> None:
        handler, dispatcher = _make_handler()
        handler.handle("?")

        self.assertFalse(handler.handle("2"))
        self.assertFalse(handler.handle("q"))
        self.assertIs(handler.state.nav.tab, Tab.PRS)
        self.assertFalse(handler.state.should_quit)

        self.assertTrue(handler.handle("ESC"))
        self.assertFalse(handler.state.show_help)

    def test_escape_dismisses_error_before_closing_detail(self) -> None:
        handler, _dispatcher = _make_handler()
        handler.handle("ENTER")
        handler.state.error = "Failed to fetch diff: boom"

        handler.handle("ESC")
        self.assertIsNone(handler.state.error)
        self.assertIs(handler.state.nav.view, View.DETAIL)

        handler.handle("ESC")
        self.assertIs(handler.state.nav.view, View.LIST)

    def test_number_keys_jump_tabs(self) -> None:
        handler, _dispatcher = _make_handler()

        handler.handle("3")
        self.assertIs(handler.state.nav.tab, Tab.LOGS)
        handler.handle("TAB")
        self.assertIs(handler.state.nav.tab, Tab.PRS)
        handler.handle("SHIFT_TAB")
        self.assertIs(handler.state.nav.tab, Tab.LOGS)

    def test_n_creates_pr_only_on_pr_list(self) -> None:
        handler, dispatcher = _make_handler()

        handler.handle("n")
        dispatcher.create_pr.assert_called_once_with()

        handler.handle("ENTER")
        handler.handle("n")
        dispatcher.create_pr.assert_called_once_with()

    def test_n_on_logs_tab_is_next_match(self) -> None:
        handler, dispatcher = _make_handler()
        handler.handle("3")

        self.assertTrue(handler.handle("n"))
        dispatcher.create_pr.assert_not_called()

    def test_diff_requires_an_opened_pr(self) -> None:
        handler, _dispatcher = _make_handler()

        handler.handle("d")

        self.assertIs(handler.state.nav.view, View.LIST)
        self.assertEqual(handler.state.status.text, "Open a PR with Enter first")

    def test_diff_view_routes_j_to_scrolling(self) -> None:
        handler, _dispatcher = _make_handler()
        handler.handle("ENTER")
        handler.handle("d")

        self.assertIs(handler.state.nav.view, View.DIFF)
        self.assertIs(handler.active_table(), handler.diff_keys)
        handler.handle("ESC")
        self.assertIs(handler.state.nav.view, View.DETAIL)

    def test_j_follows_focus(self) -> None:
        handler, _dispatcher = _make_handler()

        handler.handle("j")
        self.assertEqual(handler.state.pr_selected, 1)

        handler.handle("l")
        handler.handle("l")
        self.assertIs(handler.state.nav.focus, Focus.PR_CHECKS)
        handler.handle("j")
        self.assertEqual(handler.state.pr_selected, 1)

    def test_unbound_key_reports_false(self) -> None:
        handler, _dispatcher = _make_handler()

        self.assertFalse(handler.handle("Z"))

    def test_actions_with_no_prs_notify(self) -> None:
        handler, dispatcher = _make_handler(with_prs=False)

        handler.handle("v")

        dispatcher.approve.assert_not_called()
        self.assertEqual(handler.state.status.text, "No PR selected")

    def test_handle_key_helper(self) -> None:
        handler, _dispatcher = _make_handler()

        self.assertTrue(handle_key(handler.core, "2"))
        self.assertIs(handler.state.nav.tab, Tab.ACTIONS)


if __name__ == "__main__":
    unittest.main()
