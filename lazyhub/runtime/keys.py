"""Keyboard dispatch with a strict precedence order.

Ctrl-C always quits. While an input overlay is open it captures every key;
while help is shown only its close keys work. Otherwise Esc first dismisses a
pending error, then global keys are tried, then the keys of the active tab
and view.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .core import LOG_H_STEP, PAGE_LINES, StateCore
from .navigation import Focus, InputMode, Tab, View


@dataclass(frozen=True)
class KeyBinding:
    """One or more key tokens bound to a single action."""

    keys: tuple[str, ...]
    action: Callable[[], object]


class KeyTable:
    """Exact-match token to action table."""

    def __init__(self, *bindings: KeyBinding) -> None:
        self._actions: dict[str, Callable[[], object]] = {}
        for binding in bindings:
            for key in binding.keys:
                self._actions[key] = binding.action

    def __contains__(self, key: str) -> bool:
        return key in self._actions

    def dispatch(self, key: str) -> bool:
        """Run the action bound to ``key``; return whether one was bound."""
        action = self._actions.get(key)
        if action is None:
            return False
        action()
        return True


def _bind(*keys: str) -> Callable[[Callable[[], object]], KeyBinding]:
    return lambda action: KeyBinding(keys, action)


class KeyHandler:
    """Routes key tokens from ``read_key`` to :class:`StateCore` mutators."""

    def __init__(self, core: StateCore) -> None:
        self.core = core
        self.state = core.state
        nav = self.state.nav
        c = core

        self.global_keys = KeyTable(
            _bind("q")(c.quit),
            _bind("?")(c.toggle_help),
            _bind("1")(lambda: nav.jump_to_tab(Tab.PRS)),
            _bind("2")(lambda: nav.jump_to_tab(Tab.ACTIONS)),
            _bind("3")(lambda: nav.jump_to_tab(Tab.LOGS)),
            _bind("TAB")(lambda: nav.jump_to_tab(nav.tab.next())),
            _bind("SHIFT_TAB")(lambda: nav.jump_to_tab(nav.tab.previous())),
            _bind("r")(c.refresh),
        )
        self.pr_pane_keys = KeyTable(
            _bind("j", "DOWN")(lambda: self._move_pr_focus(1)),
            _bind("k", "UP")(lambda: self._move_pr_focus(-1)),
            _bind("h", "LEFT")(nav.focus_left),
            _bind("l", "RIGHT")(nav.focus_right),
            _bind("o")(nav.cycle_focus),
            _bind("ENTER")(self._pr_enter),
            _bind("ESC")(self._pr_escape),
            _bind("d")(self._open_diff),
            _bind("v")(c.approve),
            _bind("x")(lambda: c.begin_input(InputMode.REQUEST_CHANGES)),
            _bind("c")(lambda: c.begin_input(InputMode.COMMENT)),
            _bind("m")(c.merge),
            _bind("C")(c.checkout),
            _bind("f")(c.cycle_filter),
            _bind("R")(c.rerun_selected_check),
            _bind("L")(c.open_check_jobs),
            _bind("e")(lambda: c.begin_input(InputMode.EDIT_TITLE)),
            _bind("a")(lambda: c.begin_input(InputMode.ADD_REVIEWER)),
            _bind("b")(lambda: c.begin_input(InputMode.ADD_LABEL)),
            _bind("w")(c.open_in_browser),
            _bind("p")(c.toggle_diff_mode),
            _bind("[")(lambda: c.step_commit(-1)),
            _bind("]")(lambda: c.step_commit(1)),
            _bind("y")(c.copy_branch),
            _bind("Y")(c.copy_checkout_command),
            _bind("u")(c.copy_pr_url),
        )
        self.diff_keys = KeyTable(
            _bind("j", "DOWN")(lambda: c.scroll_diff(1)),
            _bind("k", "UP")(lambda: c.scroll_diff(-1)),
            _bind("PAGE_DOWN")(lambda: c.scroll_diff(PAGE_LINES)),
            _bind("PAGE_UP")(lambda: c.scroll_diff(-PAGE_LINES)),
            _bind("p")(c.toggle_diff_mode),
            _bind("[")(lambda: c.step_commit(-1)),
            _bind("]")(lambda: c.step_commit(1)),
            _bind("ESC")(nav.close_diff),
        )
        self.run_list_keys = KeyTable(
            _bind("j", "DOWN")(c.next_run),
            _bind("k", "UP")(c.previous_run),
            _bind("ENTER")(c.select_run),
            _bind("R")(c.rerun_selected_run),
        )
        self.job_keys = KeyTable(
            _bind("j", "DOWN")(c.next_job),
            _bind("k", "UP")(c.previous_job),
            _bind("ENTER", "L")(c.fetch_logs),
            _bind("ESC")(nav.close_jobs),
            _bind("R")(c.rerun_selected_run),
        )
        self.log_keys = KeyTable(
            _bind("j", "DOWN")(lambda: c.scroll_logs(1)),
            _bind("k", "UP")(lambda: c.scroll_logs(-1)),
            _bind("h", "LEFT")(lambda: c.scroll_logs_horizontal(-LOG_H_STEP)),
            _bind("l", "RIGHT")(lambda: c.scroll_logs_horizontal(LOG_H_STEP)),
            _bind("PAGE_DOWN")(lambda: c.scroll_logs(PAGE_LINES)),
            _bind("PAGE_UP")(lambda: c.scroll_logs(-PAGE_LINES)),
            _bind("g")(c.logs_top),
            _bind("G")(c.logs_bottom),
            _bind("0")(c.logs_line_start),
            _bind("/")(lambda: c.begin_input(InputMode.SEARCH)),
            _bind("n")(c.next_log_match),
            _bind("N")(c.previous_log_match),
            _bind("ESC")(c.close_logs),
        )

    def handle(self, key: str) -> bool:
        """Apply one key token; return ``True`` when the key changed anything."""
        state = self.state
        if key == "CTRL_C":
            self.core.quit()
            return True
        if state.input_mode is not None:
            return self._handle_input_key(key)
        if state.show_help:
            if key in {"ESC", "?"}:
                state.show_help = False
                return True
            return False
        if key == "ESC" and self.core.dismiss_error():
            return True
        if self.global_keys.dispatch(key):
            return True
        nav = state.nav
        if key == "n" and nav.tab is Tab.PRS and nav.view is View.LIST:
            self.core.create_pr()
            return True
        return self.active_table().dispatch(key)

    def active_table(self) -> KeyTable:
        nav = self.state.nav
        if nav.tab is Tab.PRS:
            return self.diff_keys if nav.view is View.DIFF else self.pr_pane_keys
        if nav.tab is Tab.ACTIONS:
            return self.job_keys if nav.view is View.JOBS else self.run_list_keys
        return self.log_keys

    def _handle_input_key(self, key: str) -> bool:
        core = self.core
        if key == "ESC":
            core.cancel_input()
        elif key == "ENTER":
            core.commit_input()
        elif key == "BACKSPACE":
            core.input_backspace()
        elif len(key) == 1 and key.isprintable():
            core.input_char(key)
        else:
            return False
        return True

    def _move_pr_focus(self, step: int) -> None:
        focus = self.state.nav.focus
        if focus is Focus.LIST:
            if step > 0:
                self.core.next_pr()
            else:
                self.core.previous_pr()
        elif focus is Focus.DETAIL:
            self.core.scroll_diff(step)
        elif step > 0:
            self.core.next_pr_check()
        else:
            self.core.previous_pr_check()

    def _pr_enter(self) -> None:
        focus = self.state.nav.focus
        if focus is Focus.LIST:
            if self.core.select_pr():
                self.state.nav.open_detail()
        elif focus is Focus.PR_CHECKS:
            self.core.open_check_jobs()

    def _pr_escape(self) -> None:
        if self.state.nav.view is View.DETAIL:
            self.state.nav.close_detail()

    def _open_diff(self) -> None:
        if self.state.selected_pr is None:
            self.core.notify("Open a PR with Enter first")
            return
        self.state.diff_scroll = 0
        self.state.nav.open_diff()


def handle_key(core: StateCore, key: str) -> bool:
    """One-off dispatch; the event loop keeps a long-lived :class:`KeyHandler`."""
    return KeyHandler(core).handle(key)


__all__ = ["KeyBinding", "KeyHandler", "KeyTable", "handle_key"]
