"""Navigation state: which tab, view, pane focus, filter and diff mode are active.

The enums combine into one :class:`NavigationState`. Transitions are named
methods so key handlers never assemble combinations by hand; ``Focus`` only
carries meaning while ``Tab.PRS`` shows its list or detail view.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Tab(Enum):
    PRS = "PRs"
    ACTIONS = "Actions"
    LOGS = "Logs"

    def next(self) -> Tab:
        members = list(Tab)
        return members[(members.index(self) + 1) % len(members)]

    def previous(self) -> Tab:
        members = list(Tab)
        return members[(members.index(self) - 1) % len(members)]


class View(Enum):
    LIST = "list"
    DETAIL = "detail"
    DIFF = "diff"
    JOBS = "jobs"


class Focus(Enum):
    LIST = "list"
    DETAIL = "detail"
    PR_CHECKS = "checks"

    def next(self) -> Focus:
        members = list(Focus)
        return members[(members.index(self) + 1) % len(members)]


class PrFilter(Enum):
    ALL = "All"
    MINE = "Mine"
    REVIEW_REQUESTED = "Review Requested"

    def next(self) -> PrFilter:
        members = list(PrFilter)
        return members[(members.index(self) + 1) % len(members)]


class DiffMode(Enum):
    FULL = "full"
    BY_COMMIT = "by-commit"


class InputMode(Enum):
    """Line-editing overlays; each commits its buffer to one action."""

    SEARCH = "Search"
    COMMENT = "Comment"
    REQUEST_CHANGES = "Request Changes"
    EDIT_TITLE = "Edit PR Title"
    ADD_LABEL = "Add Label"
    ADD_REVIEWER = "Add Reviewer"


@dataclass
class NavigationState:
    tab: Tab = Tab.PRS
    view: View = View.LIST
    focus: Focus = Focus.LIST
    pr_filter: PrFilter = PrFilter.ALL
    diff_mode: DiffMode = DiffMode.FULL

    @property
    def pr_panes_visible(self) -> bool:
        """True while the PR list/detail split (and thus ``focus``) is on screen."""
        return self.tab is Tab.PRS and self.view in {View.LIST, View.DETAIL}

    def jump_to_tab(self, tab: Tab) -> None:
        self.tab = tab
        if tab is Tab.PRS:
            self.view = View.LIST
            self.focus = Focus.LIST
        elif tab is Tab.ACTIONS:
            self.view = View.LIST

    def open_detail(self) -> None:
        self.view = View.DETAIL
        self.focus = Focus.DETAIL

    def close_detail(self) -> None:
        self.view = View.LIST
        self.focus = Focus.LIST

    def focus_left(self) -> None:
        self.focus = Focus.LIST

    def focus_right(self) -> None:
        if self.focus is Focus.LIST:
            self.focus = Focus.DETAIL
        elif self.focus is Focus.DETAIL:
            self.focus = Focus.PR_CHECKS

    def cycle_focus(self) -> None:
        self.focus = self.focus.next()

    def open_diff(self) -> None:
        self.view = View.DIFF

    def close_diff(self) -> None:
        self.view = View.DETAIL

    def open_jobs(self) -> None:
        self.tab = Tab.ACTIONS
        self.view = View.JOBS

    def close_jobs(self) -> None:
        self.view = View.LIST

    def open_logs(self) -> None:
        self.tab = Tab.LOGS

    def close_logs(self) -> None:
        self.tab = Tab.ACTIONS

    def cycle_filter(self) -> PrFilter:
        self.pr_filter = self.pr_filter.next()
        return self.pr_filter

    def toggle_diff_mode(self) -> DiffMode:
        self.diff_mode = DiffMode.BY_COMMIT if self.diff_mode is DiffMode.FULL else DiffMode.FULL
        return self.diff_mode


__all__ = [
    "DiffMode",
    "Focus",
    "InputMode",
    "NavigationState",
    "PrFilter",
    "Tab",
    "View",
]
