"""Raw terminal ownership for the PR browser.

Switches to raw mode and the alternate screen, and writes whole frames.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

ENTER_TUI = b"\x1b[?1049h\x1b[?25l"
LEAVE_TUI = b"\x1b[?25h\x1b[?1049l"
CLEAR_AND_HOME = "\x1b[H\x1b[2J"


class TerminalController:
    """Raw-mode session plus full-screen frame writer."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Remember the current tty attributes so they can be restored on exit."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_TUI)

    def disable_tui_mode(self) -> None:
        """Show the cursor, restore the main screen and the saved tty state."""
        os.write(self.stdout_fd, LEAVE_TUI)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def size(self) -> tuple[int, int]:
        term = shutil.get_terminal_size((80, 24))
        return term.columns, term.lines

    def write_frame(self, frame: str) -> None:
        """Replace the whole screen with ``frame`` in one write."""
        os.write(self.stdout_fd, (CLEAR_AND_HOME + frame).encode("utf-8", errors="replace"))

    @contextlib.contextmanager
    def raw_mode(self):
        """Run the enclosed block inside the alternate screen, restoring the tty afterwards."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
