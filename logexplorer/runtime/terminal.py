"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle and alternate-screen switching, and writes composed
frames straight to the output file descriptor.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty


class TerminalController:
    """Manage terminal mode transitions for one interactive session."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._tui_enabled = False

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")
        self._tui_enabled = True

    def disable_tui_mode(self) -> None:
        """Show the cursor, restore the main screen buffer and saved tty state."""
        os.write(self.stdout_fd, b"\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        self._tui_enabled = False

    @property
    def tui_enabled(self) -> bool:
        return self._tui_enabled

    def size(self) -> tuple[int, int]:
        """Return ``(columns, rows)`` of the terminal."""
        term = shutil.get_terminal_size((100, 30))
        return max(1, term.columns), max(1, term.lines)

    def write_frame(self, frame: str) -> None:
        os.write(self.stdout_fd, frame.encode("utf-8", errors="replace"))

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
