"""Tests for terminal mode control sequences.

Verifies raw-mode lifecycle safety and the alternate-screen escape payloads.
"""

from __future__ import annotations

import termios
import unittest
from unittest import mock

from logexplorer.runtime.terminal import TerminalController


class TerminalBehaviorTests(unittest.TestCase):
    def test_enable_and_disable_tui_mode_use_alternate_screen_sequences(self) -> None:
        saved_state = [1, 2, 3]

        with mock.patch(
            "logexplorer.runtime.terminal.termios.tcgetattr", return_value=saved_state
        ), mock.patch("logexplorer.runtime.terminal.tty.setraw") as setraw_mock, mock.patch(
            "logexplorer.runtime.terminal.os.write"
        ) as write_mock, mock.patch("logexplorer.runtime.terminal.termios.tcsetattr") as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            controller.enable_tui_mode()
            self.assertTrue(controller.tui_enabled)
            controller.disable_tui_mode()

        setraw_mock.assert_called_once_with(0, termios.TCSAFLUSH)
        self.assertEqual(write_mock.call_args_list[0].args, (1, b"\x1b[?1049h\x1b[?25l"))
        self.assertEqual(write_mock.call_args_list[1].args, (1, b"\x1b[?25h\x1b[?1049l"))
        setattr_mock.assert_called_once_with(0, termios.TCSAFLUSH, saved_state)
        self.assertFalse(controller.tui_enabled)

    def test_raw_mode_restores_terminal_after_exception(self) -> None:
        with mock.patch("logexplorer.runtime.terminal.termios.tcgetattr", return_value=[0]):
            controller = TerminalController(stdin_fd=0, stdout_fd=1)

        with mock.patch.object(controller, "enable_tui_mode") as enable_mock, mock.patch.object(
            controller, "disable_tui_mode"
        ) as disable_mock:
            with self.assertRaises(RuntimeError):
                with controller.raw_mode():
                    raise RuntimeError("boom")

        enable_mock.assert_called_once()
        disable_mock.assert_called_once()

    def test_write_frame_encodes_utf8(self) -> None:
        with mock.patch("logexplorer.runtime.terminal.termios.tcgetattr", return_value=[0]):
            controller = TerminalController(stdin_fd=0, stdout_fd=7)

        with mock.patch("logexplorer.runtime.terminal.os.write") as write_mock:
            controller.write_frame("▶ ok")

        write_mock.assert_called_once_with(7, "▶ ok".encode("utf-8"))


if __name__ == "__main__":
    unittest.main()
