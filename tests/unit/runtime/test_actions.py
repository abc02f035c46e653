"""Tests for clipboard and external-editor context actions."""

from __future__ import annotations

import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from logexplorer.runtime import actions
from logexplorer.runtime.actions import ActionRunner, ContextAction, launch_editor, page_export_text
from logexplorer.search.records import LogRecord

RECORD = LogRecord(
    timestamp="2024-05-01T10:00:00Z",
    message="Payment failed",
    severity="ERROR",
    logger="billing.Gateway",
    stacktrace="java.lang.IllegalStateException\n\tat Gateway.pay",
)


class ClipboardTests(unittest.TestCase):
    def test_first_available_tool_receives_text(self) -> None:
        with mock.patch("logexplorer.runtime.actions.sys.platform", "linux"), mock.patch(
            "logexplorer.runtime.actions.os.name", "posix"
        ), mock.patch(
            "logexplorer.runtime.actions.shutil.which",
            side_effect=lambda name: "/usr/bin/xclip" if name == "xclip" else None,
        ), mock.patch(
            "logexplorer.runtime.actions.subprocess.run",
            return_value=subprocess.CompletedProcess(args=[], returncode=0),
        ) as run_mock:
            self.assertTrue(actions.copy_text_to_clipboard("hello"))

        self.assertEqual(run_mock.call_args.args[0], ["xclip", "-selection", "clipboard"])
        self.assertEqual(run_mock.call_args.kwargs["input"], "hello")

    def test_no_tool_available(self) -> None:
        with mock.patch("logexplorer.runtime.actions.shutil.which", return_value=None):
            self.assertFalse(actions.copy_text_to_clipboard("hello"))

    def test_empty_text_is_not_copied(self) -> None:
        self.assertFalse(actions.copy_text_to_clipboard(""))


class EditorTests(unittest.TestCase):
    def test_missing_editor_env(self) -> None:
        disable = mock.Mock()
        with mock.patch.dict("logexplorer.runtime.actions.os.environ", {}, clear=True):
            status = launch_editor(Path("/tmp/x.log"), disable, mock.Mock())

        self.assertEqual(status, "Cannot open editor: $EDITOR is not set.")
        disable.assert_not_called()

    def test_editor_runs_between_tui_mode_switches(self) -> None:
        calls: list[str] = []
        with mock.patch.dict("logexplorer.runtime.actions.os.environ", {"EDITOR": "vim -R"}, clear=True), mock.patch(
            "logexplorer.runtime.actions.subprocess.run",
            side_effect=lambda *a, **k: calls.append("run") or subprocess.CompletedProcess(args=[], returncode=0),
        ) as run_mock:
            status = launch_editor(
                Path("/tmp/x.log"),
                lambda: calls.append("disable"),
                lambda: calls.append("enable"),
            )

        self.assertEqual(status, "Editor closed")
        self.assertEqual(calls, ["disable", "run", "enable"])
        self.assertEqual(run_mock.call_args.args[0], ["vim", "-R", "/tmp/x.log"])

    def test_editor_failure_status(self) -> None:
        enable = mock.Mock()
        with mock.patch.dict("logexplorer.runtime.actions.os.environ", {"EDITOR": "nano"}, clear=True), mock.patch(
            "logexplorer.runtime.actions.subprocess.run",
            return_value=subprocess.CompletedProcess(args=[], returncode=2),
        ):
            status = launch_editor(Path("/tmp/x.log"), mock.Mock(), enable)

        self.assertEqual(status, "Editor exited with status 2")
        enable.assert_called_once()

    def test_editor_not_found_restores_tui(self) -> None:
        enable = mock.Mock()
        with mock.patch.dict("logexplorer.runtime.actions.os.environ", {"EDITOR": "missing-editor"}, clear=True), mock.patch(
            "logexplorer.runtime.actions.subprocess.run", side_effect=FileNotFoundError("missing-editor")
        ):
            status = launch_editor(Path("/tmp/x.log"), mock.Mock(), enable)

        self.assertTrue(status.startswith("Failed to open editor:"))
        enable.assert_called_once()


class ActionRunnerTests(unittest.TestCase):
    def test_copy_message_includes_stacktrace(self) -> None:
        copied: list[str] = []
        runner = ActionRunner(mock.Mock(), mock.Mock(), copy_to_clipboard=lambda text: copied.append(text) or True)

        status = runner.run(ContextAction.COPY_MESSAGE, RECORD)

        self.assertEqual(status, "Copied to clipboard")
        self.assertEqual(copied, [RECORD.full_text()])

    def test_copy_failure_status(self) -> None:
        runner = ActionRunner(mock.Mock(), mock.Mock(), copy_to_clipboard=lambda text: False)

        self.assertEqual(
            runner.run(ContextAction.COPY_MESSAGE, RECORD),
            "Clipboard error: no clipboard tool succeeded",
        )

    def test_open_in_editor_writes_entry_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            runner = ActionRunner(mock.Mock(), mock.Mock(), temp_dir=Path(tmp))
            with mock.patch("logexplorer.runtime.actions.launch_editor", return_value="Editor closed") as launch_mock:
                status = runner.run(ContextAction.OPEN_IN_EDITOR, RECORD)

            target = launch_mock.call_args.args[0]
            self.assertEqual(target.name, "logexplorer_entry.log")
            self.assertEqual(target.read_text(encoding="utf-8"), RECORD.full_text())
        self.assertEqual(status, "Editor closed")

    def test_open_page_exports_summary_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            runner = ActionRunner(mock.Mock(), mock.Mock(), temp_dir=Path(tmp))
            with mock.patch("logexplorer.runtime.actions.launch_editor", return_value="Editor closed") as launch_mock:
                runner.open_page([RECORD])

            text = launch_mock.call_args.args[0].read_text(encoding="utf-8")
        self.assertTrue(text.startswith("[2024-05-01T10:00:00Z] ERROR [billing.Gateway] Payment failed\n"))
        self.assertIn("at Gateway.pay", text)

    def test_open_page_without_logs(self) -> None:
        runner = ActionRunner(mock.Mock(), mock.Mock())

        self.assertEqual(runner.open_page([]), "No logs to open")

    def test_page_export_text_keeps_order(self) -> None:
        records = [LogRecord(timestamp="a", message="one"), LogRecord(timestamp="b", message="two")]

        self.assertEqual(page_export_text(records), "[a]  [] one\n[b]  [] two")


if __name__ == "__main__":
    unittest.main()
