"""Context-menu actions run against a log record.

Clipboard copies go through whatever platform tool is installed; editor
launches leave raw/alternate-screen mode around ``$EDITOR``. Both report back a
status string and never touch pane or filter state.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..search.records import LogRecord

logger = logging.getLogger(__name__)

ENTRY_EXPORT_FILENAME = "logexplorer_entry.log"
PAGE_EXPORT_FILENAME = "logexplorer_page.log"


class ContextAction(Enum):
    COPY_MESSAGE = "Copy message"
    OPEN_IN_EDITOR = "Open in editor"


CONTEXT_MENU_OPTIONS: tuple[ContextAction, ...] = (
    ContextAction.COPY_MESSAGE,
    ContextAction.OPEN_IN_EDITOR,
)


def copy_text_to_clipboard(text: str) -> bool:
    """Best-effort clipboard copy across macOS, Windows, and common Linux tools."""
    if not text:
        return False

    command_candidates: list[list[str]] = []
    if sys.platform == "darwin":
        command_candidates.append(["pbcopy"])
    elif os.name == "nt":
        command_candidates.append(["clip"])
    else:
        command_candidates.extend(
            [
                ["wl-copy"],
                ["xclip", "-selection", "clipboard"],
                ["xsel", "--clipboard", "--input"],
            ]
        )

    for command in command_candidates:
        if shutil.which(command[0]) is None:
            continue
        try:
            proc = subprocess.run(command, input=text, text=True, check=False)
        except OSError as exc:
            logger.debug("clipboard command %s failed: %s", command[0], exc)
            continue
        if proc.returncode == 0:
            return True
    return False


def launch_editor(
    target: Path,
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
) -> str:
    """Open ``target`` in ``$EDITOR`` and return a status message."""
    editor_env = os.environ.get("EDITOR", "").strip()
    if not editor_env:
        return "Cannot open editor: $EDITOR is not set."
    cmd = shlex.split(editor_env)
    if not cmd:
        return "Cannot open editor: $EDITOR is empty."

    disable_tui_mode()
    try:
        proc = subprocess.run([*cmd, str(target)], check=False)
    except OSError as exc:
        return f"Failed to open editor: {exc}"
    finally:
        enable_tui_mode()
    if proc.returncode != 0:
        return f"Editor exited with status {proc.returncode}"
    return "Editor closed"


def page_export_text(records: Sequence[LogRecord]) -> str:
    """Render a page as ``[ts] LEVEL [logger] message`` lines with stack traces."""
    lines: list[str] = []
    for record in records:
        lines.append(record.summary_line())
        if record.stacktrace:
            lines.append(record.stacktrace)
    return "\n".join(lines)


@dataclass
class ActionRunner:
    """Runs context actions; terminal callbacks bracket external editor sessions."""

    disable_tui_mode: Callable[[], None]
    enable_tui_mode: Callable[[], None]
    copy_to_clipboard: Callable[[str], bool] = copy_text_to_clipboard
    temp_dir: Path | None = None

    def open_in_external_editor(self, text: str, filename: str = ENTRY_EXPORT_FILENAME) -> str:
        directory = self.temp_dir if self.temp_dir is not None else Path(tempfile.gettempdir())
        target = directory / filename
        try:
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            return f"Failed to write {target}: {exc}"
        return launch_editor(target, self.disable_tui_mode, self.enable_tui_mode)

    def run(self, action: ContextAction, record: LogRecord) -> str:
        """Run ``action`` against ``record`` and return the resulting status text."""
        if action is ContextAction.COPY_MESSAGE:
            if self.copy_to_clipboard(record.full_text()):
                status = "Copied to clipboard"
            else:
                status = "Clipboard error: no clipboard tool succeeded"
        else:
            status = self.open_in_external_editor(record.full_text(), ENTRY_EXPORT_FILENAME)
        logger.info("context action %s: %s", action.name, status)
        return status

    def open_page(self, records: Sequence[LogRecord]) -> str:
        if not records:
            return "No logs to open"
        return self.open_in_external_editor(page_export_text(records), PAGE_EXPORT_FILENAME)
