"""Contextual key hints shown above the status line.

Hints depend only on the focused pane; rendering helpers here are
presentation-only and side-effect free.
"""

from __future__ import annotations

from ..runtime.panes import FILTER_PANES, Pane
from ..ui_theme import UITheme

FILTER_HOTKEY_HINTS: tuple[tuple[str, str], ...] = (
    ("P", "env"),
    ("A", "app"),
    ("S", "severity"),
    ("T", "time"),
    ("N", "limit"),
    ("M", "mode"),
    ("F", "fields"),
    ("/", "search"),
)

LOGS_HINTS: tuple[tuple[str, str], ...] = (
    ("↑↓/jk", "navigate"),
    ("←→/hl", "page"),
    ("R", "refresh"),
    ("E", "edit page"),
    ("Enter", "actions"),
    ("q", "quit"),
)

FILTER_EDIT_HINTS: tuple[tuple[str, str], ...] = (
    ("type", "filter"),
    ("↑↓", "move"),
    ("Enter", "select"),
    ("Esc", "cancel"),
    ("L", "logs"),
)

SEARCH_HINTS: tuple[tuple[str, str], ...] = (
    ("type", "search text"),
    ("Enter", "search"),
    ("Esc", "back"),
)

CONTEXT_HINTS: tuple[tuple[str, str], ...] = (
    ("↑↓/jk", "move"),
    ("Enter", "run"),
    ("Esc", "close"),
)


def hints_for_pane(pane: Pane) -> tuple[tuple[str, str], ...]:
    if pane in FILTER_PANES:
        return FILTER_EDIT_HINTS + FILTER_HOTKEY_HINTS
    if pane is Pane.SEARCH:
        return SEARCH_HINTS
    if pane is Pane.LOG_CONTEXT:
        return CONTEXT_HINTS
    return LOGS_HINTS + FILTER_HOTKEY_HINTS


def format_hints(hints: tuple[tuple[str, str], ...], theme: UITheme) -> str:
    return "  ".join(f"{theme.hotkey}{key}{theme.reset} {desc}" for key, desc in hints)


def hints_line(pane: Pane, theme: UITheme) -> str:
    return format_hints(hints_for_pane(pane), theme)
