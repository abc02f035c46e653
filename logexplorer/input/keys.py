"""Key transition table for the explorer panes.

Each pane (filter panes share one) owns a :class:`KeyComboRegistry`. A key is
looked up only in the registry of the focused pane, mutates state
synchronously, and may yield a :class:`KeyCommand` describing asynchronous or
external work (fetch a page, run a context action, open the page in an editor,
quit) for the controller to carry out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import partial

from ..runtime.actions import CONTEXT_MENU_OPTIONS, ContextAction
from ..runtime.panes import FILTER_PANES, PANE_HOTKEYS, QUERY_PANES, Pane
from ..runtime.state import ExplorerState
from .key_registry import KeyComboBinding, KeyComboRegistry


class CommandKind(Enum):
    FETCH = "fetch"
    RUN_ACTION = "run_action"
    OPEN_PAGE = "open_page"
    QUIT = "quit"


@dataclass(frozen=True)
class KeyCommand:
    kind: CommandKind
    page: int = 1
    action: ContextAction | None = None


QUIT = KeyCommand(CommandKind.QUIT)


def is_text_key(key: str) -> bool:
    """Whether ``key`` is a single printable character rather than a named key token."""
    return len(key) == 1 and key.isprintable()


class PaneKeyTable:
    """Per-pane key bindings over a shared :class:`ExplorerState`."""

    def __init__(self, state: ExplorerState) -> None:
        self.state = state
        filter_registry = self._build_filter_registry()
        self._registries: dict[Pane, KeyComboRegistry[KeyCommand | None]] = {
            pane: filter_registry for pane in FILTER_PANES
        }
        self._registries[Pane.SEARCH] = self._build_search_registry()
        self._registries[Pane.LOGS] = self._build_logs_registry()
        self._registries[Pane.LOG_CONTEXT] = self._build_context_registry()

    def handle_key(self, key: str) -> KeyCommand | None:
        if key == "CTRL_C":
            return QUIT
        return self._registries[self.state.focused].dispatch(key)

    # -- shared transitions -------------------------------------------------

    def _focus(self, pane: Pane) -> None:
        if pane in FILTER_PANES:
            self.state.open_filter(pane)
        else:
            self.state.focused = pane
        return None

    def _hotkey_bindings(self) -> list[KeyComboBinding[KeyCommand | None]]:
        return [KeyComboBinding((key,), partial(self._focus, pane)) for key, pane in PANE_HOTKEYS.items()]

    def _back_to_logs(self) -> None:
        self.state.focused = Pane.LOGS
        return None

    # -- filter panes -------------------------------------------------------

    def _filter_type(self, key: str) -> None:
        if is_text_key(key):
            self.state.active_filter().type_char(key)
        return None

    def _filter_backspace(self) -> None:
        self.state.active_filter().backspace()
        return None

    def _filter_next(self) -> None:
        self.state.active_filter().next()
        return None

    def _filter_previous(self) -> None:
        self.state.active_filter().previous()
        return None

    def _filter_confirm(self) -> KeyCommand | None:
        pane = self.state.focused
        self.state.active_filter().confirm()
        if pane in QUERY_PANES:
            self.state.status = "Fetching logs..."
            return KeyCommand(CommandKind.FETCH, page=1)
        self.state.focused = Pane.LOGS
        return None

    def _build_filter_registry(self) -> KeyComboRegistry[KeyCommand | None]:
        registry: KeyComboRegistry[KeyCommand | None] = KeyComboRegistry(fallback=self._filter_type)
        return registry.register_bindings(
            *self._hotkey_bindings(),
            KeyComboBinding(("BACKSPACE",), self._filter_backspace),
            KeyComboBinding(("DOWN",), self._filter_next),
            KeyComboBinding(("UP",), self._filter_previous),
            KeyComboBinding(("ENTER",), self._filter_confirm),
            KeyComboBinding(("ESC",), self._back_to_logs),
        )

    # -- free-text search ---------------------------------------------------

    def _search_type(self, key: str) -> None:
        if is_text_key(key):
            self.state.search_text += key
        return None

    def _search_backspace(self) -> None:
        self.state.search_text = self.state.search_text[:-1]
        return None

    def _search_submit(self) -> KeyCommand:
        self.state.status = "Fetching logs..."
        return KeyCommand(CommandKind.FETCH, page=1)

    def _build_search_registry(self) -> KeyComboRegistry[KeyCommand | None]:
        registry: KeyComboRegistry[KeyCommand | None] = KeyComboRegistry(fallback=self._search_type)
        return registry.register_bindings(
            KeyComboBinding(("BACKSPACE",), self._search_backspace),
            KeyComboBinding(("ENTER",), self._search_submit),
            KeyComboBinding(("ESC",), self._back_to_logs),
        )

    # -- logs ---------------------------------------------------------------

    def _scroll(self, delta: int) -> None:
        self.state.move_log_selection(delta)
        return None

    def _next_page(self) -> KeyCommand | None:
        if not self.state.has_next_page():
            return None
        return KeyCommand(CommandKind.FETCH, page=self.state.page + 1)

    def _previous_page(self) -> KeyCommand | None:
        if not self.state.has_previous_page():
            return None
        return KeyCommand(CommandKind.FETCH, page=self.state.page - 1)

    def _refresh(self) -> KeyCommand:
        return KeyCommand(CommandKind.FETCH, page=self.state.page)

    def _open_context_menu(self) -> None:
        if self.state.logs:
            self.state.context_cursor = 0
            self.state.focused = Pane.LOG_CONTEXT
        return None

    def _open_page(self) -> KeyCommand | None:
        if not self.state.logs:
            return None
        return KeyCommand(CommandKind.OPEN_PAGE)

    def _build_logs_registry(self) -> KeyComboRegistry[KeyCommand | None]:
        registry: KeyComboRegistry[KeyCommand | None] = KeyComboRegistry()
        return registry.register_bindings(
            *self._hotkey_bindings(),
            KeyComboBinding(("q",), lambda: QUIT),
            KeyComboBinding(("DOWN", "j"), partial(self._scroll, 1)),
            KeyComboBinding(("UP", "k"), partial(self._scroll, -1)),
            KeyComboBinding(("RIGHT", "l"), self._next_page),
            KeyComboBinding(("LEFT", "h"), self._previous_page),
            KeyComboBinding(("R",), self._refresh),
            KeyComboBinding(("E",), self._open_page),
            KeyComboBinding(("ENTER",), self._open_context_menu),
        )

    # -- log context menu ---------------------------------------------------

    def _move_context_cursor(self, delta: int) -> None:
        last = len(CONTEXT_MENU_OPTIONS) - 1
        self.state.context_cursor = max(0, min(last, self.state.context_cursor + delta))
        return None

    def _run_context_action(self) -> KeyCommand:
        action = CONTEXT_MENU_OPTIONS[self.state.context_cursor]
        self.state.focused = Pane.LOGS
        return KeyCommand(CommandKind.RUN_ACTION, action=action)

    def _build_context_registry(self) -> KeyComboRegistry[KeyCommand | None]:
        registry: KeyComboRegistry[KeyCommand | None] = KeyComboRegistry()
        return registry.register_bindings(
            KeyComboBinding(("DOWN", "j"), partial(self._move_context_cursor, 1)),
            KeyComboBinding(("UP", "k"), partial(self._move_context_cursor, -1)),
            KeyComboBinding(("ENTER",), self._run_context_action),
            KeyComboBinding(("ESC",), self._back_to_logs),
        )
