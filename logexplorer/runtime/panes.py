"""Focus model: the closed set of panes and their classification."""

from __future__ import annotations

from enum import Enum


class Pane(Enum):
    ENVIRONMENT = "environment"
    APPLICATION = "application"
    SEVERITY = "severity"
    TIME_RANGE = "time_range"
    PAGE_SIZE = "page_size"
    SEARCH_MODE = "search_mode"
    SEARCH_FIELDS = "search_fields"
    SEARCH = "search"
    LOGS = "logs"
    LOG_CONTEXT = "log_context"


# Panes backed by a FilterField, in filter-bar order.
FILTER_PANES: tuple[Pane, ...] = (
    Pane.ENVIRONMENT,
    Pane.APPLICATION,
    Pane.SEVERITY,
    Pane.TIME_RANGE,
    Pane.PAGE_SIZE,
    Pane.SEARCH_MODE,
    Pane.SEARCH_FIELDS,
)

# Filter panes whose commit changes the backend query.
QUERY_PANES: frozenset[Pane] = frozenset(
    {Pane.ENVIRONMENT, Pane.APPLICATION, Pane.SEVERITY, Pane.TIME_RANGE, Pane.PAGE_SIZE}
)

PANE_LABELS: dict[Pane, str] = {
    Pane.ENVIRONMENT: "Environment",
    Pane.APPLICATION: "Application",
    Pane.SEVERITY: "Severity",
    Pane.TIME_RANGE: "Time Range",
    Pane.PAGE_SIZE: "Limit",
    Pane.SEARCH_MODE: "Mode",
    Pane.SEARCH_FIELDS: "Fields",
    Pane.SEARCH: "Search",
    Pane.LOGS: "Logs",
    Pane.LOG_CONTEXT: "Actions",
}

# Uppercase hotkeys that switch focus from LOGS or any filter pane.
PANE_HOTKEYS: dict[str, Pane] = {
    "P": Pane.ENVIRONMENT,
    "A": Pane.APPLICATION,
    "S": Pane.SEVERITY,
    "T": Pane.TIME_RANGE,
    "N": Pane.PAGE_SIZE,
    "M": Pane.SEARCH_MODE,
    "F": Pane.SEARCH_FIELDS,
    "/": Pane.SEARCH,
    "L": Pane.LOGS,
}

HOTKEY_FOR_PANE: dict[Pane, str] = {pane: key for key, pane in PANE_HOTKEYS.items()}
