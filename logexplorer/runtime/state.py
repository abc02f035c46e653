"""Mutable explorer state owned by the single control thread.

Holds the focused pane, one :class:`FilterField` per filter dimension, the free
text search, the current page of log records, and pagination counters. The
renderer only reads from here; key handling and fetches are the only writers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..filter_field import FilterField
from ..query import (
    ALL,
    DEFAULT_PAGE_SIZE,
    PAGE_SIZE_CHOICES,
    SEARCH_FIELD_CHOICES,
    SEARCH_MODE_EACH_WORD,
    SEARCH_MODES,
    SearchParams,
    TIME_RANGE_TOKENS,
    build_search_params,
    omit_all,
    total_pages,
)
from ..search.records import LogRecord
from .panes import FILTER_PANES, Pane

DEFAULT_TIME_RANGE = "15m"
DEFAULT_SEARCH_FIELDS_LABEL = "message"


class InactiveFilterError(RuntimeError):
    """Raised when a filter field is requested while a non-filter pane is focused."""


@dataclass
class ExplorerState:
    focused: Pane = Pane.LOGS
    environment_filter: FilterField = field(default_factory=FilterField)
    application_filter: FilterField = field(default_factory=FilterField)
    severity_filter: FilterField = field(default_factory=FilterField)
    time_filter: FilterField = field(default_factory=FilterField)
    page_size_filter: FilterField = field(default_factory=FilterField)
    search_mode_filter: FilterField = field(default_factory=FilterField)
    search_fields_filter: FilterField = field(default_factory=FilterField)
    search_text: str = ""
    logs: list[LogRecord] = field(default_factory=list)
    log_index: int = 0
    total_hits: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    context_cursor: int = 0
    status: str = "Loading filters..."
    preset_environment: str | None = None

    @classmethod
    def with_presets(
        cls,
        *,
        time_range: str = DEFAULT_TIME_RANGE,
        page_size: str = str(DEFAULT_PAGE_SIZE),
        environment: str | None = None,
    ) -> ExplorerState:
        """Create state with the locally known candidate lists filled in."""
        state = cls()
        state.time_filter.set_items(TIME_RANGE_TOKENS)
        state.time_filter.select_value(time_range)
        state.page_size_filter.set_items(PAGE_SIZE_CHOICES)
        state.page_size_filter.select_value(page_size)
        state.search_mode_filter.set_items(SEARCH_MODES)
        state.search_mode_filter.select_value(SEARCH_MODE_EACH_WORD)
        state.search_fields_filter.set_items(tuple(SEARCH_FIELD_CHOICES))
        state.search_fields_filter.select_value(DEFAULT_SEARCH_FIELDS_LABEL)
        state.preset_environment = environment
        return state

    def apply_facets(
        self,
        environments: list[str],
        applications: list[str],
        severities: list[str],
    ) -> None:
        """Fill backend-provided candidates; ``ALL`` is prepended locally."""
        self.environment_filter.set_items(environments)
        if self.preset_environment:
            self.environment_filter.select_value(self.preset_environment)
        self.application_filter.set_items([ALL, *applications])
        self.severity_filter.set_items([ALL, *severities])

    def filter_for(self, pane: Pane) -> FilterField:
        fields = {
            Pane.ENVIRONMENT: self.environment_filter,
            Pane.APPLICATION: self.application_filter,
            Pane.SEVERITY: self.severity_filter,
            Pane.TIME_RANGE: self.time_filter,
            Pane.PAGE_SIZE: self.page_size_filter,
            Pane.SEARCH_MODE: self.search_mode_filter,
            Pane.SEARCH_FIELDS: self.search_fields_filter,
        }
        try:
            return fields[pane]
        except KeyError:
            raise InactiveFilterError(f"pane {pane.name} owns no filter field") from None

    def active_filter(self) -> FilterField:
        """Return the field of the focused filter pane.

        Raises :class:`InactiveFilterError` for LOGS, SEARCH and LOG_CONTEXT.
        """
        return self.filter_for(self.focused)

    def open_filter(self, pane: Pane) -> None:
        if pane not in FILTER_PANES:
            raise InactiveFilterError(f"pane {pane.name} owns no filter field")
        self.filter_for(pane).open()
        self.focused = pane

    def selected_environment(self) -> str | None:
        return self.environment_filter.selected_value()

    def selected_application(self) -> str | None:
        return omit_all(self.application_filter.selected_value())

    def selected_severity(self) -> str | None:
        return omit_all(self.severity_filter.selected_value())

    def build_params(self, page: int) -> SearchParams:
        return build_search_params(
            environment=self.selected_environment(),
            application=self.application_filter.selected_value(),
            severity=self.severity_filter.selected_value(),
            time_range=self.time_filter.selected_value(),
            search_text=self.search_text,
            search_mode=self.search_mode_filter.selected_value(),
            search_fields=self.search_fields_filter.selected_value(),
            page_size=self.page_size_filter.selected_value(),
            page=page,
        )

    def query_label(self) -> str:
        """Short ``app (env) [severity]`` description used in status messages."""
        app = self.selected_application() or ALL
        label = f"{app} ({self.selected_environment() or '-'})"
        severity = self.selected_severity()
        if severity:
            label += f" [{severity}]"
        return label

    def total_pages(self) -> int:
        return total_pages(self.total_hits, self.page_size)

    def has_next_page(self) -> bool:
        return self.page < self.total_pages()

    def has_previous_page(self) -> bool:
        return self.page > 1

    def selected_log(self) -> LogRecord | None:
        if 0 <= self.log_index < len(self.logs):
            return self.logs[self.log_index]
        return None

    def move_log_selection(self, delta: int) -> bool:
        if not self.logs:
            self.log_index = 0
            return False
        previous = self.log_index
        self.log_index = max(0, min(len(self.logs) - 1, self.log_index + delta))
        return self.log_index != previous

    def apply_page(self, records: list[LogRecord], total_hits: int, page: int, page_size: int) -> None:
        """Replace the page buffer after a successful fetch."""
        self.logs = list(records)
        self.total_hits = max(0, total_hits)
        self.page_size = page_size
        self.page = max(1, page)
        self.log_index = 0
        self.focused = Pane.LOGS
