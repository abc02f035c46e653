"""Incremental-filter selector shared by every filter dimension.

A field keeps two selections apart: the committed value shown in the filter
bar, and a cursor into the candidates matching the live query typed while the
dropdown is open. Typing never changes the committed value; only ``confirm``
does.
"""

from __future__ import annotations

from collections.abc import Iterable


class FilterField:
    """Filterable dropdown over an ordered list of string values."""

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: list[str] = []
        # Index into ``_items`` of the committed selection.
        self._selected_index = 0
        self._filter_text = ""
        # Indices into ``_items`` matching ``_filter_text``, in original order.
        self._filtered_indices: list[int] = []
        # Position within ``_filtered_indices``.
        self._cursor = 0
        self.set_items(items)

    def set_items(self, items: Iterable[str]) -> None:
        """Replace candidates and reset the committed selection to the first item."""
        self._items = [str(item) for item in items]
        self._selected_index = 0
        self._refilter()

    def select_value(self, value: str) -> None:
        """Commit ``value`` when present; unknown values are ignored."""
        try:
            self._selected_index = self._items.index(value)
        except ValueError:
            return

    def selected_value(self) -> str | None:
        if 0 <= self._selected_index < len(self._items):
            return self._items[self._selected_index]
        return None

    def open(self) -> None:
        """Reset the query and place the cursor on the committed selection."""
        self._filter_text = ""
        self._refilter()
        try:
            self._cursor = self._filtered_indices.index(self._selected_index)
        except ValueError:
            self._cursor = 0

    def confirm(self) -> None:
        """Commit the highlighted candidate."""
        if 0 <= self._cursor < len(self._filtered_indices):
            self._selected_index = self._filtered_indices[self._cursor]

    def type_char(self, ch: str) -> None:
        self._filter_text += ch
        self._refilter()

    def backspace(self) -> None:
        if not self._filter_text:
            return
        self._filter_text = self._filter_text[:-1]
        self._refilter()

    def next(self) -> None:
        if self._filtered_indices:
            self._cursor = min(self._cursor + 1, len(self._filtered_indices) - 1)

    def previous(self) -> None:
        self._cursor = max(0, self._cursor - 1)

    @property
    def filter_text(self) -> str:
        return self._filter_text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def items(self) -> tuple[str, ...]:
        return tuple(self._items)

    def filtered_items(self) -> list[str]:
        return [self._items[idx] for idx in self._filtered_indices]

    def highlighted_value(self) -> str | None:
        """Return the candidate under the cursor, or ``None`` when nothing matches."""
        if 0 <= self._cursor < len(self._filtered_indices):
            return self._items[self._filtered_indices[self._cursor]]
        return None

    def _refilter(self) -> None:
        query = self._filter_text.casefold()
        self._filtered_indices = [
            idx for idx, item in enumerate(self._items) if not query or query in item.casefold()
        ]
        if not self._filtered_indices:
            self._cursor = 0
        else:
            self._cursor = min(self._cursor, len(self._filtered_indices) - 1)
