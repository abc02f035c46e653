"""Reusable key-combo registry primitives."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

ResultT = TypeVar("ResultT")


@dataclass(frozen=True)
class KeyComboBinding(Generic[ResultT]):
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], ResultT]


class KeyComboRegistry(Generic[ResultT]):
    """Exact-match key dispatch table with an optional fallback for unbound keys.

    The fallback receives the raw key token; it is how text-entry panes accept
    arbitrary printable characters without binding each one.
    """

    def __init__(self, fallback: Callable[[str], ResultT] | None = None) -> None:
        self._fallback = fallback
        self._handlers: dict[str, Callable[[], ResultT]] = {}

    def register_binding(self, binding: KeyComboBinding[ResultT]) -> KeyComboRegistry[ResultT]:
        """Register one binding, overwriting existing handlers for same combos."""
        for combo in binding.combos:
            self._handlers[combo] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding[ResultT]) -> KeyComboRegistry[ResultT]:
        """Register multiple bindings and return ``self`` for fluent usage."""
        for binding in bindings:
            self.register_binding(binding)
        return self

    def dispatch(self, key: str) -> ResultT | None:
        """Invoke the bound handler for ``key``, else the fallback, else nothing."""
        handler = self._handlers.get(key)
        if handler is not None:
            return handler()
        if self._fallback is not None:
            return self._fallback(key)
        return None
