"""Input-layer public API for key decoding and the pane key table.

Low-level terminal decoding (`read_key`) is kept apart from the transition
table (`PaneKeyTable`) that maps decoded tokens onto state changes.
"""

from .key_registry import KeyComboBinding, KeyComboRegistry
from .keys import CommandKind, KeyCommand, PaneKeyTable, is_text_key
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key

__all__ = [
    "read_key",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "CommandKind",
    "KeyCommand",
    "PaneKeyTable",
    "is_text_key",
]
