"""Persistent JSON config helpers.

Stores the search endpoint, connection settings, UI theme, and filter presets.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .query import DEFAULT_PAGE_SIZE, PAGE_SIZE_CHOICES, TIME_RANGE_TOKENS
from .runtime.state import DEFAULT_TIME_RANGE
from .search.client import DEFAULT_INDEX_PATTERN, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

APP_NAME = "logexplorer"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


@dataclass(frozen=True)
class ExplorerSettings:
    """Connection and preset values resolved from config and CLI flags."""

    endpoint_url: str | None = None
    index_pattern: str = DEFAULT_INDEX_PATTERN
    username: str | None = None
    password: str | None = None
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    theme: str | None = None
    default_environment: str | None = None
    default_time_range: str = DEFAULT_TIME_RANGE
    default_page_size: str = str(DEFAULT_PAGE_SIZE)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem and serialization errors are logged and otherwise ignored, so
    an unwritable config never stops the explorer.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Could not write config %s: %s", CONFIG_PATH, exc)


def _load_string(data: dict[str, object], key: str) -> str | None:
    """Return a stripped non-empty string value, else ``None``."""
    value = data.get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _load_positive_number(data: dict[str, object], key: str) -> float | None:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)


def _load_time_range(data: dict[str, object]) -> str:
    value = _load_string(data, "default_time_range")
    return value if value in TIME_RANGE_TOKENS else DEFAULT_TIME_RANGE


def _load_page_size(data: dict[str, object]) -> str:
    value = data.get("default_page_size")
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return str(DEFAULT_PAGE_SIZE)
    candidate = str(value).strip()
    return candidate if candidate in PAGE_SIZE_CHOICES else str(DEFAULT_PAGE_SIZE)


def load_settings() -> ExplorerSettings:
    """Read every supported key from the persisted config."""
    data = load_config()
    return ExplorerSettings(
        endpoint_url=_load_string(data, "endpoint_url"),
        index_pattern=_load_string(data, "index_pattern") or DEFAULT_INDEX_PATTERN,
        username=_load_string(data, "username"),
        password=_load_string(data, "password"),
        request_timeout_seconds=_load_positive_number(data, "request_timeout_seconds") or DEFAULT_TIMEOUT_SECONDS,
        theme=_load_string(data, "theme"),
        default_environment=_load_string(data, "default_environment"),
        default_time_range=_load_time_range(data),
        default_page_size=_load_page_size(data),
    )


def save_endpoint_url(endpoint_url: str) -> None:
    """Persist the search endpoint URL; blank values are ignored."""
    stripped = str(endpoint_url).strip()
    if not stripped:
        return
    config = load_config()
    config["endpoint_url"] = stripped
    save_config(config)


def save_theme_name(theme_name: str) -> None:
    """Persist selected UI theme name."""
    stripped = str(theme_name).strip()
    if not stripped:
        return
    config = load_config()
    config["theme"] = stripped
    save_config(config)
