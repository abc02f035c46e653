"""UI theme definitions and selection helpers.

Themes are UI-only ANSI palettes (chrome, severities, dropdowns). Highlighting
style for the record preview remains a separate pygments setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    reverse: str
    dim: str
    border: str
    pane_title: str
    pane_title_focused: str
    hotkey: str
    prompt: str
    cursor_block: str
    dropdown_selected: str
    search_hit: str
    header: str
    severity_error: str
    severity_warn: str
    severity_info: str
    severity_debug: str
    stacktrace_mark: str

    def severity(self, level: str) -> str:
        """Return the escape sequence used for a severity column value."""
        key = level.strip().upper()
        if key in {"ERROR", "FATAL", "CRITICAL"}:
            return self.severity_error
        if key in {"WARN", "WARNING"}:
            return self.severity_warn
        if key == "INFO":
            return self.severity_info
        if key in {"DEBUG", "TRACE"}:
            return self.severity_debug
        return ""


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    reverse="\033[7m",
    dim="\033[2m",
    border="\033[38;5;245m",
    pane_title="\033[38;5;245m",
    pane_title_focused="\033[1;36m",
    hotkey="\033[33m",
    prompt="\033[33m",
    cursor_block="\033[36m",
    dropdown_selected="\033[1;30;46m",
    search_hit="\033[1;30;43m",
    header="\033[1m",
    severity_error="\033[1;31m",
    severity_warn="\033[33m",
    severity_info="\033[32m",
    severity_debug="\033[34m",
    stacktrace_mark="\033[31m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    reverse="\033[7m",
    dim="\033[2;38;5;110m",
    border="\033[2;38;5;31m",
    pane_title="\033[38;5;110m",
    pane_title_focused="\033[1;38;5;45m",
    hotkey="\033[38;5;153m",
    prompt="\033[38;5;153m",
    cursor_block="\033[38;5;45m",
    dropdown_selected="\033[1;38;5;16;48;5;45m",
    search_hit="\033[1;38;5;16;48;5;215m",
    header="\033[1;38;5;117m",
    severity_error="\033[1;38;5;203m",
    severity_warn="\033[38;5;215m",
    severity_info="\033[38;5;84m",
    severity_debug="\033[38;5;117m",
    stacktrace_mark="\033[38;5;203m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    reverse="",
    dim="",
    border="",
    pane_title="",
    pane_title_focused="",
    hotkey="",
    prompt="",
    cursor_block="",
    dropdown_selected="",
    search_hit="",
    header="",
    severity_error="",
    severity_warn="",
    severity_info="",
    severity_debug="",
    stacktrace_mark="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
