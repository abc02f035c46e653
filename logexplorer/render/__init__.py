"""Rendering engine for the explorer screen.

Composes the filter bar, search line, log table, record preview, key hints,
and status line into a list of ANSI lines, then overlays the dropdown of the
focused filter or the context menu. Building lines never mutates state.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..ansi import clip_ansi_line, display_width, fit_ansi_line, single_line
from ..filter_field import FilterField
from ..highlight import DEFAULT_STYLE, colorize_record, highlight_matches
from ..runtime.actions import CONTEXT_MENU_OPTIONS
from ..runtime.panes import FILTER_PANES, HOTKEY_FOR_PANE, PANE_LABELS, Pane
from ..runtime.state import ExplorerState
from ..search.records import LogRecord
from ..ui_theme import UITheme
from .help import hints_line

TIMESTAMP_WIDTH = 24
LEVEL_WIDTH = 5
LOGGER_WIDTH = 28
SELECTION_MARKER = "▶ "
CURSOR_BLOCK = "█"
EMPTY_VALUE = "-"
CHIP_SEPARATOR_WIDTH = 3
PREVIEW_MAX_ROWS = 10
DROPDOWN_MIN_WIDTH = 24
CONTEXT_MENU_WIDTH = 24
# filter bar, search line, table header, hints, status
FIXED_ROWS = 5


@dataclass
class RenderContext:
    state: ExplorerState
    theme: UITheme
    width: int
    height: int
    style: str = DEFAULT_STYLE
    no_color: bool = False


def selected_with_ansi(text: str, theme: UITheme) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text or not theme.reverse:
        return text
    # Keep reverse video active even when the text contains internal resets.
    return theme.reverse + text.replace("\033[0m", "\033[0;7m") + theme.reset


def pane_title(pane: Pane, focused: bool, theme: UITheme) -> str:
    style = theme.pane_title_focused if focused else theme.pane_title
    hotkey = HOTKEY_FOR_PANE.get(pane, "")
    return f"{style}{PANE_LABELS[pane]} [{theme.reset}{theme.hotkey}{hotkey}{theme.reset}{style}]{theme.reset}"


def build_filter_bar(state: ExplorerState, theme: UITheme) -> tuple[str, dict[Pane, int]]:
    """Return the filter bar line and the starting column of each chip."""
    chips: list[str] = []
    columns: dict[Pane, int] = {}
    col = 0
    for pane in FILTER_PANES:
        value = state.filter_for(pane).selected_value() or EMPTY_VALUE
        chip = f"{pane_title(pane, state.focused is pane, theme)} {value}"
        columns[pane] = col
        col += display_width(chip) + CHIP_SEPARATOR_WIDTH
        chips.append(chip)
    return f" {theme.border}│{theme.reset} ".join(chips), columns


def build_search_line(state: ExplorerState, theme: UITheme) -> str:
    focused = state.focused is Pane.SEARCH
    title = pane_title(Pane.SEARCH, focused, theme)
    if focused:
        return f"{title} {theme.prompt}> {theme.reset}{state.search_text}{theme.cursor_block}{CURSOR_BLOCK}{theme.reset}"
    if state.search_text:
        return f"{title} {state.search_text}"
    return f"{title} {theme.dim}{EMPTY_VALUE}{theme.reset}"


def shorten_logger(name: str, width: int) -> str:
    """Keep the tail of long logger names, where the class name lives."""
    if len(name) <= width:
        return name
    return "…" + name[-(width - 1):]


def _message_width(width: int) -> int:
    fixed = len(SELECTION_MARKER) + TIMESTAMP_WIDTH + 1 + LEVEL_WIDTH + 1 + LOGGER_WIDTH + 1 + 2
    return max(1, width - fixed)


def build_header_row(width: int, theme: UITheme) -> str:
    cells = (
        " " * len(SELECTION_MARKER)
        + fit_ansi_line("Timestamp", TIMESTAMP_WIDTH)
        + " "
        + fit_ansi_line("Level", LEVEL_WIDTH)
        + " "
        + fit_ansi_line("Logger", LOGGER_WIDTH)
        + " "
        + fit_ansi_line("Message", _message_width(width))
        + " ST"
    )
    return f"{theme.header}{cells}{theme.reset}"


def format_log_row(record: LogRecord, width: int, theme: UITheme, query: str, selected: bool) -> str:
    level_style = theme.severity(record.severity)
    level = f"{level_style}{fit_ansi_line(record.severity, LEVEL_WIDTH)}{theme.reset if level_style else ''}"
    message = highlight_matches(single_line(record.message), query.strip(), theme.search_hit, theme.reset)
    mark = f"{theme.stacktrace_mark}✘{theme.reset}" if record.has_stacktrace else " "
    row = (
        (SELECTION_MARKER if selected else " " * len(SELECTION_MARKER))
        + fit_ansi_line(record.timestamp, TIMESTAMP_WIDTH)
        + " "
        + level
        + " "
        + fit_ansi_line(shorten_logger(record.logger, LOGGER_WIDTH), LOGGER_WIDTH)
        + " "
        + fit_ansi_line(message, _message_width(width))
        + theme.reset
        + " "
        + mark
    )
    return selected_with_ansi(row, theme) if selected else row


def log_window_start(log_index: int, log_count: int, rows: int) -> int:
    """First visible row keeping ``log_index`` on screen."""
    if rows <= 0 or log_count <= rows:
        return 0
    return max(0, min(log_index - rows + 1, log_count - rows))


def build_table_rows(state: ExplorerState, rows: int, width: int, theme: UITheme) -> list[str]:
    if not state.logs:
        return [f"{theme.dim}  No logs loaded{theme.reset}"] + [""] * max(0, rows - 1)
    start = log_window_start(state.log_index, len(state.logs), rows)
    out: list[str] = []
    for idx in range(start, min(len(state.logs), start + rows)):
        out.append(format_log_row(state.logs[idx], width, theme, state.search_text, idx == state.log_index))
    out.extend([""] * (rows - len(out)))
    return out


def build_preview_rows(context: RenderContext, rows: int) -> list[str]:
    record = context.state.selected_log()
    if rows <= 0 or record is None:
        return []
    theme = context.theme
    title = f"{theme.border}── Record {'─' * max(0, context.width - 11)}{theme.reset}"
    source = record.raw or {"@timestamp": record.timestamp, "message": record.message}
    body = colorize_record(source, context.style, context.no_color or not theme.reset)
    body = body[: rows - 1]
    return [title, *body] + [""] * (rows - 1 - len(body))


def _box_line(content: str, inner_width: int, theme: UITheme) -> str:
    return f"{theme.border}│{theme.reset}{fit_ansi_line(content, inner_width)}{theme.reset}{theme.border}│{theme.reset}"


def _box_edge(left: str, right: str, inner_width: int, theme: UITheme, title: str = "") -> str:
    fill = "─" * max(0, inner_width - len(title))
    return f"{theme.border}{left}{title}{fill}{right}{theme.reset}"


def build_dropdown_box(field: FilterField, width: int, max_rows: int, theme: UITheme) -> list[str]:
    """Prompt row plus the candidates around the cursor, framed by a border."""
    inner = max(1, width - 2)
    prompt = f"{theme.prompt}> {theme.reset}{field.filter_text}{theme.cursor_block}{CURSOR_BLOCK}{theme.reset}"
    lines = [_box_edge("┌", "┐", inner, theme), _box_line(prompt, inner, theme)]

    items = field.filtered_items()
    visible = max(1, max_rows - 3)
    if not items:
        lines.append(_box_line(f"{theme.dim}  no matches{theme.reset}", inner, theme))
    else:
        start = log_window_start(field.cursor, len(items), visible)
        for idx in range(start, min(len(items), start + visible)):
            if idx == field.cursor:
                text = f"{theme.dropdown_selected}{fit_ansi_line(SELECTION_MARKER + items[idx], inner)}{theme.reset}"
                if not theme.dropdown_selected:
                    text = SELECTION_MARKER + items[idx]
            else:
                text = " " * len(SELECTION_MARKER) + items[idx]
            lines.append(_box_line(text, inner, theme))
    lines.append(_box_edge("└", "┘", inner, theme))
    return lines


def build_context_menu_box(state: ExplorerState, theme: UITheme) -> list[str]:
    inner = CONTEXT_MENU_WIDTH - 2
    lines = [_box_edge("┌", "┐", inner, theme, title=" Actions ")]
    for idx, action in enumerate(CONTEXT_MENU_OPTIONS):
        if idx == state.context_cursor:
            label = SELECTION_MARKER + action.value
            text = f"{theme.dropdown_selected}{fit_ansi_line(label, inner)}{theme.reset}" if theme.dropdown_selected else label
        else:
            text = " " * len(SELECTION_MARKER) + action.value
        lines.append(_box_line(text, inner, theme))
    lines.append(_box_edge("└", "┘", inner, theme))
    return lines


def overlay_box(lines: list[str], box: list[str], row: int, col: int, theme: UITheme) -> None:
    """Draw ``box`` over ``lines`` starting at ``(row, col)``; text right of the box is dropped."""
    for offset, box_line in enumerate(box):
        target = row + offset
        if not 0 <= target < len(lines):
            break
        left = fit_ansi_line(lines[target], col) if col > 0 else ""
        lines[target] = f"{left}{theme.reset}{box_line}"


def build_status_line(state: ExplorerState, width: int) -> str:
    if state.total_hits == 0:
        right = " 0/0 "
    else:
        right = f" Page {state.page}/{state.total_pages()} ({len(state.logs)}/{state.total_hits}) "
    usable = max(1, width)
    if usable <= len(right):
        return right[-usable:]
    left = clip_ansi_line(f" {state.status}", usable - len(right))
    gap = " " * (usable - display_width(left) - len(right))
    return f"{left}{gap}{right}"


def layout_rows(height: int, has_preview: bool) -> tuple[int, int]:
    """Split the body between the log table and the record preview."""
    body = max(1, height - FIXED_ROWS)
    preview = min(PREVIEW_MAX_ROWS, body // 3) if has_preview and body >= 6 else 0
    return max(1, body - preview), preview


def build_frame_lines(context: RenderContext) -> list[str]:
    state = context.state
    theme = context.theme
    width = max(1, context.width)
    table_rows, preview_rows = layout_rows(context.height, state.selected_log() is not None)

    filter_bar, chip_columns = build_filter_bar(state, theme)
    lines = [filter_bar, build_search_line(state, theme), build_header_row(width, theme)]
    table_top = len(lines)
    lines.extend(build_table_rows(state, table_rows, width, theme))
    lines.extend(build_preview_rows(context, preview_rows))
    lines.append(hints_line(state.focused, theme))

    body_rows = table_rows + preview_rows
    if state.focused in FILTER_PANES:
        box_width = min(width, max(DROPDOWN_MIN_WIDTH, max((len(v) for v in state.active_filter().items), default=0) + 6))
        col = max(0, min(chip_columns[state.focused], width - box_width))
        box = build_dropdown_box(state.active_filter(), box_width, body_rows + 1, theme)
        overlay_box(lines, box, table_top - 1, col, theme)
    elif state.focused is Pane.LOG_CONTEXT:
        box = build_context_menu_box(state, theme)
        row = table_top + max(0, (table_rows - len(box)) // 2)
        col = max(0, (width - CONTEXT_MENU_WIDTH) // 2)
        overlay_box(lines, box, row, col, theme)

    out = [clip_ansi_line(line, width) + (theme.reset if "\033" in line else "") for line in lines]
    status = build_status_line(state, width)
    out.append(f"{theme.reverse}{status}{theme.reset}" if theme.reverse else status)
    return out[: max(1, context.height)]


def render_frame(context: RenderContext) -> str:
    """Full-screen frame: cursor home, clear, then the composed lines."""
    return "\033[H\033[J" + "\r\n".join(build_frame_lines(context))
