"""Runtime composition layer for logexplorer.

Builds initial state, wires the backend, fetcher, actions, and renderer
together, loads filter candidates, and starts the loop inside a raw-mode
terminal session.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from ..config import ExplorerSettings
from ..highlight import DEFAULT_STYLE
from ..render import RenderContext, render_frame
from ..search.client import OpenSearchBackend, SearchBackend
from ..ui_theme import resolve_theme
from .actions import ActionRunner
from .controller import ExplorerController
from .fetch import LogFetcher
from .loop import RuntimeLoopTiming, run_main_loop
from .state import ExplorerState
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def build_backend(settings: ExplorerSettings) -> OpenSearchBackend:
    if not settings.endpoint_url:
        raise ValueError("No search endpoint configured")
    return OpenSearchBackend(
        settings.endpoint_url,
        index_pattern=settings.index_pattern,
        username=settings.username,
        password=settings.password,
        timeout_seconds=settings.request_timeout_seconds,
    )


def build_state(settings: ExplorerSettings) -> ExplorerState:
    return ExplorerState.with_presets(
        time_range=settings.default_time_range,
        page_size=settings.default_page_size,
        environment=settings.default_environment,
    )


async def start_session(fetcher: LogFetcher) -> None:
    """Load filter candidates and fetch the first page when a known environment is preset."""
    if not await fetcher.load_facets():
        return
    state = fetcher.state
    if state.preset_environment and state.selected_environment() == state.preset_environment:
        await fetcher.fetch_page(1)


async def _run_session(
    controller: ExplorerController,
    terminal: TerminalController,
    redraw,
    timing: RuntimeLoopTiming,
) -> None:
    await start_session(controller.fetcher)
    await run_main_loop(controller, terminal.stdin_fd, redraw, terminal.size, timing)


def run_explorer(
    settings: ExplorerSettings,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
    backend: SearchBackend | None = None,
) -> None:
    """Run the interactive explorer until the user quits."""
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("logexplorer needs an interactive terminal (use --print for plain output).")

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    theme = resolve_theme(settings.theme, no_color=no_color or bool(os.environ.get("NO_COLOR")))
    state = build_state(settings)

    def redraw() -> None:
        if not terminal.tui_enabled:
            return
        width, height = terminal.size()
        context = RenderContext(state=state, theme=theme, width=width, height=height, style=style, no_color=no_color)
        terminal.write_frame(render_frame(context))

    fetcher = LogFetcher(state, backend if backend is not None else build_backend(settings), on_progress=redraw)
    actions = ActionRunner(disable_tui_mode=terminal.disable_tui_mode, enable_tui_mode=terminal.enable_tui_mode)
    controller = ExplorerController(state, fetcher, actions)

    logger.info("starting explorer against %s (%s)", settings.endpoint_url, settings.index_pattern)
    with terminal.raw_mode():
        asyncio.run(_run_session(controller, terminal, redraw, RuntimeLoopTiming()))
