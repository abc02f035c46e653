"""Main interactive event loop for the terminal UI.

Polls for keys, redraws after every handled key or terminal resize, and stops
when the controller reports a quit. Feature logic lives in the controller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from .controller import ExplorerController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_poll_ms: int = 100


async def run_main_loop(
    controller: ExplorerController,
    stdin_fd: int,
    redraw: Callable[[], None],
    terminal_size: Callable[[], tuple[int, int]],
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
    read: Callable[..., str] = read_key,
) -> None:
    """Run the interactive loop until a quit key is handled."""
    last_size: tuple[int, int] | None = None
    dirty = True
    while True:
        size = terminal_size()
        if size != last_size:
            last_size = size
            dirty = True
        if dirty:
            redraw()
            dirty = False

        key = read(stdin_fd, timeout_ms=timing.key_poll_ms)
        if not key:
            await asyncio.sleep(0)
            continue
        logger.debug("key %r in %s", key, controller.state.focused.name)
        if await controller.handle_key(key):
            logger.info("quit requested")
            return
        dirty = True
