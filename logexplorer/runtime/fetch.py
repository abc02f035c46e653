"""Asynchronous fetch boundary between explorer state and the search backend.

Every fetch is one :class:`asyncio.Task` wrapping the blocking backend call in a
worker thread. The caller awaits it, so at most one request is in flight.
Failures are converted into status text and never overwrite the current page.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from ..query import MissingFilterError, total_pages
from ..search.client import SearchBackend, SearchBackendError
from .state import ExplorerState

logger = logging.getLogger(__name__)


class LogFetcher:
    """Runs facet loading and page fetches against ``backend``."""

    def __init__(
        self,
        state: ExplorerState,
        backend: SearchBackend,
        on_progress: Callable[[], None] | None = None,
    ) -> None:
        self.state = state
        self.backend = backend
        self.on_progress = on_progress
        self.current_task: asyncio.Task | None = None

    def _notify_progress(self) -> None:
        if self.on_progress is not None:
            self.on_progress()

    def cancel(self) -> bool:
        """Cancel the in-flight fetch, if any. Returns whether one was pending."""
        task = self.current_task
        if task is None or task.done():
            return False
        return task.cancel()

    async def load_facets(self) -> bool:
        """Populate environment/application/severity candidates from the backend."""
        self.state.status = "Fetching available filters..."
        self._notify_progress()
        try:
            facets = await asyncio.to_thread(self.backend.list_facets)
        except SearchBackendError as exc:
            logger.warning("facet loading failed: %s", exc)
            self.state.status = f"Error loading filters: {exc}"
            return False

        self.state.apply_facets(facets.environments, facets.applications, facets.severities)
        self.state.status = (
            f"{len(facets.environments)} environments, {len(facets.applications)} applications"
            " - select filters and press Enter"
        )
        logger.info(
            "loaded facets: %d environments, %d applications, %d severities",
            len(facets.environments),
            len(facets.applications),
            len(facets.severities),
        )
        return True

    async def fetch_page(self, page: int) -> bool:
        """Fetch ``page`` for the committed filters.

        On success the page buffer, totals, and page number are replaced and
        focus returns to the logs pane. On failure only ``status`` changes.
        """
        try:
            params = self.state.build_params(page)
        except MissingFilterError as exc:
            self.state.status = str(exc)
            return False

        label = self.state.query_label()
        self.state.status = f"Fetching logs from {label}..."
        self._notify_progress()
        logger.info("fetching page %d (from=%d size=%d) for %s", page, params.from_, params.size, label)

        task = asyncio.create_task(asyncio.to_thread(self.backend.search, params))
        self.current_task = task
        try:
            result = await task
        except SearchBackendError as exc:
            logger.warning("fetch failed for %s: %s", label, exc)
            self.state.status = f"Error: {exc}"
            return False
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            self.state.status = "Fetch cancelled"
            return False
        finally:
            self.current_task = None

        last_page = total_pages(result.total_hits, params.size)
        if page > last_page:
            # Hits shrank under the requested page; show the real last page instead.
            logger.info("page %d is past the last page %d, fetching it instead", page, last_page)
            return await self.fetch_page(last_page)

        self.state.apply_page(result.records, result.total_hits, page, params.size)
        self.state.status = f"Loaded {len(result.records)} logs from {label}"
        logger.info("loaded %d logs (%d total hits)", len(result.records), result.total_hits)
        return True
