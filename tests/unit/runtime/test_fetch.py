"""Tests for the asynchronous fetch boundary.

Fake backends stand in for OpenSearch; ``asyncio.run`` drives each fetch to
completion so state transitions can be checked directly.
"""

from __future__ import annotations

import asyncio
import threading
import unittest

from logexplorer.query import SearchParams
from logexplorer.runtime.fetch import LogFetcher
from logexplorer.runtime.panes import Pane
from logexplorer.runtime.state import ExplorerState
from logexplorer.search.client import Facets, OpenSearchBackend, SearchBackendError, SearchResult
from logexplorer.search.records import LogRecord


def _records(count: int, prefix: str = "m") -> list[LogRecord]:
    return [LogRecord(timestamp=f"t{idx}", message=f"{prefix}{idx}") for idx in range(count)]


class FakeBackend:
    def __init__(self, result: SearchResult | None = None, error: Exception | None = None) -> None:
        self.result = result if result is not None else SearchResult(records=[], total_hits=0)
        self.error = error
        self.facets = Facets(environments=["dev", "prod"], applications=["api"], severities=["ERROR"])
        self.facets_error: Exception | None = None
        self.calls: list[SearchParams] = []

    def list_facets(self) -> Facets:
        if self.facets_error is not None:
            raise self.facets_error
        return self.facets

    def search(self, params: SearchParams) -> SearchResult:
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return self.result


class BlockingBackend(FakeBackend):
    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()

    def search(self, params: SearchParams) -> SearchResult:
        self.release.wait(5)
        return super().search(params)


class ShrinkingBackend(FakeBackend):
    """Reports 150 hits, so nothing exists past ``from=100`` at size 100."""

    def search(self, params: SearchParams) -> SearchResult:
        self.calls.append(params)
        if params.from_ >= 150:
            return SearchResult(records=[], total_hits=150)
        return SearchResult(records=_records(50, "tail"), total_hits=150)


def _ready_state() -> ExplorerState:
    state = ExplorerState.with_presets()
    state.apply_facets(["dev", "prod"], ["api"], ["ERROR"])
    state.environment_filter.select_value("prod")
    return state


class LoadFacetsTests(unittest.TestCase):
    def test_success_fills_fields_and_reports_counts(self) -> None:
        state = ExplorerState.with_presets()
        fetcher = LogFetcher(state, FakeBackend())

        self.assertTrue(asyncio.run(fetcher.load_facets()))

        self.assertEqual(state.environment_filter.items, ("dev", "prod"))
        self.assertEqual(state.application_filter.items, ("ALL", "api"))
        self.assertEqual(state.status, "2 environments, 1 applications - select filters and press Enter")

    def test_failure_sets_status_and_leaves_fields_empty(self) -> None:
        state = ExplorerState.with_presets()
        backend = FakeBackend()
        backend.facets_error = SearchBackendError("Cannot reach search backend: refused")
        fetcher = LogFetcher(state, backend)

        self.assertFalse(asyncio.run(fetcher.load_facets()))

        self.assertEqual(state.environment_filter.items, ())
        self.assertEqual(state.status, "Error loading filters: Cannot reach search backend: refused")


class FetchPageTests(unittest.TestCase):
    def test_success_replaces_page_and_focuses_logs(self) -> None:
        state = _ready_state()
        state.focused = Pane.ENVIRONMENT
        backend = FakeBackend(SearchResult(records=_records(50), total_hits=101))
        fetcher = LogFetcher(state, backend)
        state.page_size_filter.select_value("50")

        self.assertTrue(asyncio.run(fetcher.fetch_page(2)))

        self.assertEqual(backend.calls[0].from_, 50)
        self.assertEqual(len(state.logs), 50)
        self.assertEqual(state.total_hits, 101)
        self.assertEqual(state.page, 2)
        self.assertEqual(state.total_pages(), 3)
        self.assertIs(state.focused, Pane.LOGS)
        self.assertEqual(state.status, "Loaded 50 logs from ALL (prod)")
        self.assertIsNone(fetcher.current_task)

    def test_missing_environment_sets_status_without_request(self) -> None:
        state = ExplorerState.with_presets()
        backend = FakeBackend()
        fetcher = LogFetcher(state, backend)

        self.assertFalse(asyncio.run(fetcher.fetch_page(1)))

        self.assertEqual(state.status, "No environment selected")
        self.assertEqual(backend.calls, [])

    def test_failure_keeps_previous_page(self) -> None:
        state = _ready_state()
        state.apply_page(_records(3, "old"), 3, 1, 100)
        state.focused = Pane.SEVERITY
        fetcher = LogFetcher(state, FakeBackend(error=SearchBackendError("Search backend timed out after 30s")))

        self.assertFalse(asyncio.run(fetcher.fetch_page(1)))

        self.assertEqual([record.message for record in state.logs], ["old0", "old1", "old2"])
        self.assertEqual(state.total_hits, 3)
        self.assertEqual(state.page, 1)
        self.assertIs(state.focused, Pane.SEVERITY)
        self.assertEqual(state.status, "Error: Search backend timed out after 30s")

    def test_page_past_shrunken_total_fetches_last_page(self) -> None:
        state = _ready_state()
        state.apply_page(_records(100, "old"), 300, 3, 100)
        backend = ShrinkingBackend()
        fetcher = LogFetcher(state, backend)

        self.assertTrue(asyncio.run(fetcher.fetch_page(state.page)))

        self.assertEqual([params.from_ for params in backend.calls], [200, 100])
        self.assertEqual(state.page, 2)
        self.assertEqual(state.total_pages(), 2)
        self.assertEqual(len(state.logs), 50)
        self.assertEqual(state.logs[0].message, "tail0")
        self.assertTrue(state.has_previous_page())
        self.assertFalse(state.has_next_page())

    def test_scheme_less_endpoint_reports_status(self) -> None:
        state = _ready_state()
        state.apply_page(_records(2, "kept"), 2, 1, 100)
        fetcher = LogFetcher(state, OpenSearchBackend("search.internal"))

        self.assertFalse(asyncio.run(fetcher.fetch_page(1)))

        self.assertTrue(state.status.startswith("Error: Invalid search endpoint"))
        self.assertEqual([record.message for record in state.logs], ["kept0", "kept1"])

    def test_progress_callback_sees_fetching_status(self) -> None:
        state = _ready_state()
        seen: list[str] = []
        fetcher = LogFetcher(state, FakeBackend(), on_progress=lambda: seen.append(state.status))

        asyncio.run(fetcher.fetch_page(1))

        self.assertEqual(seen, ["Fetching logs from ALL (prod)..."])

    def test_cancel_abandons_in_flight_fetch(self) -> None:
        state = _ready_state()
        state.apply_page(_records(2, "kept"), 2, 1, 100)
        backend = BlockingBackend()
        fetcher = LogFetcher(state, backend)

        async def scenario() -> bool:
            fetch = asyncio.create_task(fetcher.fetch_page(1))
            while fetcher.current_task is None:
                await asyncio.sleep(0)
            self.assertTrue(fetcher.cancel())
            result = await fetch
            backend.release.set()
            return result

        self.assertFalse(asyncio.run(scenario()))
        self.assertEqual(state.status, "Fetch cancelled")
        self.assertEqual([record.message for record in state.logs], ["kept0", "kept1"])

    def test_cancel_without_fetch_is_noop(self) -> None:
        fetcher = LogFetcher(_ready_state(), FakeBackend())

        self.assertFalse(fetcher.cancel())


if __name__ == "__main__":
    unittest.main()
