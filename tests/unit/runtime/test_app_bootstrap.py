"""Tests for explorer bootstrap helpers: state presets, backend wiring, startup fetch."""

from __future__ import annotations

import asyncio
import unittest
from unittest import mock

from logexplorer.config import ExplorerSettings
from logexplorer.runtime import app
from logexplorer.runtime.fetch import LogFetcher
from logexplorer.search.client import Facets, OpenSearchBackend, SearchResult


class _Backend:
    def __init__(self) -> None:
        self.searches = 0

    def list_facets(self) -> Facets:
        return Facets(environments=["dev", "prod"], applications=["api"], severities=["INFO"])

    def search(self, params) -> SearchResult:
        self.searches += 1
        return SearchResult(records=[], total_hits=0)


class AppBootstrapTests(unittest.TestCase):
    def test_build_state_applies_presets(self) -> None:
        state = app.build_state(
            ExplorerSettings(default_time_range="1h", default_page_size="500", default_environment="prod")
        )

        self.assertEqual(state.time_filter.selected_value(), "1h")
        self.assertEqual(state.page_size_filter.selected_value(), "500")
        self.assertEqual(state.preset_environment, "prod")

    def test_build_backend_requires_endpoint(self) -> None:
        with self.assertRaises(ValueError):
            app.build_backend(ExplorerSettings())

    def test_build_backend_passes_connection_settings(self) -> None:
        backend = app.build_backend(
            ExplorerSettings(endpoint_url="http://localhost:9200/", index_pattern="app-*", request_timeout_seconds=5)
        )

        self.assertIsInstance(backend, OpenSearchBackend)
        self.assertEqual(backend.search_url(), "http://localhost:9200/app-*/_search")
        self.assertEqual(backend.timeout_seconds, 5)

    def test_start_session_fetches_when_preset_environment_exists(self) -> None:
        backend = _Backend()
        state = app.build_state(ExplorerSettings(default_environment="prod"))

        asyncio.run(app.start_session(LogFetcher(state, backend)))

        self.assertEqual(state.selected_environment(), "prod")
        self.assertEqual(backend.searches, 1)

    def test_start_session_waits_for_user_without_preset(self) -> None:
        backend = _Backend()
        state = app.build_state(ExplorerSettings())

        asyncio.run(app.start_session(LogFetcher(state, backend)))

        self.assertEqual(backend.searches, 0)
        self.assertIn("select filters and press Enter", state.status)

    def test_start_session_ignores_unknown_preset_environment(self) -> None:
        backend = _Backend()
        state = app.build_state(ExplorerSettings(default_environment="qa"))

        asyncio.run(app.start_session(LogFetcher(state, backend)))

        self.assertEqual(backend.searches, 0)

    def test_run_explorer_requires_a_terminal(self) -> None:
        with mock.patch("logexplorer.runtime.app.sys.stdin") as stdin:
            stdin.isatty.return_value = False
            with self.assertRaises(SystemExit):
                app.run_explorer(ExplorerSettings(endpoint_url="http://localhost:9200"))


if __name__ == "__main__":
    unittest.main()
