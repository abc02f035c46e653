"""Tests for query construction and page arithmetic.

Checks the translation of committed filter values into search parameters
and OpenSearch request bodies, including the ``ALL`` sentinel and defaults.
"""

from __future__ import annotations

import unittest

from logexplorer import query
from logexplorer.query import (
    ALL,
    MissingFilterError,
    SearchParams,
    build_facets_body,
    build_search_body,
    build_search_params,
)


def _params(**overrides) -> SearchParams:
    values = dict(
        environment="prod",
        application=ALL,
        severity=ALL,
        time_range="15m",
        search_text="",
        search_mode=query.SEARCH_MODE_EACH_WORD,
        search_fields="message",
        page_size="100",
        page=1,
    )
    values.update(overrides)
    return build_search_params(**values)


class PageArithmeticTests(unittest.TestCase):
    def test_total_pages_rounds_up(self) -> None:
        self.assertEqual(query.total_pages(101, 50), 3)
        self.assertEqual(query.total_pages(100, 50), 2)
        self.assertEqual(query.total_pages(1, 100), 1)

    def test_total_pages_never_below_one(self) -> None:
        self.assertEqual(query.total_pages(0, 100), 1)
        self.assertEqual(query.total_pages(250, 0), 1)

    def test_page_offset(self) -> None:
        self.assertEqual(query.page_offset(1, 50), 0)
        self.assertEqual(query.page_offset(2, 50), 50)
        self.assertEqual(query.page_offset(3, 200), 400)

    def test_parse_page_size_defaults(self) -> None:
        self.assertEqual(query.parse_page_size(None), 100)
        self.assertEqual(query.parse_page_size("abc"), 100)
        self.assertEqual(query.parse_page_size("0"), 100)
        self.assertEqual(query.parse_page_size(" 500 "), 500)


class SearchParamsTests(unittest.TestCase):
    def test_missing_environment_raises(self) -> None:
        with self.assertRaises(MissingFilterError) as ctx:
            _params(environment=None)
        self.assertEqual(str(ctx.exception), "No environment selected")

    def test_all_sentinel_is_omitted(self) -> None:
        params = _params(application=ALL, severity="ERROR")

        self.assertIsNone(params.application)
        self.assertEqual(params.severity, "ERROR")

    def test_time_range_tokens_map_to_relative_expressions(self) -> None:
        self.assertEqual(_params(time_range="3h").time_range_expr, "now-3h")
        self.assertEqual(_params(time_range="7d").time_range_expr, "now-7d")

    def test_unknown_or_missing_time_range_defaults_to_five_minutes(self) -> None:
        self.assertEqual(_params(time_range=None).time_range_expr, "now-5m")
        self.assertEqual(_params(time_range="2y").time_range_expr, "now-5m")

    def test_offset_follows_page_and_size(self) -> None:
        params = _params(page=2, page_size="50")

        self.assertEqual(params.from_, 50)
        self.assertEqual(params.size, 50)

    def test_blank_search_text_becomes_none(self) -> None:
        self.assertIsNone(_params(search_text="   ").search_text)
        self.assertEqual(_params(search_text=" timeout ").search_text, "timeout")

    def test_search_mode_and_fields(self) -> None:
        params = _params(search_mode=query.SEARCH_MODE_EXACT, search_fields="message + stacktrace")

        self.assertTrue(params.search_exact)
        self.assertEqual(params.search_fields, ("message", "stacktrace"))
        self.assertEqual(_params(search_fields=None).search_fields, ("message",))


class SearchBodyTests(unittest.TestCase):
    def test_body_contains_required_clauses_sort_and_window(self) -> None:
        body = build_search_body(_params(page=3, page_size="200"))

        must = body["query"]["bool"]["must"]
        self.assertIn({"match": {"profiles": "prod"}}, must)
        self.assertIn({"range": {"@timestamp": {"gte": "now-15m"}}}, must)
        self.assertEqual(len(must), 2)
        self.assertEqual(body["from"], 400)
        self.assertEqual(body["size"], 200)
        self.assertEqual(body["sort"], [{"@timestamp": "desc"}])
        self.assertTrue(body["track_total_hits"])

    def test_application_and_severity_clauses(self) -> None:
        body = build_search_body(_params(application="billing", severity="WARN"))

        must = body["query"]["bool"]["must"]
        self.assertIn({"match": {"application": "billing"}}, must)
        self.assertIn({"match": {"severity": "WARN"}}, must)

    def test_each_word_search_wraps_words_in_wildcards(self) -> None:
        body = build_search_body(_params(search_text="order failed"))

        clause = body["query"]["bool"]["must"][-1]["query_string"]
        self.assertEqual(clause["query"], "*order* *failed*")
        self.assertEqual(clause["fields"], ["message"])
        self.assertEqual(clause["default_operator"], "AND")

    def test_each_word_search_escapes_reserved_characters(self) -> None:
        self.assertEqual(query.wildcard_query("a:b (x)"), "*a\\:b* *\\(x\\)*")

    def test_exact_search_uses_match_phrase_for_single_field(self) -> None:
        body = build_search_body(_params(search_text="connection reset", search_mode=query.SEARCH_MODE_EXACT))

        self.assertEqual(body["query"]["bool"]["must"][-1], {"match_phrase": {"message": "connection reset"}})

    def test_exact_search_over_several_fields_uses_phrase_multi_match(self) -> None:
        body = build_search_body(
            _params(
                search_text="NullPointer",
                search_mode=query.SEARCH_MODE_EXACT,
                search_fields="message + stacktrace",
            )
        )

        self.assertEqual(
            body["query"]["bool"]["must"][-1],
            {"multi_match": {"query": "NullPointer", "type": "phrase", "fields": ["message", "stacktrace"]}},
        )

    def test_facets_body_aggregates_keyword_fields(self) -> None:
        body = build_facets_body()

        self.assertEqual(body["size"], 0)
        self.assertEqual(body["aggs"]["profiles"]["terms"]["field"], "profiles.keyword")
        self.assertEqual(body["aggs"]["applications"]["terms"]["field"], "application.keyword")
        self.assertEqual(body["aggs"]["severities"]["terms"]["field"], "severity.keyword")


if __name__ == "__main__":
    unittest.main()
