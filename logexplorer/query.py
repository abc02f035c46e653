"""Query construction and page arithmetic.

Turns committed filter values plus a page number into :class:`SearchParams`,
renders those parameters as an OpenSearch request body, and converts total hit
counts into page counts. Everything here is pure so it can be tested without a
backend.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

ALL = "ALL"

TIME_RANGE_TOKENS: tuple[str, ...] = ("1m", "5m", "15m", "30m", "1h", "3h", "6h", "12h", "24h", "3d", "7d")
TIME_RANGE_EXPRESSIONS: dict[str, str] = {token: f"now-{token}" for token in TIME_RANGE_TOKENS}
DEFAULT_TIME_RANGE_EXPR = "now-5m"

PAGE_SIZE_CHOICES: tuple[str, ...] = ("50", "100", "200", "500", "1000")
DEFAULT_PAGE_SIZE = 100

SEARCH_MODE_EACH_WORD = "each word"
SEARCH_MODE_EXACT = "exact"
SEARCH_MODES: tuple[str, ...] = (SEARCH_MODE_EACH_WORD, SEARCH_MODE_EXACT)

SEARCH_FIELD_CHOICES: dict[str, tuple[str, ...]] = {
    "message": ("message",),
    "stacktrace": ("stacktrace",),
    "message + stacktrace": ("message", "stacktrace"),
}
DEFAULT_SEARCH_FIELDS: tuple[str, ...] = ("message",)

FACET_LOOKBACK_EXPR = "now-24h"

# query_string syntax characters that must be escaped inside a term.
_QUERY_STRING_RESERVED_RE = re.compile(r'([+\-=&|!(){}\[\]^"~*?:\\/<>])')


@dataclass(frozen=True)
class SearchParams:
    environment: str
    application: str | None
    severity: str | None
    time_range_expr: str
    search_text: str | None
    search_exact: bool
    search_fields: tuple[str, ...]
    from_: int
    size: int


class MissingFilterError(ValueError):
    """Raised when a required filter has no committed value."""


def resolve_time_range(token: str | None) -> str:
    """Map a time-range token to its relative expression, defaulting to 5 minutes."""
    if token is None:
        return DEFAULT_TIME_RANGE_EXPR
    return TIME_RANGE_EXPRESSIONS.get(token, DEFAULT_TIME_RANGE_EXPR)


def parse_page_size(value: str | None) -> int:
    """Parse a committed page-size value; unset or invalid values give 100."""
    if value is None:
        return DEFAULT_PAGE_SIZE
    try:
        parsed = int(value.strip())
    except ValueError:
        return DEFAULT_PAGE_SIZE
    return parsed if parsed > 0 else DEFAULT_PAGE_SIZE


def resolve_search_fields(label: str | None) -> tuple[str, ...]:
    if label is None:
        return DEFAULT_SEARCH_FIELDS
    return SEARCH_FIELD_CHOICES.get(label, DEFAULT_SEARCH_FIELDS)


def omit_all(value: str | None) -> str | None:
    """Treat the ``ALL`` sentinel (and no value) as "no clause"."""
    if value is None or value == ALL:
        return None
    return value


def page_offset(page: int, page_size: int) -> int:
    return max(0, page - 1) * max(0, page_size)


def total_pages(total_hits: int, page_size: int) -> int:
    """Number of pages for ``total_hits``; never below 1."""
    if page_size <= 0 or total_hits <= 0:
        return 1
    return max(1, math.ceil(total_hits / page_size))


def build_search_params(
    *,
    environment: str | None,
    application: str | None,
    severity: str | None,
    time_range: str | None,
    search_text: str,
    search_mode: str | None,
    search_fields: str | None,
    page_size: str | None,
    page: int,
) -> SearchParams:
    """Build backend parameters from committed filter values.

    Raises :class:`MissingFilterError` when no environment is committed.
    """
    if not environment:
        raise MissingFilterError("No environment selected")
    size = parse_page_size(page_size)
    return SearchParams(
        environment=environment,
        application=omit_all(application),
        severity=omit_all(severity),
        time_range_expr=resolve_time_range(time_range),
        search_text=search_text.strip() or None,
        search_exact=search_mode == SEARCH_MODE_EXACT,
        search_fields=resolve_search_fields(search_fields),
        from_=page_offset(page, size),
        size=size,
    )


def escape_query_string_term(term: str) -> str:
    return _QUERY_STRING_RESERVED_RE.sub(r"\\\1", term)


def wildcard_query(text: str) -> str:
    """Wrap each whitespace-separated word as ``*word*``."""
    return " ".join(f"*{escape_query_string_term(word)}*" for word in text.split())


def search_clause(text: str, exact: bool, fields: tuple[str, ...]) -> dict[str, object] | None:
    if exact:
        if len(fields) == 1:
            return {"match_phrase": {fields[0]: text}}
        return {"multi_match": {"query": text, "type": "phrase", "fields": list(fields)}}
    query = wildcard_query(text)
    if not query:
        return None
    return {
        "query_string": {
            "query": query,
            "fields": list(fields),
            "default_operator": "AND",
            "analyze_wildcard": True,
        }
    }


def build_search_body(params: SearchParams) -> dict[str, object]:
    """Render ``params`` as an OpenSearch ``_search`` request body."""
    must: list[dict[str, object]] = [
        {"match": {"profiles": params.environment}},
        {"range": {"@timestamp": {"gte": params.time_range_expr}}},
    ]
    if params.application is not None:
        must.append({"match": {"application": params.application}})
    if params.severity is not None:
        must.append({"match": {"severity": params.severity}})
    if params.search_text is not None:
        clause = search_clause(params.search_text, params.search_exact, params.search_fields)
        if clause is not None:
            must.append(clause)

    return {
        "query": {"bool": {"must": must}},
        "from": params.from_,
        "size": params.size,
        "sort": [{"@timestamp": "desc"}],
        "track_total_hits": True,
    }


def _terms_aggregation(field: str, size: int) -> dict[str, object]:
    return {"terms": {"field": field, "size": size, "order": {"_key": "asc"}}}


def build_facets_body() -> dict[str, object]:
    """Aggregation request listing recent environments, applications and severities."""
    return {
        "size": 0,
        "query": {"range": {"@timestamp": {"gte": FACET_LOOKBACK_EXPR}}},
        "aggs": {
            "applications": _terms_aggregation("application.keyword", 100),
            "profiles": _terms_aggregation("profiles.keyword", 20),
            "severities": _terms_aggregation("severity.keyword", 20),
        },
    }
