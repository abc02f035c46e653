"""OpenSearch HTTP backend.

Issues ``_search`` requests against an index pattern and decodes facet
aggregations and log hits. Every transport, HTTP, timeout, and decoding failure
is raised as :class:`SearchBackendError` so callers handle one error type.
"""

from __future__ import annotations

import base64
import http.client
import json
import logging
import socket
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from ..query import SearchParams, build_facets_body, build_search_body
from .records import LogRecord, records_from_hits

logger = logging.getLogger(__name__)

DEFAULT_INDEX_PATTERN = "logs-*"
DEFAULT_TIMEOUT_SECONDS = 30.0


class SearchBackendError(RuntimeError):
    """Raised when the search backend cannot serve a request."""


@dataclass(frozen=True)
class Facets:
    environments: list[str] = field(default_factory=list)
    applications: list[str] = field(default_factory=list)
    severities: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SearchResult:
    records: list[LogRecord]
    total_hits: int


class SearchBackend(Protocol):
    def list_facets(self) -> Facets: ...

    def search(self, params: SearchParams) -> SearchResult: ...


def is_http_url(url: str) -> bool:
    """True when ``url`` has an http(s) scheme and a host."""
    parsed = urllib.parse.urlsplit(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def bucket_keys(aggregation: object) -> list[str]:
    """Return string bucket keys of one terms aggregation, in response order."""
    if not isinstance(aggregation, Mapping):
        return []
    buckets = aggregation.get("buckets")
    if not isinstance(buckets, list):
        return []
    return [
        bucket["key"]
        for bucket in buckets
        if isinstance(bucket, Mapping) and isinstance(bucket.get("key"), str)
    ]


def parse_facets(body: Mapping[str, object]) -> Facets:
    aggregations = body.get("aggregations")
    if not isinstance(aggregations, Mapping):
        aggregations = {}
    return Facets(
        environments=bucket_keys(aggregations.get("profiles")),
        applications=bucket_keys(aggregations.get("applications")),
        severities=bucket_keys(aggregations.get("severities")),
    )


def _total_hits(hits: Mapping[str, object]) -> int:
    total = hits.get("total")
    # OpenSearch 1.x+ returns {"value": n, "relation": ...}; legacy returns n.
    if isinstance(total, Mapping):
        total = total.get("value")
    if isinstance(total, bool) or not isinstance(total, int):
        return 0
    return max(0, total)


def parse_search_response(body: Mapping[str, object]) -> SearchResult:
    hits = body.get("hits")
    if not isinstance(hits, Mapping) or not isinstance(hits.get("hits"), list):
        raise SearchBackendError("No hits in response")
    return SearchResult(records=records_from_hits(hits["hits"]), total_hits=_total_hits(hits))


class OpenSearchBackend:
    """Minimal OpenSearch client speaking JSON over HTTP(S)."""

    def __init__(
        self,
        endpoint_url: str,
        *,
        index_pattern: str = DEFAULT_INDEX_PATTERN,
        username: str | None = None,
        password: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.endpoint_url = endpoint_url.rstrip("/")
        self.index_pattern = index_pattern
        self.timeout_seconds = timeout_seconds
        self._auth_header: str | None = None
        if username:
            token = base64.b64encode(f"{username}:{password or ''}".encode("utf-8")).decode("ascii")
            self._auth_header = f"Basic {token}"

    def search_url(self) -> str:
        index = urllib.parse.quote(self.index_pattern, safe="*,-_.")
        return f"{self.endpoint_url}/{index}/_search"

    def _post_json(self, body: Mapping[str, object]) -> dict[str, object]:
        url = self.search_url()
        logger.debug("POST %s", url)
        try:
            request = urllib.request.Request(
                url,
                data=json.dumps(body).encode("utf-8"),
                method="POST",
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
            if self._auth_header is not None:
                request.add_header("Authorization", self._auth_header)
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                payload = response.read()
        except urllib.error.HTTPError as exc:
            raise SearchBackendError(f"HTTP {exc.code} from search backend: {exc.reason}") from exc
        except urllib.error.URLError as exc:
            raise SearchBackendError(f"Cannot reach search backend: {exc.reason}") from exc
        except (socket.timeout, TimeoutError) as exc:
            raise SearchBackendError(f"Search backend timed out after {self.timeout_seconds:g}s") from exc
        except (http.client.HTTPException, OSError) as exc:
            raise SearchBackendError(f"Search backend connection failed: {exc!r}") from exc
        except ValueError as exc:
            raise SearchBackendError(f"Invalid search endpoint {self.endpoint_url!r}: {exc}") from exc

        try:
            decoded = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SearchBackendError(f"Invalid JSON from search backend: {exc}") from exc
        if not isinstance(decoded, dict):
            raise SearchBackendError("Unexpected response shape from search backend")
        return decoded

    def list_facets(self) -> Facets:
        return parse_facets(self._post_json(build_facets_body()))

    def search(self, params: SearchParams) -> SearchResult:
        return parse_search_response(self._post_json(build_search_body(params)))
