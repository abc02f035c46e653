"""Search backend package: OpenSearch transport and log record decoding."""

from .client import (
    Facets,
    OpenSearchBackend,
    SearchBackend,
    SearchBackendError,
    SearchResult,
)
from .records import LogRecord, MalformedRecordError, record_from_source, records_from_hits

__all__ = [
    "Facets",
    "LogRecord",
    "MalformedRecordError",
    "OpenSearchBackend",
    "SearchBackend",
    "SearchBackendError",
    "SearchResult",
    "record_from_source",
    "records_from_hits",
]
