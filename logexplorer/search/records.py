"""Log record model and per-hit decoding.

Hits that fail to decode are dropped rather than failing the whole page, so a
page may hold fewer records than the requested size.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class MalformedRecordError(ValueError):
    """Raised when one search hit cannot be decoded into a :class:`LogRecord`."""


@dataclass(frozen=True)
class LogRecord:
    timestamp: str
    message: str = ""
    severity: str = ""
    application: str = ""
    logger: str = ""
    thread: str = ""
    environment: str = ""
    method: str = ""
    stacktrace: str = ""
    trace_id: str | None = None
    raw: Mapping[str, object] = field(default_factory=dict, compare=False, repr=False)

    @property
    def has_stacktrace(self) -> bool:
        return bool(self.stacktrace)

    def full_text(self) -> str:
        """Message followed by the stack trace, when one is attached."""
        if not self.stacktrace:
            return self.message
        return f"{self.message}\n{self.stacktrace}"

    def summary_line(self) -> str:
        """One-line ``[ts] LEVEL [logger] message`` form used for page exports."""
        return f"[{self.timestamp}] {self.severity} [{self.logger}] {self.message}"


# Document keys mapped onto LogRecord attributes.
_STRING_FIELDS: tuple[tuple[str, str], ...] = (
    ("message", "message"),
    ("severity", "severity"),
    ("application", "application"),
    ("logger", "logger"),
    ("thread", "thread"),
    ("profiles", "environment"),
    ("method", "method"),
    ("stacktrace", "stacktrace"),
)


def _optional_str(source: Mapping[str, object], key: str) -> str:
    value = source.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRecordError(f"field {key!r} is not a string")
    return value


def record_from_source(source: object) -> LogRecord:
    """Decode one ``_source`` document.

    ``@timestamp`` is required; the remaining string fields default to empty.
    """
    if not isinstance(source, Mapping):
        raise MalformedRecordError("hit source is not an object")
    timestamp = source.get("@timestamp")
    if not isinstance(timestamp, str) or not timestamp:
        raise MalformedRecordError("missing @timestamp")

    values = {attr: _optional_str(source, key) for key, attr in _STRING_FIELDS}
    trace_id = source.get("traceId")
    if trace_id is not None and not isinstance(trace_id, str):
        raise MalformedRecordError("field 'traceId' is not a string")

    return LogRecord(
        timestamp=timestamp,
        trace_id=trace_id or None,
        raw=dict(source),
        **values,
    )


def records_from_hits(hits: Iterable[object]) -> list[LogRecord]:
    """Decode search hits in order, skipping the ones that do not decode."""
    records: list[LogRecord] = []
    dropped = 0
    for hit in hits:
        source = hit.get("_source") if isinstance(hit, Mapping) else None
        try:
            records.append(record_from_source(source))
        except MalformedRecordError as exc:
            dropped += 1
            logger.debug("dropping malformed hit: %s", exc)
    if dropped:
        logger.info("dropped %d malformed hit(s) from page", dropped)
    return records
