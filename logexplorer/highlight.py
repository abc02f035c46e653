"""Colorization of record previews and search matches.

Record previews are pretty-printed JSON highlighted with pygments; search
matches inside table cells are marked with a theme escape sequence.
"""

from __future__ import annotations

import json
from collections.abc import Mapping

from pygments import highlight as pygments_highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import JsonLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_FORMATTERS: dict[str, TerminalFormatter] = {}
_JSON_LEXER = JsonLexer()


def normalize_style(style: str) -> str:
    """Return ``style`` when pygments knows it, else the default style."""
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


def _formatter_for_style(style: str) -> TerminalFormatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalFormatter(style=normalize_style(style))
        _FORMATTERS[style] = formatter
    return formatter


def record_json(source: Mapping[str, object]) -> str:
    return json.dumps(dict(source), indent=2, ensure_ascii=False, sort_keys=True, default=str)


def colorize_record(source: Mapping[str, object], style: str = DEFAULT_STYLE, no_color: bool = False) -> list[str]:
    """Pretty-print a record's source document, one string per output line."""
    text = record_json(source)
    if no_color:
        return text.splitlines()
    rendered = pygments_highlight(text, _JSON_LEXER, _formatter_for_style(style))
    return rendered.rstrip("\n").splitlines()


def highlight_matches(text: str, query: str, on: str, off: str) -> str:
    """Wrap every case-insensitive occurrence of ``query`` in ``on``/``off``."""
    if not query or not on:
        return text
    folded_text = text.lower()
    folded_query = query.lower()
    # Lowercasing can change length for some code points; skip highlighting then.
    if len(folded_text) != len(text):
        return text

    out: list[str] = []
    pos = 0
    while True:
        start = folded_text.find(folded_query, pos)
        if start < 0:
            break
        end = start + len(folded_query)
        out.append(text[pos:start])
        out.append(f"{on}{text[start:end]}{off}")
        pos = end
    out.append(text[pos:])
    return "".join(out)
