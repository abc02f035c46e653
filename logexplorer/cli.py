"""Command-line front door for logexplorer.

Parses CLI options, merges them over the persisted config, configures file
logging, and dispatches into the interactive explorer or the plain ``--print``
output mode.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Callable

from .config import ExplorerSettings, load_settings, save_endpoint_url, save_theme_name
from .diagnostics import configure_logging
from .highlight import DEFAULT_STYLE, normalize_style
from .query import (
    ALL,
    PAGE_SIZE_CHOICES,
    SEARCH_FIELD_CHOICES,
    SEARCH_MODE_EACH_WORD,
    SEARCH_MODE_EXACT,
    TIME_RANGE_TOKENS,
    build_search_params,
    total_pages,
)
from .runtime import run_explorer
from .runtime.app import build_backend
from .search.client import SearchBackend, SearchBackendError, is_http_url
from .ui_theme import available_theme_names, normalize_theme_name

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def _endpoint_url(value: str) -> str:
    """argparse type for http(s) endpoint URLs."""
    if not is_http_url(value):
        raise argparse.ArgumentTypeError(f"expected an http:// or https:// URL: {value!r}")
    return value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse, filter, and page through log records stored in OpenSearch."
    )
    parser.add_argument(
        "--endpoint", type=_endpoint_url, help="OpenSearch endpoint URL (remembered in the config file)."
    )
    parser.add_argument("--index", dest="index_pattern", help="Index pattern to search (default: logs-*).")
    parser.add_argument("--username", help="HTTP basic-auth user name.")
    parser.add_argument("--password", help="HTTP basic-auth password.")
    parser.add_argument("--timeout", type=_positive_float, help="Request timeout in seconds (default: 30).")
    parser.add_argument("--environment", "-e", help="Environment selected on startup.")
    parser.add_argument("--time-range", choices=TIME_RANGE_TOKENS, help="Initial time range.")
    parser.add_argument("--limit", choices=PAGE_SIZE_CHOICES, help="Initial page size.")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name for the record preview.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--log-file", help="Write diagnostics to this file instead of the user log directory.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug details.")

    plain = parser.add_argument_group("plain output")
    plain.add_argument("--print", dest="print_page", action="store_true", help="Print one page of logs and exit.")
    plain.add_argument("--application", "-a", help="Application filter for --print.")
    plain.add_argument("--severity", "-s", help="Severity filter for --print.")
    plain.add_argument("--search", default="", help="Search text for --print.")
    plain.add_argument("--exact", action="store_true", help="Match --search as an exact phrase.")
    plain.add_argument(
        "--fields",
        choices=tuple(SEARCH_FIELD_CHOICES),
        default="message",
        help="Fields searched by --search.",
    )
    plain.add_argument("--page", type=_positive_int, default=1, help="Page number for --print.")
    return parser


def merge_settings(settings: ExplorerSettings, args: argparse.Namespace) -> ExplorerSettings:
    """Overlay explicitly given CLI flags on persisted settings."""
    overrides = {
        "endpoint_url": args.endpoint,
        "index_pattern": args.index_pattern,
        "username": args.username,
        "password": args.password,
        "request_timeout_seconds": args.timeout,
        "theme": args.theme,
        "default_environment": args.environment,
        "default_time_range": args.time_range,
        "default_page_size": args.limit,
    }
    return dataclasses.replace(settings, **{key: value for key, value in overrides.items() if value is not None})


def prompt_for_endpoint(input_fn: Callable[[str], str] = input) -> str | None:
    """Ask for an endpoint URL on the plain terminal.

    Returns ``None`` when the answer is blank or not an http(s) URL.
    """
    try:
        answer = input_fn("OpenSearch endpoint URL: ")
    except EOFError:
        return None
    answer = answer.strip()
    if not answer:
        return None
    if not is_http_url(answer):
        sys.stderr.write(f"Not an http:// or https:// URL: {answer}\n")
        return None
    return answer


def print_page(settings: ExplorerSettings, args: argparse.Namespace, backend: SearchBackend) -> int:
    """Fetch a single page for the CLI filters and write summary lines to stdout."""
    if not settings.default_environment:
        sys.stderr.write("--print needs --environment\n")
        return 2
    params = build_search_params(
        environment=settings.default_environment,
        application=args.application or ALL,
        severity=args.severity or ALL,
        time_range=settings.default_time_range,
        search_text=args.search,
        search_mode=SEARCH_MODE_EXACT if args.exact else SEARCH_MODE_EACH_WORD,
        search_fields=args.fields,
        page_size=settings.default_page_size,
        page=args.page,
    )
    try:
        result = backend.search(params)
    except SearchBackendError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    for record in result.records:
        sys.stdout.write(record.summary_line() + "\n")
    pages = total_pages(result.total_hits, params.size)
    sys.stdout.write(f"-- Page {args.page}/{pages} ({len(result.records)}/{result.total_hits})\n")
    return 0


def main(argv: list[str] | None = None, backend: SearchBackend | None = None) -> int:
    """Parse CLI arguments and launch the explorer.

    ``backend`` is primarily for tests; when omitted an OpenSearch backend is
    built from the merged settings.
    """
    args = build_parser().parse_args(argv)
    log_path = configure_logging(args.log_file, verbose=args.verbose)
    logger.debug("logging to %s", log_path)

    settings = merge_settings(load_settings(), args)
    if args.endpoint:
        save_endpoint_url(args.endpoint)
    if args.theme:
        save_theme_name(normalize_theme_name(args.theme))
    if not settings.endpoint_url and backend is None:
        endpoint = prompt_for_endpoint()
        if endpoint is None:
            raise SystemExit("No OpenSearch endpoint configured.")
        save_endpoint_url(endpoint)
        settings = dataclasses.replace(settings, endpoint_url=endpoint)

    style = normalize_style(args.style)
    if args.print_page:
        return print_page(settings, args, backend if backend is not None else build_backend(settings))

    run_explorer(settings, style=style, no_color=args.no_color, backend=backend)
    return 0
