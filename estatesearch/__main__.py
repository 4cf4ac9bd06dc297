"""Estatesearch command-line entry-point.

Usage:
    python -m estatesearch search  [--listings FILE] [-k KEYWORD] [-f KEY=VALUE ...]
    python -m estatesearch filter  [--listings FILE] [-f KEY=VALUE ...]
    python -m estatesearch suggest [--listings FILE] QUERY [--limit N]
    python -m estatesearch section [--listings FILE] [--min-price N] [--max-price N]
                                   [--location TEXT] [--type TYPE] [--tag TAG ...]
    python -m estatesearch types   [--listings FILE]

The listing collection is read from a JSON export (``--listings`` or the
``LISTINGS_PATH`` setting).  This module is intentionally thin: it configures
logging, loads the collection, and hands off to :mod:`estatesearch.search`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from estatesearch.cli.formatter import format_results
from estatesearch.core import configure_logging
from estatesearch.core.exceptions import ConfigError, EstateSearchError
from estatesearch.core.logging_config import request_scope
from estatesearch.core.settings import Settings
from estatesearch.search import (
    filter_by_criteria,
    filter_properties,
    get_property_suggestions,
    score,
    search_properties,
    unique_property_types,
)
from estatesearch.storage.loader import load_listings


def _parse_filter_pairs(pairs: Sequence[str]) -> dict[str, str]:
    """Turn ``["minPrice=1000000", "type=SPS-CD-ID"]`` into a dict."""
    filters: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"Filter {pair!r} must look like KEY=VALUE")
        filters[key.strip()] = value.strip()
    return filters


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="estatesearch",
        description="Search, filter and rank real-estate listings from a JSON export.",
    )
    parser.add_argument(
        "--listings",
        default=None,
        metavar="FILE",
        help="JSON file with the listing collection (overrides LISTINGS_PATH).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print matching records as JSON instead of a text summary.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        metavar="LEVEL",
        help="Override LOG_LEVEL env var (DEBUG|INFO|WARNING|ERROR).",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        metavar="FORMAT",
        help="Override LOG_FORMAT env var (text|json).",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Public search: available listings, ranked.")
    search.add_argument("-k", "--keyword", default="", help="Free-text query.")
    search.add_argument(
        "-f", "--filter", action="append", default=[], metavar="KEY=VALUE",
        help="Structured criterion, e.g. bedrooms=3 or listingType=rent (repeatable).",
    )

    flt = sub.add_parser("filter", help="AND-filter every listing by structured criteria.")
    flt.add_argument(
        "-f", "--filter", action="append", default=[], metavar="KEY=VALUE",
        help="Criterion, e.g. keyword='คอนโด ไม่เกิน 2 ล้าน' (repeatable).",
    )

    suggest = sub.add_parser("suggest", help="Autocomplete suggestions for a query.")
    suggest.add_argument("query", help="Partial query (two characters or more).")
    suggest.add_argument("--limit", type=int, default=None, help="Maximum suggestions.")

    section = sub.add_parser("section", help="Listings selected by a homepage-section rule.")
    section.add_argument("--min-price", type=float, default=None)
    section.add_argument("--max-price", type=float, default=None)
    section.add_argument("--location", default=None)
    section.add_argument("--type", default=None)
    section.add_argument("--tag", action="append", default=[], help="Tag (repeatable).")

    sub.add_parser("types", help="List the distinct property types.")
    return parser


def _run(args: argparse.Namespace, settings: Settings) -> tuple[list[Any], str]:
    """Execute the selected command; return ``(records, query_for_scores)``."""
    records = load_listings(settings.require_listings_path(args.listings))

    if args.command == "search":
        filters = _parse_filter_pairs(args.filter)
        return (
            search_properties(
                records, args.keyword, filters, buffer_ratio=settings.price_buffer_ratio
            ),
            args.keyword,
        )
    if args.command == "filter":
        filters = _parse_filter_pairs(args.filter)
        return filter_properties(records, filters), ""
    if args.command == "suggest":
        limit = args.limit if args.limit is not None else settings.suggestion_limit
        return get_property_suggestions(records, args.query, limit), args.query
    if args.command == "section":
        criteria = {
            "min_price": args.min_price,
            "max_price": args.max_price,
            "location": args.location,
            "type": args.type,
            "tags": args.tag,
        }
        return filter_by_criteria(records, criteria), ""
    return list(unique_property_types(records)), ""


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry-point registered in ``pyproject.toml``."""
    args = _build_parser().parse_args(argv)

    try:
        configure_logging(level=args.log_level, fmt=args.log_format)
    except ValueError as exc:
        print(f"estatesearch: configuration error: {exc}", file=sys.stderr)  # noqa: T201
        return 1

    logger = logging.getLogger(__name__)

    with request_scope() as request_id:
        logger.debug("estatesearch %s (request %s)", args.command, request_id)
        try:
            settings = Settings()
            results, query = _run(args, settings)
        except ValidationError as exc:
            logger.critical("Configuration error: %s", exc)
            return 1
        except EstateSearchError as exc:
            logger.critical("%s", exc)
            return 1

    if args.command == "types":
        print("\n".join(results) if results else "No property types.")  # noqa: T201
    elif args.json:
        print(json.dumps(results, ensure_ascii=False, indent=2, default=str))  # noqa: T201
    else:
        scores = [score(record, query) for record in results] if query else None
        print(format_results(results, scores))  # noqa: T201
    return 0


if __name__ == "__main__":
    sys.exit(main())
