"""Command line entry point for verse search.

Prints one JSON object per confirmed match on stdout; logs go to stderr.

Examples:
  verse-search --docset eng_web --collection bibles "in the beginning"
  verse-search --url http://localhost:4000/graphql --docset eng_web --collection bibles --whole-words --limit 5 love
"""

# ruff: noqa: T201  # CLI intentionally prints results

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
import logging
import sys

import orjson
from pydantic import ValidationError

from verse_search.adapters.document_store import HttpDocumentStore, RetrievalError
from verse_search.config import Settings
from verse_search.domain.search import VerseMatch
from verse_search.observability.logging import configure_logging
from verse_search.service_layer.search_service import VerseSearchService


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verse-search",
        description="Search a doc set of a remote docSet store for verses containing every word of a phrase",
    )
    parser.add_argument("phrase", help="Search phrase; every whitespace-separated word must match")
    parser.add_argument("--url", help="GraphQL endpoint (default: GRAPHQL_URL setting)")
    parser.add_argument("--docset", required=True, help="Doc set to search")
    parser.add_argument("--collection", required=True, help="Collection the doc set belongs to")
    parser.add_argument(
        "--whole-words",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Match whole words only (default: SEARCH_WHOLE_WORDS setting)",
    )
    parser.add_argument("--limit", type=int, default=0, help="Maximum number of matches (default: 0, unlimited)")
    return parser


def format_match(match: VerseMatch) -> str:
    """Serialize a match as one JSON line."""
    payload = {
        "reference": match.candidate.reference.model_dump(by_alias=True),
        "text": match.candidate.text,
        "matches": match.matches,
    }
    return orjson.dumps(payload).decode()


async def run_search(args: argparse.Namespace, settings: Settings) -> int:
    count = 0
    async with HttpDocumentStore.from_settings(settings) as store:
        service = VerseSearchService(store, settings)
        query = service.create_query(args.phrase, args.docset, args.collection, args.whole_words)
        matches = await query.get_results(args.limit)
        for match in matches:
            print(format_match(match))
            count += 1
    logger.info("Printed %d matches", count)
    return count


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    if args.limit < 0:
        parser.error("--limit must be >= 0")

    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    if args.url:
        settings = settings.model_copy(update={"graphql_url": args.url})

    configure_logging(settings.log_level, settings.log_json)

    try:
        asyncio.run(run_search(args, settings))
    except RetrievalError as exc:
        logger.error("Search failed: %s", exc)
        print(f"Search failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
