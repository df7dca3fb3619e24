#!/usr/bin/env python
"""Export log lines from Elasticsearch into a sorted flat file.

Usage:
    # Everything from web01 on the 1st and 2nd of January
    stashquery -s 2024-01-01T00:00:00.000Z -e 2024-01-02T23:59:59.999Z \\
        -q 'host:web01' -o web01.log

    # Count matches only (no output file)
    stashquery -s 2024-01-01T00:00:00.000Z -e 2024-01-01T01:00:00.000Z -q 'status:500'
"""

import argparse
import logging
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

load_dotenv()

from stashquery import settings
from stashquery.core.clients import get_elasticsearch_client
from stashquery.core.exceptions import StashQueryError
from stashquery.core.models import ExportConfig, ExportRequest
from stashquery.core.utils import set_logging_level
from stashquery.export.controller import ExportController

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export log lines from Elasticsearch into a sorted file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("-q", "--query", default=None, help="Lucene query string")
    parser.add_argument("-t", "--tags", default=None, help="Tag filter, e.g. 'tags:nginx'")
    parser.add_argument(
        "-s", "--start", default=None, help="Start timestamp (YYYY-MM-DDTHH:MM:SS.mmmZ)"
    )
    parser.add_argument(
        "-e", "--end", default=None, help="End timestamp (YYYY-MM-DDTHH:MM:SS.mmmZ)"
    )
    parser.add_argument(
        "-i",
        "--index-prefixes",
        nargs="+",
        default=None,
        help=f"Index name prefixes (default: {','.join(settings.INDEX_PREFIXES)})",
    )
    parser.add_argument(
        "-o", "--output", default=None, help="Output file (default: count results only)"
    )
    parser.add_argument(
        "--host", default=settings.ES_HOST, help=f"Elasticsearch host (default: {settings.ES_HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.ES_PORT,
        help=f"Elasticsearch port (default: {settings.ES_PORT})",
    )
    parser.add_argument(
        "--scroll-size",
        type=int,
        default=settings.SCROLL_SIZE,
        help=f"Documents per scroll page (default: {settings.SCROLL_SIZE})",
    )
    parser.add_argument(
        "--scroll-time",
        default=settings.SCROLL_TIME,
        help=f"Scroll keep-alive (default: {settings.SCROLL_TIME})",
    )
    parser.add_argument(
        "--flush-size",
        type=int,
        default=settings.FLUSH_SIZE,
        help=f"Lines buffered before writing (default: {settings.FLUSH_SIZE})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-p", "--progress", action="store_true", help="Show a progress bar")

    return parser


def main(argv=None) -> int:
    """Main entry point for the export CLI."""
    args = build_parser().parse_args(argv)

    set_logging_level(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = ExportConfig(
            host=args.host,
            port=args.port,
            flush_size=args.flush_size,
            verbose=args.verbose,
            progress=args.progress,
        )
        request = ExportRequest(
            query=args.query,
            tags=args.tags,
            start_date=args.start,
            end_date=args.end,
            index_prefixes=args.index_prefixes or settings.INDEX_PREFIXES,
            scroll_size=args.scroll_size,
            scroll_time=args.scroll_time,
            output=args.output,
        )
    except ValidationError as e:
        logger.error(f"Invalid arguments: {e}")
        return 1

    try:
        es_client = get_elasticsearch_client(config)
        outcome = ExportController(es_client, config).run(request)

    except KeyboardInterrupt:
        logger.info("Export interrupted by user")
        return 130

    except StashQueryError as e:
        logger.error(f"Export failed: {e}", exc_info=config.verbose)
        return 1

    print(f"Found {outcome.total} results")
    if not outcome.finished:
        logger.error(f"Export incomplete: {outcome.count} of {outcome.total} documents retrieved")
        return 1
    if outcome.output:
        print(f"Wrote {outcome.count} lines to {outcome.output}")
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
