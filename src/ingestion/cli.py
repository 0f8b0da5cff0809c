"""Command-line interface for channel ingestion and topic grouping.

Usage:
    python -m src.ingestion.cli ingest <url> [<url> ...]
    python -m src.ingestion.cli groups

Channels and videos are stored in Postgres when SUPABASE_DB_URL or
DATABASE_URL is set, otherwise in memory for the lifetime of the command.
Reading groups needs the database, since an in-memory store starts empty.
All output is JSON on stdout.
"""

import argparse
import json
import logging
import os
import sys
from typing import Optional, Union

from src.channels.feed import FeedClient
from src.channels.http_client import build_http_client
from src.channels.resolver import ChannelResolver

from .config import Settings, load_settings, resolve_dsn
from .errors import IngestionError
from .orchestrator import get_groups, run_ingestion
from .postgres_repository import PostgresRepository
from .repository import InMemoryRepository
from .request_validation import validate_ingest_urls

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ingestion")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Fetch channel feeds and re-cluster")
    _ = ingest.add_argument("urls", nargs="+", help="Channel URLs")

    _ = subparsers.add_parser(
        "groups",
        help="Print topic groups stored in Postgres (needs SUPABASE_DB_URL or DATABASE_URL)",
    )

    return parser


def _build_repository() -> Union[PostgresRepository, InMemoryRepository]:
    dsn = resolve_dsn()
    return PostgresRepository(dsn=dsn) if dsn else InMemoryRepository()


def run_ingest_command(
    urls: list[str], settings: Optional[Settings] = None
) -> list[dict[str, object]]:
    settings = settings or load_settings()
    cleaned = validate_ingest_urls(urls)
    client = build_http_client(
        timeout_seconds=settings.request_timeout_seconds,
        max_retries=settings.max_retries,
        rate_limit_per_second=settings.rate_limit_per_second,
    )
    groups = run_ingestion(
        cleaned,
        resolver=ChannelResolver(client, settings),
        feed_client=FeedClient(client, settings),
        repository=_build_repository(),
        settings=settings,
    )
    return [group.to_dict() for group in groups]


def read_groups_command(settings: Optional[Settings] = None) -> list[dict[str, object]]:
    dsn = resolve_dsn()
    if not dsn:
        raise IngestionError("SUPABASE_DB_URL or DATABASE_URL is required to read stored groups")
    settings = settings or load_settings()
    groups = get_groups(PostgresRepository(dsn=dsn), settings)
    return [group.to_dict() for group in groups]


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "ingest":
            rows = run_ingest_command(args.urls)
        elif args.command == "groups":
            rows = read_groups_command()
        else:
            parser.print_help()
            return 1
    except IngestionError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 2

    print(json.dumps(rows, default=str, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
