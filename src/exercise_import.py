"""
ExerciseDB Import
=================
Imports the ExerciseDB catalog into PostgreSQL, one muscle group at a time.

Usage:
    python exercise_import.py                    # full import
    python exercise_import.py --resume           # continue after last completed muscle
    python exercise_import.py --retry-delay 30   # base backoff after a 429
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

import requests
from dotenv import load_dotenv

from category_walker import CategoryWalker
from config import DEFAULT_LIMIT, DEFAULT_RETRY_DELAY, EXERCISEDB_BASE_URL, REDIS_URL
from cursor_store import RedisCursorStore
from db_utils import get_conn_str
from exercise_repository import ExerciseRepository
from page_fetcher import PageFetcher
from pipeline.import_pipeline import ExerciseImportPipeline
from record_upserter import RecordUpserter
from stats_reporter import StatsReporter

load_dotenv()

log = logging.getLogger("exercise_import")


def build_pipeline(
    base_url: str = EXERCISEDB_BASE_URL,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    redis_url: str = REDIS_URL,
    session: Optional[requests.Session] = None,
) -> ExerciseImportPipeline:
    """Wire the production collaborators together."""
    conn_str = get_conn_str()
    if not conn_str:
        raise RuntimeError("POSTGRES_CONNECTION_STRING (or DATABASE_URL) is required")

    repository = ExerciseRepository(conn_str)
    walker = CategoryWalker(
        fetcher=PageFetcher(base_url=base_url, session=session, base_delay=retry_delay),
        upserter=RecordUpserter(repository),
        cursor_store=RedisCursorStore.from_url(redis_url),
    )
    return ExerciseImportPipeline(
        walker=walker,
        stats_reporter=StatsReporter(repository),
        conn_str=conn_str,
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import exercises from ExerciseDB API")
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT,
                        help=("Stop after the muscle group that brings the records fetched to this many; "
                              "an exercise listed under several muscles counts once per muscle. "
                              f"0 = no limit (default: {DEFAULT_LIMIT})"))
    parser.add_argument("--resume", action="store_true",
                        help="Resume from last successful muscle group")
    parser.add_argument("--retry-delay", type=float, default=DEFAULT_RETRY_DELAY,
                        help=f"Seconds to wait after rate limit before retrying (default: {DEFAULT_RETRY_DELAY})")
    parser.add_argument("--base-url", default=EXERCISEDB_BASE_URL,
                        help="ExerciseDB API base URL")
    args = parser.parse_args(argv)
    if args.limit < 0:
        parser.error("--limit must be >= 0")
    if args.retry_delay < 0:
        parser.error("--retry-delay must be >= 0")
    return args


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    args = parse_args(argv)

    with requests.Session() as session:
        try:
            pipeline = build_pipeline(
                base_url=args.base_url, retry_delay=args.retry_delay, session=session
            )
        except Exception as e:
            log.error("Could not start import: %s", e)
            return 1

        log.info("Starting exercise import...")
        success = pipeline.run(resume=args.resume, limit=args.limit or None)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
