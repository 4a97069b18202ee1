"""
Daemon that periodically re-clusters feedback and generates the weekly digest.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.db import DbClient
from backend.dependencies import get_db_client
from triage import clustering
from triage import digest as digest_service

logger = logging.getLogger(__name__)

WEEK_SECONDS = 7 * 24 * 60 * 60


def run_once(db: DbClient, *, skip_clustering: bool = False) -> None:
    settings = get_settings()
    if not skip_clustering:
        result = clustering.run_clustering(db, threshold=settings.similarity_threshold)
        logger.info(
            "Clustering complete: %d clusters from %d feedback entries",
            result.clusters_created,
            result.total_feedback,
        )
    digest = digest_service.generate_digest(db, settings=settings)
    logger.info("Digest %s generated (%d chars)", digest.id, len(digest.content))


def main() -> int:
    parser = argparse.ArgumentParser(description="Weekly feedback digest daemon")
    parser.add_argument(
        "--interval-seconds",
        type=int,
        default=WEEK_SECONDS,
        help="Seconds between digest runs",
    )
    parser.add_argument(
        "--jitter-seconds",
        type=int,
        default=300,
        help="Max random jitter added to sleep",
    )
    parser.add_argument(
        "--skip-clustering",
        action="store_true",
        help="Generate the digest from the existing clusters",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single digest and exit",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    db = get_db_client()
    while True:
        try:
            run_once(db, skip_clustering=args.skip_clustering)
        except Exception as exc:
            logger.exception("Digest run failed: %s", exc)
            if args.once:
                return 1

        if args.once:
            return 0

        sleep_for = args.interval_seconds + random.uniform(0, args.jitter_seconds)
        logger.info("Sleeping for %.1fs", sleep_for)
        time.sleep(sleep_for)


if __name__ == "__main__":
    raise SystemExit(main())
