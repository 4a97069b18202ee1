"""
Backfill analysis for feedback rows that were never analyzed.

By default the ids are pushed onto the analysis queue for the worker. With
--inline the analysis runs in this process instead.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.dependencies import get_db_client, get_queue_client
from triage.analysis import analyze_pending

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Backfill feedback analysis")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of feedback rows to process",
    )
    parser.add_argument(
        "--inline",
        action="store_true",
        help="Analyze in this process instead of enqueueing",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report how many rows are pending",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    db = get_db_client()
    pending = db.list_unanalyzed_feedback(limit=args.limit)
    logger.info("Found %d unanalyzed feedback rows", len(pending))
    if args.dry_run or not pending:
        return 0

    if args.inline:
        succeeded, failed = analyze_pending(
            db, settings=get_settings(), limit=args.limit
        )
        logger.info("Analyzed %d rows, %d failed", succeeded, failed)
        return 1 if failed else 0

    queue = get_queue_client()
    queued = sum(1 for feedback in pending if queue.enqueue(feedback.id))
    logger.info(
        "Enqueued %d rows for analysis (%d already pending)",
        queued,
        len(pending) - queued,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
