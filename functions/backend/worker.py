"""
Worker loop that analyzes queued feedback.

Each queue item is a feedback id. Failures are logged and not retried; the
row simply stays unanalyzed until it is resubmitted or backfilled.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from backend.config import Settings, get_settings
from backend.db import DbClient
from backend.dependencies import get_db_client, get_queue_client
from backend.queue import AnalysisQueue
from triage.analysis import analyze_feedback

logger = logging.getLogger(__name__)


def process_next(
    *,
    db: Optional[DbClient] = None,
    queue: Optional[AnalysisQueue] = None,
    settings: Optional[Settings] = None,
    block: bool = True,
    timeout: Optional[int] = None,
) -> bool:
    """
    Fetch and analyze one feedback id from the queue. Returns True if an item was taken.
    """
    if db is None:
        db = get_db_client()
    if queue is None:
        queue = get_queue_client()
    if settings is None:
        settings = get_settings()

    feedback_id = queue.dequeue(block=block, timeout=timeout)
    if not feedback_id:
        return False

    feedback = db.get_feedback(feedback_id)
    if not feedback:
        logger.warning(
            "Received feedback_id %s from queue but no DB record found", feedback_id
        )
        return True

    try:
        analyze_feedback(db, feedback.id, feedback.content, settings=settings)
    except Exception:
        logger.exception("[%s] Analysis failed", feedback_id)
    return True


def drain_queue(
    *,
    db: Optional[DbClient] = None,
    queue: Optional[AnalysisQueue] = None,
    settings: Optional[Settings] = None,
) -> int:
    """Process queued items until the queue is empty. Returns the count taken."""
    processed = 0
    while process_next(db=db, queue=queue, settings=settings, block=False):
        processed += 1
    return processed


def run_loop(poll_interval_seconds: float = 2.0) -> None:
    """
    Simple polling loop that blocks on the queue. Intended to be run under systemd/supervisor.
    """
    db = get_db_client()
    queue = get_queue_client()
    while True:
        processed = process_next(
            db=db, queue=queue, block=True, timeout=int(poll_interval_seconds)
        )
        if not processed:
            time.sleep(poll_interval_seconds)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_loop()
