"""Weekly digest of high-priority feedback and the largest clusters."""

from __future__ import annotations

import logging
import time

from backend.config import Settings
from backend.db import AnalysisRecord, ClusterRecord, DbClient, DigestRecord, FeedbackRecord
from models import gemini
from models import prompts
from triage.errors import TriageError

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
DIGEST_CHANNELS = ["email"]
NO_FEEDBACK_MESSAGE = "There is no feedback to generate a digest."
NO_CRITICAL_FEEDBACK = "No critical feedback this week"
NO_CLUSTERS = "No clusters available"


def format_feedback_context(
    analyses: list[AnalysisRecord], feedback: dict[str, FeedbackRecord]
) -> str:
    lines = []
    for idx, analysis in enumerate(analyses, start=1):
        item = feedback.get(analysis.feedback_id)
        content = item.content if item else "No content"
        lines.append(f"{idx}. [{analysis.urgency}/{analysis.impact}] {content}")
    return "\n".join(lines) or NO_CRITICAL_FEEDBACK


def format_cluster_context(clusters: list[ClusterRecord]) -> str:
    lines = [
        f"{idx}. {cluster.name} ({cluster.feedback_count} items)"
        for idx, cluster in enumerate(clusters, start=1)
    ]
    return "\n".join(lines) or NO_CLUSTERS


def generate_digest(
    db: DbClient, *, settings: Settings, now: float | None = None
) -> DigestRecord:
    """Builds the digest with Gemini and records it in the digest history.

    A failure to store the digest is logged but does not fail the request.
    """
    if db.count_feedback() == 0:
        raise TriageError(NO_FEEDBACK_MESSAGE)

    logger.info("Generating weekly digest...")
    now = time.time() if now is None else now
    since = now - settings.digest_window_days * SECONDS_PER_DAY

    priority = db.list_priority_analyses(since, limit=settings.digest_feedback_limit)
    clusters = db.list_clusters(limit=settings.digest_cluster_limit)
    feedback = db.get_feedback_many(a.feedback_id for a in priority)

    prompt = prompts.DIGEST_PROMPT.format(
        feedback_context=format_feedback_context(priority, feedback),
        cluster_context=format_cluster_context(clusters),
    )
    content = gemini.call_predict(
        prompt,
        system_instruction=prompts.DIGEST_SYSTEM_PROMPT,
        temperature=settings.digest_temperature,
        model=settings.completion_model,
        api_key=settings.gemini_api_key,
    )

    digest = DigestRecord(
        content=content,
        summary={
            "total_feedback": len(priority),
            "top_clusters": len(clusters),
        },
        channels=list(DIGEST_CHANNELS),
        sent_at=now,
    )
    try:
        db.save_digest(digest)
    except Exception:
        logger.exception("Error saving digest")

    logger.info("Digest generated successfully")
    return digest
