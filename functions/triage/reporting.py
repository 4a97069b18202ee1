"""Dashboard read models: analytics counts and the sorted feedback table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from backend.db import AnalysisRecord, DbClient, FeedbackRecord
from shared.types import (
    IMPACT_RANK,
    SENTIMENT_RANK,
    URGENCY_RANK,
    Impact,
    Sentiment,
    SortKey,
    Urgency,
)


@dataclass
class FeedbackRow:
    feedback: FeedbackRecord
    analysis: Optional[AnalysisRecord] = None


def _zero_counts(enum_cls) -> dict[str, int]:
    return {member.value: 0 for member in enum_cls}


def build_analytics(db: DbClient) -> dict:
    sentiment = _zero_counts(Sentiment)
    urgency = _zero_counts(Urgency)
    impact = _zero_counts(Impact)
    for analysis in db.list_analyses():
        # Labels outside the known vocabulary are not counted.
        if analysis.sentiment in sentiment:
            sentiment[analysis.sentiment] += 1
        if analysis.urgency in urgency:
            urgency[analysis.urgency] += 1
        if analysis.impact in impact:
            impact[analysis.impact] += 1
    return {
        "total_feedback": db.count_feedback(),
        "high_priority": urgency[Urgency.HIGH.value],
        "positive": sentiment[Sentiment.POSITIVE.value],
        "sentiment": sentiment,
        "urgency": urgency,
        "impact": impact,
    }


_RANKS = {
    SortKey.SENTIMENT: ("sentiment", SENTIMENT_RANK),
    SortKey.URGENCY: ("urgency", URGENCY_RANK),
    SortKey.IMPACT: ("impact", IMPACT_RANK),
}


def sort_feedback_rows(rows: list[FeedbackRow], sort_by: SortKey) -> list[FeedbackRow]:
    """Stable sort; rows without an analysis (or an unknown label) go last."""
    if sort_by == SortKey.DATE:
        return sorted(rows, key=lambda r: r.feedback.created_at, reverse=True)

    attribute, ranks = _RANKS[sort_by]
    unranked = len(ranks)

    def rank(row: FeedbackRow) -> int:
        if row.analysis is None:
            return unranked
        return ranks.get(getattr(row.analysis, attribute), unranked)

    return sorted(rows, key=rank)


def feedback_table(
    db: DbClient, sort_by: SortKey = SortKey.URGENCY, limit: int = 50
) -> list[FeedbackRow]:
    feedback = db.list_feedback(limit=limit)
    analyses = db.get_analyses(f.id for f in feedback)
    rows = [FeedbackRow(feedback=f, analysis=analyses.get(f.id)) for f in feedback]
    return sort_feedback_rows(rows, sort_by)
