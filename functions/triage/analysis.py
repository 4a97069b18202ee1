"""Classifies feedback with Gemini and stores the analysis and embedding."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from backend.config import Settings
from backend.db import AnalysisRecord, DbClient
from models import gemini
from models import prompts
from shared.types import Impact, Sentiment, Urgency
from triage.errors import TriageError

logger = logging.getLogger(__name__)


class FeedbackClassification(BaseModel):
    sentiment: Sentiment
    urgency: Urgency
    impact: Impact

    def as_dict(self) -> dict:
        return {
            "sentiment": self.sentiment.value,
            "urgency": self.urgency.value,
            "impact": self.impact.value,
        }


def classify_feedback(content: str, settings: Settings) -> FeedbackClassification:
    return gemini.call_predict_with_schema(
        prompts.CLASSIFICATION_PROMPT.format(content=content),
        FeedbackClassification,
        system_instruction=prompts.CLASSIFICATION_SYSTEM_PROMPT,
        temperature=settings.classification_temperature,
        model=settings.completion_model,
        api_key=settings.gemini_api_key,
    )


def embed_feedback(content: str, settings: Settings) -> Optional[list[float]]:
    """Returns the embedding, or None if the embedding call fails."""
    try:
        return gemini.call_embed(
            content, model=settings.embedding_model, api_key=settings.gemini_api_key
        )
    except (gemini.GeminiApiError, gemini.GeminiInvalidResponseException) as e:
        logger.warning("Embedding failed, storing analysis without it: %s", e)
        return None


def analyze_feedback(
    db: DbClient,
    feedback_id: str | None,
    content: str | None,
    *,
    settings: Settings,
) -> AnalysisRecord:
    if not feedback_id or not content:
        raise TriageError("Missing feedbackId or content")
    if db.get_feedback(feedback_id) is None:
        raise TriageError(f"Feedback {feedback_id} not found")

    logger.info("Analyzing feedback %s...", feedback_id)
    classification = classify_feedback(content, settings)
    embedding = embed_feedback(content, settings)

    analysis = db.save_analysis(
        AnalysisRecord(
            feedback_id=feedback_id,
            sentiment=classification.sentiment.value,
            urgency=classification.urgency.value,
            impact=classification.impact.value,
            embedding=embedding,
        )
    )
    logger.info("Successfully analyzed feedback %s", feedback_id)
    return analysis


def analyze_pending(
    db: DbClient, *, settings: Settings, limit: int | None = None
) -> tuple[int, int]:
    """Analyzes feedback rows with no analysis yet. Returns (succeeded, failed)."""
    succeeded = failed = 0
    for feedback in db.list_unanalyzed_feedback(limit=limit):
        try:
            analyze_feedback(db, feedback.id, feedback.content, settings=settings)
            succeeded += 1
        except Exception:
            logger.exception("Failed to analyze feedback %s", feedback.id)
            failed += 1
    return succeeded, failed
