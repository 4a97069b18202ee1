"""Question answering over all stored feedback."""

from __future__ import annotations

import logging
import time

from backend.config import Settings
from backend.db import ChatMessageRecord, ConversationRecord, DbClient
from models import gemini
from models import prompts
from shared.types import ChatRole
from triage.errors import ConversationNotFound, TriageError

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 50
NOT_AVAILABLE = "N/A"


def conversation_title(message: str) -> str:
    if len(message) > TITLE_MAX_CHARS:
        return message[:TITLE_MAX_CHARS] + "..."
    return message


def start_conversation(
    db: DbClient, title: str, user_id: str | None = None
) -> ConversationRecord:
    return db.save_conversation(
        ConversationRecord(title=conversation_title(title), user_id=user_id)
    )


def build_feedback_context(db: DbClient) -> str:
    feedback = db.list_feedback()
    analyses = db.get_analyses(f.id for f in feedback)
    lines = []
    for item in feedback:
        analysis = analyses.get(item.id)
        sentiment = analysis.sentiment if analysis else NOT_AVAILABLE
        urgency = analysis.urgency if analysis else NOT_AVAILABLE
        impact = analysis.impact if analysis else NOT_AVAILABLE
        lines.append(
            f'Feedback: "{item.content}" | Source: {item.source} | '
            f"Sentiment: {sentiment} | Urgency: {urgency} | Impact: {impact}"
        )
    return "\n".join(lines)


def chat_with_feedback(
    db: DbClient,
    message: str | None,
    conversation_id: str | None = None,
    *,
    settings: Settings,
    user_id: str | None = None,
) -> tuple[str, ConversationRecord]:
    """Answers a message in the context of all feedback.

    Both turns are stored only after Gemini replies, so a failed call leaves
    the conversation history unchanged.
    """
    message = (message or "").strip()
    if not message:
        raise TriageError("Missing message")

    if conversation_id:
        conversation = db.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFound(conversation_id)
    else:
        conversation = start_conversation(db, message, user_id=user_id)

    history = db.list_chat_messages(conversation.id)
    messages = [{"role": m.role, "content": m.content} for m in history]
    messages.append({"role": ChatRole.USER.value, "content": message})

    system_prompt = prompts.CHAT_SYSTEM_PROMPT.format(
        feedback_context=build_feedback_context(db)
    )
    reply = gemini.call_chat(
        messages,
        system_instruction=system_prompt,
        model=settings.completion_model,
        api_key=settings.gemini_api_key,
    )

    now = time.time()
    db.save_chat_message(
        ChatMessageRecord(
            conversation_id=conversation.id,
            role=ChatRole.USER.value,
            content=message,
            created_at=now,
        )
    )
    db.save_chat_message(
        ChatMessageRecord(
            conversation_id=conversation.id,
            role=ChatRole.ASSISTANT.value,
            content=reply,
            created_at=now,
        )
    )
    conversation.updated_at = now
    logger.info(
        "Chat reply stored for conversation %s (%d prior turns)",
        conversation.id,
        len(history),
    )
    return reply, conversation
