"""Feedback intake: manual submissions and CSV imports."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Optional

from backend.db import DbClient, FeedbackRecord
from shared.types import FeedbackSource
from triage.errors import TriageError

logger = logging.getLogger(__name__)

EMPTY_FEEDBACK_MESSAGE = "Please enter some feedback to submit."
EMPTY_CSV_MESSAGE = "No valid feedback found in CSV"


@dataclass
class ParsedFeedback:
    content: str
    user_email: Optional[str] = None


def _split_row(row: list[str], has_email_column: bool) -> ParsedFeedback:
    if not has_email_column or len(row) == 1:
        return ParsedFeedback(content=",".join(row).strip())
    # Unquoted content may itself contain commas; the email is always last.
    content = ",".join(row[:-1]).strip()
    email = row[-1].strip()
    return ParsedFeedback(content=content, user_email=email or None)


def parse_feedback_csv(text: str) -> list[ParsedFeedback]:
    """Parses `content[,email]` rows. The first non-blank line is a header."""
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    header: list[str] | None = None
    entries: list[ParsedFeedback] = []
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        if header is None:
            header = row
            continue
        entry = _split_row(row, has_email_column=len(header) > 1)
        if entry.content:
            entries.append(entry)
    if not entries:
        raise TriageError(EMPTY_CSV_MESSAGE)
    return entries


def submit_feedback(
    db: DbClient,
    content: str | None,
    *,
    user_email: str | None = None,
    user_id: str | None = None,
) -> FeedbackRecord:
    content = (content or "").strip()
    if not content:
        raise TriageError(EMPTY_FEEDBACK_MESSAGE)
    return db.save_feedback(
        FeedbackRecord(
            content=content,
            source=FeedbackSource.MANUAL.value,
            user_email=user_email or None,
            user_id=user_id,
        )
    )


def import_feedback_csv(
    db: DbClient, text: str, *, user_id: str | None = None
) -> list[FeedbackRecord]:
    entries = parse_feedback_csv(text)
    records = db.save_feedback_batch(
        [
            FeedbackRecord(
                content=entry.content,
                source=FeedbackSource.CSV.value,
                user_email=entry.user_email,
                user_id=user_id,
            )
            for entry in entries
        ]
    )
    logger.info("Imported %d feedback entries from CSV", len(records))
    return records
