"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy import JSON, Column, Float, ForeignKey, Integer, String, Text, create_engine, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared.types import FeedbackSource, Impact, Urgency


def _new_id() -> str:
    return uuid.uuid4().hex


class DbClient(Protocol):
    """Interface for database access."""

    def save_feedback(self, feedback: "FeedbackRecord") -> "FeedbackRecord":
        ...

    def save_feedback_batch(
        self, feedback: list["FeedbackRecord"]
    ) -> list["FeedbackRecord"]:
        ...

    def get_feedback(self, feedback_id: str) -> Optional["FeedbackRecord"]:
        ...

    def get_feedback_many(
        self, feedback_ids: Iterable[str]
    ) -> Dict[str, "FeedbackRecord"]:
        ...

    def list_feedback(self, limit: int | None = None) -> list["FeedbackRecord"]:
        ...

    def count_feedback(self) -> int:
        ...

    def list_unanalyzed_feedback(
        self, limit: int | None = None
    ) -> list["FeedbackRecord"]:
        ...

    def save_analysis(self, analysis: "AnalysisRecord") -> "AnalysisRecord":
        ...

    def get_analysis(self, feedback_id: str) -> Optional["AnalysisRecord"]:
        ...

    def get_analyses(
        self, feedback_ids: Iterable[str]
    ) -> Dict[str, "AnalysisRecord"]:
        ...

    def list_analyses(self) -> list["AnalysisRecord"]:
        ...

    def list_embedded_analyses(self) -> list["AnalysisRecord"]:
        ...

    def list_priority_analyses(
        self, since: float, limit: int = 20
    ) -> list["AnalysisRecord"]:
        ...

    def replace_clusters(
        self, groups: list[tuple["ClusterRecord", list[str]]]
    ) -> list["ClusterRecord"]:
        ...

    def list_clusters(self, limit: int | None = None) -> list["ClusterRecord"]:
        ...

    def save_conversation(
        self, conversation: "ConversationRecord"
    ) -> "ConversationRecord":
        ...

    def get_conversation(
        self, conversation_id: str
    ) -> Optional["ConversationRecord"]:
        ...

    def list_conversations(self) -> list["ConversationRecord"]:
        ...

    def save_chat_message(self, message: "ChatMessageRecord") -> "ChatMessageRecord":
        ...

    def list_chat_messages(self, conversation_id: str) -> list["ChatMessageRecord"]:
        ...

    def save_digest(self, digest: "DigestRecord") -> "DigestRecord":
        ...

    def list_digests(self, limit: int = 5) -> list["DigestRecord"]:
        ...


@dataclass
class FeedbackRecord:
    content: str
    source: str = FeedbackSource.MANUAL.value
    user_email: Optional[str] = None
    user_id: Optional[str] = None
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "source": self.source,
            "user_email": self.user_email,
            "user_id": self.user_id,
            "created_at": self.created_at,
        }


@dataclass
class AnalysisRecord:
    feedback_id: str
    sentiment: str
    urgency: str
    impact: str
    embedding: Optional[list[float]] = None
    cluster_id: Optional[str] = None
    id: str = field(default_factory=_new_id)
    analyzed_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        # Embeddings are large and only used server-side.
        return {
            "id": self.id,
            "feedback_id": self.feedback_id,
            "sentiment": self.sentiment,
            "urgency": self.urgency,
            "impact": self.impact,
            "cluster_id": self.cluster_id,
            "analyzed_at": self.analyzed_at,
        }


@dataclass
class ClusterRecord:
    name: str
    description: Optional[str] = None
    feedback_count: int = 0
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "feedback_count": self.feedback_count,
            "created_at": self.created_at,
        }


@dataclass
class ConversationRecord:
    title: str
    user_id: Optional[str] = None
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "user_id": self.user_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class ChatMessageRecord:
    conversation_id: str
    role: str
    content: str
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "conversation_id": self.conversation_id,
            "role": self.role,
            "content": self.content,
            "created_at": self.created_at,
        }


@dataclass
class DigestRecord:
    content: str
    summary: dict = field(default_factory=dict)
    channels: list[str] = field(default_factory=lambda: ["email"])
    id: str = field(default_factory=_new_id)
    sent_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "summary": self.summary,
            "channels": self.channels,
            "sent_at": self.sent_at,
        }


def _is_priority(analysis: AnalysisRecord) -> bool:
    return (
        analysis.urgency == Urgency.HIGH.value
        or analysis.impact == Impact.CRITICAL.value
    )


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.feedback: Dict[str, FeedbackRecord] = {}
        # Keyed by feedback_id; one analysis per feedback row.
        self.analyses: Dict[str, AnalysisRecord] = {}
        self.clusters: Dict[str, ClusterRecord] = {}
        self.conversations: Dict[str, ConversationRecord] = {}
        self.messages: list[ChatMessageRecord] = []
        self.digests: list[DigestRecord] = []

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.feedback.clear()
        self.analyses.clear()
        self.clusters.clear()
        self.conversations.clear()
        self.messages.clear()
        self.digests.clear()

    def save_feedback(self, feedback: FeedbackRecord) -> FeedbackRecord:
        self.feedback[feedback.id] = feedback
        return feedback

    def save_feedback_batch(
        self, feedback: list[FeedbackRecord]
    ) -> list[FeedbackRecord]:
        for record in feedback:
            self.feedback[record.id] = record
        return list(feedback)

    def get_feedback(self, feedback_id: str) -> Optional[FeedbackRecord]:
        return self.feedback.get(feedback_id)

    def get_feedback_many(
        self, feedback_ids: Iterable[str]
    ) -> Dict[str, FeedbackRecord]:
        return {
            feedback_id: self.feedback[feedback_id]
            for feedback_id in feedback_ids
            if feedback_id in self.feedback
        }

    def list_feedback(self, limit: int | None = None) -> list[FeedbackRecord]:
        items = sorted(
            self.feedback.values(), key=lambda f: f.created_at, reverse=True
        )
        return items[:limit] if limit is not None else items

    def count_feedback(self) -> int:
        return len(self.feedback)

    def list_unanalyzed_feedback(
        self, limit: int | None = None
    ) -> list[FeedbackRecord]:
        items = [
            f
            for f in sorted(self.feedback.values(), key=lambda f: f.created_at)
            if f.id not in self.analyses
        ]
        return items[:limit] if limit is not None else items

    def save_analysis(self, analysis: AnalysisRecord) -> AnalysisRecord:
        existing = self.analyses.get(analysis.feedback_id)
        if existing:
            analysis.id = existing.id
            analysis.cluster_id = existing.cluster_id
        self.analyses[analysis.feedback_id] = analysis
        return analysis

    def get_analysis(self, feedback_id: str) -> Optional[AnalysisRecord]:
        return self.analyses.get(feedback_id)

    def get_analyses(
        self, feedback_ids: Iterable[str]
    ) -> Dict[str, AnalysisRecord]:
        return {
            feedback_id: self.analyses[feedback_id]
            for feedback_id in feedback_ids
            if feedback_id in self.analyses
        }

    def list_analyses(self) -> list[AnalysisRecord]:
        return list(self.analyses.values())

    def list_embedded_analyses(self) -> list[AnalysisRecord]:
        return sorted(
            (a for a in self.analyses.values() if a.embedding is not None),
            key=lambda a: (a.analyzed_at, a.id),
        )

    def list_priority_analyses(
        self, since: float, limit: int = 20
    ) -> list[AnalysisRecord]:
        items = sorted(
            (
                a
                for a in self.analyses.values()
                if a.analyzed_at >= since and _is_priority(a)
            ),
            key=lambda a: a.analyzed_at,
            reverse=True,
        )
        return items[:limit]

    def replace_clusters(
        self, groups: list[tuple[ClusterRecord, list[str]]]
    ) -> list[ClusterRecord]:
        self.clusters.clear()
        by_id = {a.id: a for a in self.analyses.values()}
        for analysis in by_id.values():
            analysis.cluster_id = None
        for cluster, analysis_ids in groups:
            self.clusters[cluster.id] = cluster
            for analysis_id in analysis_ids:
                if analysis_id in by_id:
                    by_id[analysis_id].cluster_id = cluster.id
        return [cluster for cluster, _ in groups]

    def list_clusters(self, limit: int | None = None) -> list[ClusterRecord]:
        items = sorted(
            self.clusters.values(),
            key=lambda c: (-c.feedback_count, c.created_at),
        )
        return items[:limit] if limit is not None else items

    def save_conversation(
        self, conversation: ConversationRecord
    ) -> ConversationRecord:
        self.conversations[conversation.id] = conversation
        return conversation

    def get_conversation(
        self, conversation_id: str
    ) -> Optional[ConversationRecord]:
        return self.conversations.get(conversation_id)

    def list_conversations(self) -> list[ConversationRecord]:
        return sorted(
            self.conversations.values(), key=lambda c: c.updated_at, reverse=True
        )

    def save_chat_message(self, message: ChatMessageRecord) -> ChatMessageRecord:
        self.messages.append(message)
        conversation = self.conversations.get(message.conversation_id)
        if conversation:
            conversation.updated_at = message.created_at
        return message

    def list_chat_messages(self, conversation_id: str) -> list[ChatMessageRecord]:
        return [m for m in self.messages if m.conversation_id == conversation_id]

    def save_digest(self, digest: DigestRecord) -> DigestRecord:
        self.digests.append(digest)
        return digest

    def list_digests(self, limit: int = 5) -> list[DigestRecord]:
        return sorted(self.digests, key=lambda d: d.sent_at, reverse=True)[:limit]


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    # -- row conversion -------------------------------------------------

    def _to_feedback_record(self, row: "FeedbackRow") -> FeedbackRecord:
        return FeedbackRecord(
            id=row.id,
            content=row.content,
            source=row.source,
            user_email=row.user_email,
            user_id=row.user_id,
            created_at=row.created_at,
        )

    def _to_analysis_record(self, row: "AnalysisRow") -> AnalysisRecord:
        return AnalysisRecord(
            id=row.id,
            feedback_id=row.feedback_id,
            sentiment=row.sentiment,
            urgency=row.urgency,
            impact=row.impact,
            embedding=row.embedding,
            cluster_id=row.cluster_id,
            analyzed_at=row.analyzed_at,
        )

    def _to_cluster_record(self, row: "ClusterRow") -> ClusterRecord:
        return ClusterRecord(
            id=row.id,
            name=row.name,
            description=row.description,
            feedback_count=row.feedback_count,
            created_at=row.created_at,
        )

    def _to_conversation_record(
        self, row: "ConversationRow"
    ) -> ConversationRecord:
        return ConversationRecord(
            id=row.id,
            title=row.title,
            user_id=row.user_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _to_message_record(self, row: "ChatMessageRow") -> ChatMessageRecord:
        return ChatMessageRecord(
            id=row.id,
            conversation_id=row.conversation_id,
            role=row.role,
            content=row.content,
            created_at=row.created_at,
        )

    def _to_digest_record(self, row: "DigestRow") -> DigestRecord:
        return DigestRecord(
            id=row.id,
            content=row.content,
            summary=row.summary or {},
            channels=row.channels or [],
            sent_at=row.sent_at,
        )

    # -- feedback -------------------------------------------------------

    def save_feedback(self, feedback: FeedbackRecord) -> FeedbackRecord:
        return self.save_feedback_batch([feedback])[0]

    def save_feedback_batch(
        self, feedback: list[FeedbackRecord]
    ) -> list[FeedbackRecord]:
        with self.Session() as session:
            session.add_all(
                FeedbackRow(
                    id=record.id,
                    content=record.content,
                    source=record.source,
                    user_email=record.user_email,
                    user_id=record.user_id,
                    created_at=record.created_at,
                )
                for record in feedback
            )
            session.commit()
        return list(feedback)

    def get_feedback(self, feedback_id: str) -> Optional[FeedbackRecord]:
        with self.Session() as session:
            row = session.get(FeedbackRow, feedback_id)
            return self._to_feedback_record(row) if row else None

    def get_feedback_many(
        self, feedback_ids: Iterable[str]
    ) -> Dict[str, FeedbackRecord]:
        ids = list(feedback_ids)
        if not ids:
            return {}
        with self.Session() as session:
            rows = session.execute(
                select(FeedbackRow).where(FeedbackRow.id.in_(ids))
            ).scalars()
            return {row.id: self._to_feedback_record(row) for row in rows}

    def list_feedback(self, limit: int | None = None) -> list[FeedbackRecord]:
        with self.Session() as session:
            stmt = select(FeedbackRow).order_by(FeedbackRow.created_at.desc())
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = session.execute(stmt).scalars()
            return [self._to_feedback_record(row) for row in rows]

    def count_feedback(self) -> int:
        with self.Session() as session:
            return session.query(FeedbackRow).count()

    def list_unanalyzed_feedback(
        self, limit: int | None = None
    ) -> list[FeedbackRecord]:
        with self.Session() as session:
            stmt = (
                select(FeedbackRow)
                .outerjoin(AnalysisRow, AnalysisRow.feedback_id == FeedbackRow.id)
                .where(AnalysisRow.id == None)
                .order_by(FeedbackRow.created_at.asc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = session.execute(stmt).scalars()
            return [self._to_feedback_record(row) for row in rows]

    # -- analysis -------------------------------------------------------

    def _get_analysis_row(
        self, session: Session, feedback_id: str
    ) -> Optional["AnalysisRow"]:
        return session.execute(
            select(AnalysisRow).where(AnalysisRow.feedback_id == feedback_id)
        ).scalar_one_or_none()

    def save_analysis(self, analysis: AnalysisRecord) -> AnalysisRecord:
        try:
            return self._upsert_analysis(analysis)
        except IntegrityError:
            # Another writer inserted the row for this feedback_id between our
            # lookup and insert; the retry finds it and updates it.
            return self._upsert_analysis(analysis)

    def _upsert_analysis(self, analysis: AnalysisRecord) -> AnalysisRecord:
        with self.Session() as session:
            existing = self._get_analysis_row(session, analysis.feedback_id)
            if existing:
                existing.sentiment = analysis.sentiment
                existing.urgency = analysis.urgency
                existing.impact = analysis.impact
                existing.embedding = analysis.embedding
                existing.analyzed_at = analysis.analyzed_at
                row = existing
            else:
                row = AnalysisRow(
                    id=analysis.id,
                    feedback_id=analysis.feedback_id,
                    sentiment=analysis.sentiment,
                    urgency=analysis.urgency,
                    impact=analysis.impact,
                    embedding=analysis.embedding,
                    cluster_id=analysis.cluster_id,
                    analyzed_at=analysis.analyzed_at,
                )
                session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_analysis_record(row)

    def get_analysis(self, feedback_id: str) -> Optional[AnalysisRecord]:
        with self.Session() as session:
            row = self._get_analysis_row(session, feedback_id)
            return self._to_analysis_record(row) if row else None

    def get_analyses(
        self, feedback_ids: Iterable[str]
    ) -> Dict[str, AnalysisRecord]:
        ids = list(feedback_ids)
        if not ids:
            return {}
        with self.Session() as session:
            rows = session.execute(
                select(AnalysisRow).where(AnalysisRow.feedback_id.in_(ids))
            ).scalars()
            return {row.feedback_id: self._to_analysis_record(row) for row in rows}

    def list_analyses(self) -> list[AnalysisRecord]:
        with self.Session() as session:
            rows = session.execute(select(AnalysisRow)).scalars()
            return [self._to_analysis_record(row) for row in rows]

    def list_embedded_analyses(self) -> list[AnalysisRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(AnalysisRow)
                .where(AnalysisRow.embedding != None)
                .order_by(AnalysisRow.analyzed_at.asc(), AnalysisRow.id.asc())
            ).scalars()
            # JSON columns store SQL NULL as JSON 'null' on some backends.
            return [
                self._to_analysis_record(row)
                for row in rows
                if row.embedding is not None
            ]

    def list_priority_analyses(
        self, since: float, limit: int = 20
    ) -> list[AnalysisRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(AnalysisRow)
                .where(
                    AnalysisRow.analyzed_at >= since,
                    or_(
                        AnalysisRow.urgency == Urgency.HIGH.value,
                        AnalysisRow.impact == Impact.CRITICAL.value,
                    ),
                )
                .order_by(AnalysisRow.analyzed_at.desc())
                .limit(limit)
            ).scalars()
            return [self._to_analysis_record(row) for row in rows]

    # -- clusters -------------------------------------------------------

    def replace_clusters(
        self, groups: list[tuple[ClusterRecord, list[str]]]
    ) -> list[ClusterRecord]:
        with self.Session() as session:
            session.query(AnalysisRow).update(
                {AnalysisRow.cluster_id: None}, synchronize_session=False
            )
            session.query(ClusterRow).delete(synchronize_session=False)
            for cluster, analysis_ids in groups:
                session.add(
                    ClusterRow(
                        id=cluster.id,
                        name=cluster.name,
                        description=cluster.description,
                        feedback_count=cluster.feedback_count,
                        created_at=cluster.created_at,
                    )
                )
                session.flush()
                if analysis_ids:
                    session.query(AnalysisRow).filter(
                        AnalysisRow.id.in_(analysis_ids)
                    ).update(
                        {AnalysisRow.cluster_id: cluster.id},
                        synchronize_session=False,
                    )
            session.commit()
        return [cluster for cluster, _ in groups]

    def list_clusters(self, limit: int | None = None) -> list[ClusterRecord]:
        with self.Session() as session:
            stmt = select(ClusterRow).order_by(
                ClusterRow.feedback_count.desc(), ClusterRow.created_at.asc()
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = session.execute(stmt).scalars()
            return [self._to_cluster_record(row) for row in rows]

    # -- chat -----------------------------------------------------------

    def save_conversation(
        self, conversation: ConversationRecord
    ) -> ConversationRecord:
        with self.Session() as session:
            row = session.get(ConversationRow, conversation.id)
            if row:
                row.title = conversation.title
                row.updated_at = conversation.updated_at
            else:
                session.add(
                    ConversationRow(
                        id=conversation.id,
                        title=conversation.title,
                        user_id=conversation.user_id,
                        created_at=conversation.created_at,
                        updated_at=conversation.updated_at,
                    )
                )
            session.commit()
        return conversation

    def get_conversation(
        self, conversation_id: str
    ) -> Optional[ConversationRecord]:
        with self.Session() as session:
            row = session.get(ConversationRow, conversation_id)
            return self._to_conversation_record(row) if row else None

    def list_conversations(self) -> list[ConversationRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(ConversationRow).order_by(ConversationRow.updated_at.desc())
            ).scalars()
            return [self._to_conversation_record(row) for row in rows]

    def save_chat_message(self, message: ChatMessageRecord) -> ChatMessageRecord:
        with self.Session() as session:
            session.add(
                ChatMessageRow(
                    id=message.id,
                    conversation_id=message.conversation_id,
                    role=message.role,
                    content=message.content,
                    created_at=message.created_at,
                )
            )
            conversation = session.get(ConversationRow, message.conversation_id)
            if conversation:
                conversation.updated_at = message.created_at
            session.commit()
        return message

    def list_chat_messages(self, conversation_id: str) -> list[ChatMessageRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(ChatMessageRow)
                .where(ChatMessageRow.conversation_id == conversation_id)
                .order_by(ChatMessageRow.created_at.asc(), ChatMessageRow.seq.asc())
            ).scalars()
            return [self._to_message_record(row) for row in rows]

    # -- digests --------------------------------------------------------

    def save_digest(self, digest: DigestRecord) -> DigestRecord:
        with self.Session() as session:
            session.add(
                DigestRow(
                    id=digest.id,
                    content=digest.content,
                    summary=digest.summary,
                    channels=digest.channels,
                    sent_at=digest.sent_at,
                )
            )
            session.commit()
        return digest

    def list_digests(self, limit: int = 5) -> list[DigestRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(DigestRow).order_by(DigestRow.sent_at.desc()).limit(limit)
            ).scalars()
            return [self._to_digest_record(row) for row in rows]


Base = declarative_base()


class FeedbackRow(Base):
    __tablename__ = "feedback"

    id = Column(String, primary_key=True)
    content = Column(Text, nullable=False)
    source = Column(String, nullable=False, default=FeedbackSource.MANUAL.value)
    user_email = Column(String, nullable=True)
    user_id = Column(String, nullable=True, index=True)
    created_at = Column(Float, nullable=False, index=True)


class AnalysisRow(Base):
    __tablename__ = "feedback_analysis"

    id = Column(String, primary_key=True)
    feedback_id = Column(
        String, ForeignKey("feedback.id"), nullable=False, unique=True
    )
    sentiment = Column(String, nullable=False)
    urgency = Column(String, nullable=False, index=True)
    impact = Column(String, nullable=False, index=True)
    embedding = Column("embedding_vector", JSON(none_as_null=True), nullable=True)
    cluster_id = Column(String, nullable=True, index=True)
    analyzed_at = Column(Float, nullable=False, index=True)


class ClusterRow(Base):
    __tablename__ = "feedback_clusters"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    feedback_count = Column(Integer, nullable=False, default=0)
    created_at = Column(Float, nullable=False)


class ConversationRow(Base):
    __tablename__ = "chat_conversations"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    user_id = Column(String, nullable=True, index=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class ChatMessageRow(Base):
    __tablename__ = "chat_messages"

    # Insertion sequence breaks ties between turns saved in the same instant.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, nullable=False, unique=True)
    conversation_id = Column(
        String, ForeignKey("chat_conversations.id"), nullable=False, index=True
    )
    role = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(Float, nullable=False)


class DigestRow(Base):
    __tablename__ = "digest_history"

    id = Column(String, primary_key=True)
    content = Column(Text, nullable=False)
    summary = Column(JSON, nullable=False)
    channels = Column(JSON, nullable=False)
    sent_at = Column(Float, nullable=False)
