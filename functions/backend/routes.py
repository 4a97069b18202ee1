"""
HTTP routes for the feedback triage API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile

from backend.config import Settings
from backend.db import AnalysisRecord, DbClient, FeedbackRecord
from backend.dependencies import get_app_settings, get_db_client, get_queue_client
from backend.queue import AnalysisQueue
from backend.schemas import (
    AnalysisItem,
    AnalyticsResponse,
    AnalyzeFeedbackRequest,
    AnalyzeFeedbackResponse,
    ChatMessageItem,
    ChatRequest,
    ChatResponse,
    Classification,
    ClusterFeedbackResponse,
    ClusterItem,
    ConversationCreateRequest,
    ConversationItem,
    CsvUploadResponse,
    DigestItem,
    FeedbackCreateRequest,
    FeedbackCreateResponse,
    FeedbackItem,
    FeedbackTableResponse,
    FeedbackTableRow,
    GenerateDigestResponse,
    HealthResponse,
    ListClustersResponse,
    ListConversationsResponse,
    ListDigestsResponse,
    ListMessagesResponse,
)
from backend.worker import drain_queue
from shared.types import SortKey
from triage import analysis as analysis_service
from triage import chat as chat_service
from triage import clustering
from triage import digest as digest_service
from triage import intake
from triage import reporting

logger = logging.getLogger(__name__)

router = APIRouter()

# Paths whose request-body validation failures are reported as 500 {"error"}.
JOB_PATHS = (
    "/analyze-feedback",
    "/cluster-feedback",
    "/generate-digest",
    "/chat-with-feedback",
)


def _feedback_item(record: FeedbackRecord) -> FeedbackItem:
    return FeedbackItem(**record.as_dict())


def _analysis_item(record: AnalysisRecord) -> AnalysisItem:
    return AnalysisItem(
        sentiment=record.sentiment,
        urgency=record.urgency,
        impact=record.impact,
        cluster_id=record.cluster_id,
        analyzed_at=record.analyzed_at,
    )


def _dispatch_analysis(
    feedback_ids: list[str],
    *,
    background_tasks: BackgroundTasks,
    db: DbClient,
    queue: AnalysisQueue,
    settings: Settings,
) -> None:
    queued = sum(1 for feedback_id in feedback_ids if queue.enqueue(feedback_id))
    if queued < len(feedback_ids):
        logger.info(
            "Skipped %d feedback ids already pending analysis",
            len(feedback_ids) - queued,
        )
    # Without Redis there is no external worker; drain in-process after responding.
    if not settings.redis_url:
        background_tasks.add_task(drain_queue, db=db, queue=queue, settings=settings)


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse()


# -- job endpoints ------------------------------------------------------


@router.post("/analyze-feedback", response_model=AnalyzeFeedbackResponse)
def analyze_feedback(
    payload: AnalyzeFeedbackRequest,
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    record = analysis_service.analyze_feedback(
        db, payload.feedback_id, payload.content, settings=settings
    )
    return AnalyzeFeedbackResponse(
        analysis=Classification(
            sentiment=record.sentiment,
            urgency=record.urgency,
            impact=record.impact,
        )
    )


@router.post(
    "/cluster-feedback",
    response_model=ClusterFeedbackResponse,
    response_model_exclude_none=True,
)
def cluster_feedback(
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    result = clustering.run_clustering(db, threshold=settings.similarity_threshold)
    if result.total_feedback == 0:
        return ClusterFeedbackResponse(message=clustering.NO_EMBEDDINGS_MESSAGE)
    return ClusterFeedbackResponse(
        success=True,
        clusters_created=result.clusters_created,
        total_feedback=result.total_feedback,
    )


@router.post("/generate-digest", response_model=GenerateDigestResponse)
def generate_digest(
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    digest = digest_service.generate_digest(db, settings=settings)
    return GenerateDigestResponse(digest=digest.content)


@router.post("/chat-with-feedback", response_model=ChatResponse)
def chat_with_feedback(
    payload: ChatRequest,
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    reply, conversation = chat_service.chat_with_feedback(
        db,
        payload.message,
        payload.conversation_id,
        settings=settings,
        user_id=payload.user_id,
    )
    return ChatResponse(response=reply, conversation_id=conversation.id)


# -- intake -------------------------------------------------------------


@router.post("/feedback", response_model=FeedbackCreateResponse, status_code=201)
def submit_feedback(
    payload: FeedbackCreateRequest,
    background_tasks: BackgroundTasks,
    db: DbClient = Depends(get_db_client),
    queue: AnalysisQueue = Depends(get_queue_client),
    settings: Settings = Depends(get_app_settings),
):
    record = intake.submit_feedback(
        db, payload.content, user_email=payload.user_email, user_id=payload.user_id
    )
    _dispatch_analysis(
        [record.id],
        background_tasks=background_tasks,
        db=db,
        queue=queue,
        settings=settings,
    )
    return FeedbackCreateResponse(feedback=_feedback_item(record))


@router.post("/feedback/upload-csv", response_model=CsvUploadResponse, status_code=202)
async def upload_feedback_csv(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    user_id: str | None = Form(None),
    db: DbClient = Depends(get_db_client),
    queue: AnalysisQueue = Depends(get_queue_client),
    settings: Settings = Depends(get_app_settings),
):
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Please upload a CSV file")

    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")

    records = intake.import_feedback_csv(db, text, user_id=user_id)
    feedback_ids = [record.id for record in records]
    _dispatch_analysis(
        feedback_ids,
        background_tasks=background_tasks,
        db=db,
        queue=queue,
        settings=settings,
    )
    return CsvUploadResponse(inserted=len(records), feedback_ids=feedback_ids)


# -- dashboard reads ----------------------------------------------------


@router.get("/feedback", response_model=FeedbackTableResponse)
def list_feedback(
    sort_by: SortKey = Query(SortKey.URGENCY),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    rows = reporting.feedback_table(
        db, sort_by=sort_by, limit=settings.feedback_table_limit
    )
    items = [
        FeedbackTableRow(
            feedback=_feedback_item(row.feedback),
            analysis=_analysis_item(row.analysis) if row.analysis else None,
            status="analyzed" if row.analysis else "pending",
        )
        for row in rows
    ]
    return FeedbackTableResponse(sort_by=sort_by.value, items=items)


@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(db: DbClient = Depends(get_db_client)):
    return AnalyticsResponse(**reporting.build_analytics(db))


@router.get("/clusters", response_model=ListClustersResponse)
def list_clusters(db: DbClient = Depends(get_db_client)):
    clusters = db.list_clusters()
    return ListClustersResponse(
        clusters=[ClusterItem(**cluster.as_dict()) for cluster in clusters]
    )


@router.get("/digests", response_model=ListDigestsResponse)
def list_digests(
    limit: int = Query(5, ge=1, le=50),
    db: DbClient = Depends(get_db_client),
):
    digests = db.list_digests(limit=limit)
    return ListDigestsResponse(
        digests=[DigestItem(**digest.as_dict()) for digest in digests]
    )


# -- conversations ------------------------------------------------------


@router.get("/conversations", response_model=ListConversationsResponse)
def list_conversations(db: DbClient = Depends(get_db_client)):
    conversations = db.list_conversations()
    return ListConversationsResponse(
        conversations=[ConversationItem(**c.as_dict()) for c in conversations]
    )


@router.post("/conversations", response_model=ConversationItem, status_code=201)
def create_conversation(
    payload: ConversationCreateRequest, db: DbClient = Depends(get_db_client)
):
    conversation = chat_service.start_conversation(
        db, payload.title, user_id=payload.user_id
    )
    return ConversationItem(**conversation.as_dict())


@router.get(
    "/conversations/{conversation_id}/messages", response_model=ListMessagesResponse
)
def list_messages(conversation_id: str, db: DbClient = Depends(get_db_client)):
    if db.get_conversation(conversation_id) is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    messages = db.list_chat_messages(conversation_id)
    return ListMessagesResponse(
        conversation_id=conversation_id,
        messages=[
            ChatMessageItem(
                id=m.id, role=m.role, content=m.content, created_at=m.created_at
            )
            for m in messages
        ],
    )
