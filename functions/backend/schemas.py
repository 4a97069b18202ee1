"""
Pydantic schemas for the feedback triage API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Accepts and emits the camelCase keys the dashboard uses."""

    model_config = ConfigDict(populate_by_name=True)


class AnalyzeFeedbackRequest(CamelModel):
    feedback_id: Optional[str] = Field(default=None, alias="feedbackId")
    content: Optional[str] = None


class Classification(BaseModel):
    sentiment: str
    urgency: str
    impact: str


class AnalyzeFeedbackResponse(BaseModel):
    success: bool = True
    analysis: Classification


class ClusterFeedbackResponse(CamelModel):
    success: Optional[bool] = None
    clusters_created: Optional[int] = Field(default=None, alias="clustersCreated")
    total_feedback: Optional[int] = Field(default=None, alias="totalFeedback")
    message: Optional[str] = None


class GenerateDigestResponse(BaseModel):
    success: bool = True
    digest: str


class ChatRequest(CamelModel):
    message: Optional[str] = None
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    user_id: Optional[str] = Field(default=None, alias="userId")


class ChatResponse(CamelModel):
    response: str
    conversation_id: str = Field(alias="conversationId")


class FeedbackCreateRequest(BaseModel):
    content: str = Field(..., max_length=10000)
    user_email: Optional[str] = Field(default=None, max_length=320)
    user_id: Optional[str] = None


class FeedbackItem(BaseModel):
    id: str
    content: str
    source: str
    user_email: Optional[str] = None
    user_id: Optional[str] = None
    created_at: float


class FeedbackCreateResponse(BaseModel):
    feedback: FeedbackItem
    analysis_status: Literal["queued"] = "queued"


class CsvUploadResponse(BaseModel):
    inserted: int
    feedback_ids: list[str]
    analysis_status: Literal["queued"] = "queued"


class AnalysisItem(BaseModel):
    sentiment: str
    urgency: str
    impact: str
    cluster_id: Optional[str] = None
    analyzed_at: float


class FeedbackTableRow(BaseModel):
    feedback: FeedbackItem
    analysis: Optional[AnalysisItem] = None
    status: Literal["analyzed", "pending"]


class FeedbackTableResponse(BaseModel):
    sort_by: str
    items: list[FeedbackTableRow]


class AnalyticsResponse(BaseModel):
    total_feedback: int
    high_priority: int
    positive: int
    sentiment: dict[str, int]
    urgency: dict[str, int]
    impact: dict[str, int]


class ClusterItem(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    feedback_count: int
    created_at: float


class ListClustersResponse(BaseModel):
    clusters: list[ClusterItem]


class DigestItem(BaseModel):
    id: str
    content: str
    summary: dict
    channels: list[str]
    sent_at: float


class ListDigestsResponse(BaseModel):
    digests: list[DigestItem]


class ConversationCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    user_id: Optional[str] = None


class ConversationItem(BaseModel):
    id: str
    title: str
    user_id: Optional[str] = None
    created_at: float
    updated_at: float


class ListConversationsResponse(BaseModel):
    conversations: list[ConversationItem]


class ChatMessageItem(BaseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    created_at: float


class ListMessagesResponse(BaseModel):
    conversation_id: str
    messages: list[ChatMessageItem]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
