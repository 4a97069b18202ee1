"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from backend.config import Settings, get_settings
from backend.db import DbClient, InMemoryDbClient, PostgresDbClient
from backend.queue import AnalysisQueue, InMemoryAnalysisQueue, RedisAnalysisQueue

_db_client: DbClient | None = None
_queue_client: AnalysisQueue | None = None


def get_app_settings() -> Settings:
    return get_settings()


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so state persists across requests.
    """
    global _db_client
    if _db_client is not None:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(settings.database_url)
    return _db_client


def get_queue_client() -> AnalysisQueue:
    """
    Return a singleton queue client for dispatching analysis to workers.
    """
    global _queue_client
    if _queue_client is not None:
        return _queue_client

    settings = get_settings()
    if settings.redis_url:
        _queue_client = RedisAnalysisQueue(
            url=settings.redis_url,
            queue_key=settings.redis_queue_key,
        )
    else:
        _queue_client = InMemoryAnalysisQueue()
    return _queue_client
