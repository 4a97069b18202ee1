"""
Queue of feedback ids waiting for analysis.

A feedback id is held at most once while it waits: enqueueing an id that is
already pending is a no-op, so overlapping CSV imports, backfills and manual
resubmissions do not analyze the same row twice. Once an id is taken by a
worker it may be queued again.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions


class AnalysisQueue(Protocol):
    def enqueue(self, feedback_id: str) -> bool:
        """Queue the id; returns False if it was already pending."""
        ...

    def dequeue(self, *, block: bool = True, timeout: int | None = None) -> Optional[str]:
        ...

    def __len__(self) -> int:
        ...


class InMemoryAnalysisQueue:
    """FIFO queue for tests and single-process runs.

    Safe to drain from several threads at once (FastAPI runs sync background
    tasks in its threadpool).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._order: deque[str] = deque()
        self._pending: set[str] = set()

    def enqueue(self, feedback_id: str) -> bool:
        with self._lock:
            if feedback_id in self._pending:
                return False
            self._pending.add(feedback_id)
            self._order.append(feedback_id)
            return True

    def dequeue(self, *, block: bool = True, timeout: int | None = None) -> Optional[str]:
        with self._lock:
            if not self._order:
                return None
            feedback_id = self._order.popleft()
            self._pending.discard(feedback_id)
            return feedback_id

    def __len__(self) -> int:
        with self._lock:
            return len(self._order)


class RedisAnalysisQueue:
    """Redis list of ids plus a set of the ids currently pending.

    The set is written before the list, so an id is never in the list without
    being marked pending.
    """

    def __init__(self, url: str, queue_key: str = "triage:analysis"):
        self.url = url
        self.queue_key = queue_key
        self.pending_key = f"{queue_key}:pending"
        self.client = redis.Redis.from_url(url)

    def enqueue(self, feedback_id: str) -> bool:
        if not self.client.sadd(self.pending_key, feedback_id):
            return False
        self.client.rpush(self.queue_key, feedback_id)
        return True

    def dequeue(self, *, block: bool = True, timeout: int | None = None) -> Optional[str]:
        try:
            if block:
                popped = self.client.blpop(self.queue_key, timeout=timeout or 0)
                raw = popped[1] if popped else None
            else:
                raw = self.client.lpop(self.queue_key)
            if raw is None:
                return None
            feedback_id = raw.decode("utf-8")
            self.client.srem(self.pending_key, feedback_id)
            return feedback_id
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; reconnect and report empty.
            self.client = redis.Redis.from_url(self.url)
            return None

    def __len__(self) -> int:
        return self.client.llen(self.queue_key)
