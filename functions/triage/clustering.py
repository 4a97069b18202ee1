"""Greedy single-link clustering of feedback by embedding similarity.

Each item is compared with the first member (the representative) of every
existing cluster, in the order the clusters were created, and joins the first
one whose similarity reaches the threshold. Otherwise it starts a new
cluster. The result depends only on the input order and the threshold, so a
rerun over the same ordering always produces the same partition.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

from backend.db import ClusterRecord, DbClient

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.75
CLUSTER_NAME_WORDS = 5
CLUSTER_DESCRIPTION_CHARS = 200
NO_EMBEDDINGS_MESSAGE = "No feedback with embeddings found"

T = TypeVar("T")


@dataclass
class ClusteringResult:
    clusters_created: int
    total_feedback: int
    clusters: list[ClusterRecord]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity; 0.0 for mismatched lengths or zero-length vectors."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = norm_a = norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def cluster_items(
    items: Sequence[T],
    embedding_of: Callable[[T], Sequence[float]],
    threshold: float = SIMILARITY_THRESHOLD,
) -> list[list[T]]:
    clusters: list[list[T]] = []
    for item in items:
        embedding = embedding_of(item)
        for cluster in clusters:
            if cosine_similarity(embedding, embedding_of(cluster[0])) >= threshold:
                cluster.append(item)
                break
        else:
            clusters.append([item])
    return clusters


def cluster_name(content: str) -> str:
    words = " ".join(content.split(" ")[:CLUSTER_NAME_WORDS])
    return f"Cluster: {words}..."


def cluster_description(content: str) -> str:
    return content[:CLUSTER_DESCRIPTION_CHARS]


def run_clustering(
    db: DbClient, threshold: float = SIMILARITY_THRESHOLD
) -> ClusteringResult:
    """Recomputes every cluster from scratch and stores the new partition."""
    logger.info("Fetching feedback with embeddings...")
    analyses = db.list_embedded_analyses()
    if not analyses:
        return ClusteringResult(clusters_created=0, total_feedback=0, clusters=[])

    logger.info("Processing %d feedback entries...", len(analyses))
    feedback = db.get_feedback_many(a.feedback_id for a in analyses)
    groups = cluster_items(analyses, lambda a: a.embedding, threshold)
    logger.info("Created %d clusters", len(groups))

    to_store: list[tuple[ClusterRecord, list[str]]] = []
    for group in groups:
        representative = feedback.get(group[0].feedback_id)
        content = representative.content if representative else ""
        cluster = ClusterRecord(
            name=cluster_name(content),
            description=cluster_description(content),
            feedback_count=len(group),
        )
        to_store.append((cluster, [a.id for a in group]))

    clusters = db.replace_clusters(to_store)
    logger.info("Clustering complete")
    return ClusteringResult(
        clusters_created=len(clusters),
        total_feedback=len(analyses),
        clusters=clusters,
    )
