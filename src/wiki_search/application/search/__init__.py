"""
Search application services: multi-source fan-out and semantic re-ranking.
"""

from __future__ import annotations

from .aggregator import (
    DEFAULT_RESULTS_PER_SOURCE,
    AggregationStats,
    SourceAggregator,
    SourceConfig,
    deduplicate_by_title,
)
from .embedding_index import EmbeddingIndex, cosine_similarity
from .semantic_search import DEFAULT_TOP_K, SemanticSearchCoordinator, candidate_text

__all__ = [
    "SourceAggregator",
    "SourceConfig",
    "AggregationStats",
    "DEFAULT_RESULTS_PER_SOURCE",
    "deduplicate_by_title",
    "EmbeddingIndex",
    "cosine_similarity",
    "SemanticSearchCoordinator",
    "DEFAULT_TOP_K",
    "candidate_text",
]
