"""
SemanticSearchCoordinator - Re-rank search hits by embedding similarity.

Flow for one call:
    1. Embed every candidate's text window (bounded concurrency)
    2. Store the vectors in a private EmbeddingIndex, in candidate order
    3. Embed the query once
    4. Return the top-k candidates with ``score`` filled in

Each call builds its own index, so concurrent searches never observe each
other's candidates.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wiki_search.domain.entities import EmbeddingRecord
from wiki_search.shared.async_utils import gather_with_errors
from wiki_search.shared.exceptions import EmbeddingError, ErrorContext, InvalidParameterError

from .embedding_index import EmbeddingIndex

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np

    from wiki_search.domain.entities import SearchResult
    from wiki_search.domain.protocols import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 50
CONTENT_WINDOW = 500


def candidate_text(result: SearchResult, window: int = CONTENT_WINDOW) -> str:
    """Text embedded for a candidate: its title plus the head of its description."""
    content = result.description or result.title
    return f"{result.title} {content[:window]}"


class SemanticSearchCoordinator:
    """
    Ranks candidates by cosine similarity to the query.

    Usage:
        coordinator = SemanticSearchCoordinator(embeddings)
        ranked = await coordinator.search("quantum", candidates, k=20)
    """

    def __init__(self, embeddings: EmbeddingProvider, max_concurrency: int = 8) -> None:
        self._embeddings = embeddings
        self._max_concurrency = max_concurrency

    async def search(
        self,
        query: str,
        candidates: Sequence[SearchResult],
        k: int = DEFAULT_TOP_K,
    ) -> list[SearchResult]:
        """
        Rank *candidates* against *query*.

        Raises:
            EmbeddingError: The query, or every one of the candidates, could
                not be embedded
        """
        if not candidates or not query.strip():
            return []

        index, kept = await self._build_index(candidates)
        if not len(index):
            raise EmbeddingError(
                f"None of the {len(candidates)} candidates could be embedded",
                text=query,
                context=ErrorContext(suggestion="Check that the embedding backend is installed and reachable"),
            )

        query_vector = await self._embed_query(query)
        by_record = {id(record): candidate for record, candidate in zip(index.records, kept, strict=True)}
        try:
            ranked = index.query(query_vector, k)
        except InvalidParameterError as e:
            raise EmbeddingError(f"Query embedding does not match the index: {e}", text=query) from e
        return [by_record[id(record)].with_score(score) for record, score in ranked]

    async def _build_index(
        self, candidates: Sequence[SearchResult]
    ) -> tuple[EmbeddingIndex, list[SearchResult]]:
        texts = [candidate_text(c) for c in candidates]
        vectors = await gather_with_errors(
            *(self._embeddings.embed(text) for text in texts),
            return_exceptions=True,
            max_concurrency=self._max_concurrency,
        )

        index = EmbeddingIndex()
        kept: list[SearchResult] = []
        for candidate, text, vector in zip(candidates, texts, vectors, strict=True):
            if isinstance(vector, Exception):
                logger.warning(f"Embedding failed for candidate {candidate.id}: {vector}")
                continue
            try:
                index.add(EmbeddingRecord(candidate.id, candidate.title, vector, text))
            except InvalidParameterError as e:
                logger.warning(f"Skipping candidate {candidate.id}: {e}")
                continue
            kept.append(candidate)
        return index, kept

    async def _embed_query(self, query: str) -> np.ndarray:
        try:
            return await self._embeddings.embed(query)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Failed to embed query: {e}", text=query) from e
