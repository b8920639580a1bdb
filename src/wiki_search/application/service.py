"""
EncyclopediaService - Facade over search, ranking and article loading.

This is the single entry point used by the presentation layer. Every public
coroutine returns a value; backend, embedding and article failures are
logged and degraded, never raised.

Article routing (``load_article``):
    wikipedia           -> en.wikipedia, then simple.wikipedia (or the dump)
    other MediaWiki key -> the source's own REST page, then en.wikipedia
    wikidata / unknown  -> the wikipedia chain
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wiki_search.application.search import DEFAULT_TOP_K
from wiki_search.domain.entities import Document
from wiki_search.shared.exceptions import ConfigurationError, EmbeddingError, ErrorContext

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    import httpx

    from wiki_search.application.article import ArticleCache
    from wiki_search.application.search import (
        AggregationStats,
        SemanticSearchCoordinator,
        SourceAggregator,
    )
    from wiki_search.domain.entities import SearchResult, SourceDescriptor

logger = logging.getLogger(__name__)

DEFAULT_ARTICLE_SOURCE = "wikipedia"


class EncyclopediaService:
    """
    Usage:
        service = container.service()
        results = await service.search("quantum", semantic=True, k=20)
        doc = await service.load_article(results[0].title, results[0].source_key)
    """

    def __init__(
        self,
        aggregator: SourceAggregator,
        article_caches: Mapping[str, ArticleCache],
        coordinator: SemanticSearchCoordinator | None = None,
        default_source: str = DEFAULT_ARTICLE_SOURCE,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if default_source not in article_caches:
            raise ValueError(f"No article cache for default source {default_source!r}")
        self._aggregator = aggregator
        self._caches = dict(article_caches)
        self._coordinator = coordinator
        self._default_source = default_source
        self._http_client = http_client

    @property
    def aggregator(self) -> SourceAggregator:
        return self._aggregator

    @property
    def semantic_available(self) -> bool:
        return self._coordinator is not None

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    async def search(self, query: str, semantic: bool = False, k: int = DEFAULT_TOP_K) -> list[SearchResult]:
        results, _ = await self.search_with_stats(query, semantic=semantic, k=k)
        return results

    async def search_with_stats(
        self,
        query: str,
        semantic: bool = False,
        k: int = DEFAULT_TOP_K,
    ) -> tuple[list[SearchResult], AggregationStats]:
        """
        Search every enabled source, optionally re-ranking by similarity.

        When ranking cannot be applied the unranked aggregate is returned and
        ``stats.ranking_error`` describes why.
        """
        results, stats = await self._aggregator.search_all_sources_with_stats(query)
        if not semantic or not results:
            return results, stats

        if self._coordinator is None:
            logger.warning("Semantic ranking requested but no embedding provider is configured")
            stats.ranking_error = ConfigurationError(
                "Semantic ranking is disabled: no embedding provider is configured",
                context=ErrorContext(suggestion='Set WIKI_SEARCH_EMBEDDINGS to "hashing" or "sentence-transformers"'),
            ).to_dict()
            return results, stats

        try:
            ranked = await self._coordinator.search(query, results, k)
        except EmbeddingError as e:
            logger.warning(f"Semantic ranking failed, returning unranked results: {e}")
            stats.ranking_error = e.to_dict()
            return results, stats
        return ranked, stats

    # -------------------------------------------------------------------------
    # Articles
    # -------------------------------------------------------------------------

    def cache_for(self, source_key: str | None) -> ArticleCache:
        return self._caches.get(source_key or self._default_source) or self._caches[self._default_source]

    async def load_article(self, title: str, source_key: str | None = None) -> Document:
        """Load *title*; a placeholder Document is returned when it cannot be loaded."""
        if not title or not title.strip():
            return Document.placeholder(title, source_key or self._default_source, "empty title")
        return await self.cache_for(source_key).load_article_content(title.strip())

    def clear_caches(self) -> int:
        """Clear every article cache; returns the number of entries removed."""
        unique = {id(cache): cache for cache in self._caches.values()}
        return sum(cache.clear_cache() for cache in unique.values())

    def cache_stats(self) -> dict[str, Any]:
        return {
            key: {"size": cache.get_cache_size(), **cache.stats.to_dict()}
            for key, cache in self._caches.items()
        }

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    def list_sources(self) -> list[SourceDescriptor]:
        return self._aggregator.get_all_sources()

    def set_enabled_sources(self, keys: Iterable[str]) -> list[str]:
        return self._aggregator.set_enabled_sources(keys)

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
