"""
Article Cache

Memoizes extracted articles per exact title and hides source failures
behind a primary -> secondary -> placeholder fallback chain.

Features:
- LRU storage via cachetools (unbounded unless ``max_size`` is given)
- Per-title asyncio locks: concurrent misses on one title share one load
- Failed loads produce a placeholder Document instead of an exception
- Only successful loads are cached unless ``cache_failures`` is set
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from cachetools import LRUCache

from wiki_search.domain.entities import Document

if TYPE_CHECKING:
    from wiki_search.application.extraction import ContentExtractor
    from wiki_search.domain.protocols import ArticleSource

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    failures: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "failures": self.failures,
            "hit_rate": round(self.hit_rate, 3),
        }


class ArticleCache:
    """
    Cache-aside article loader.

    Example:
        cache = ArticleCache(
            primary=RestHtmlArticleSource("wikipedia", EN_WIKIPEDIA_URL),
            secondary=RestHtmlArticleSource("wikipedia", SIMPLE_WIKIPEDIA_URL),
            extractor=ContentExtractor(),
        )
        doc = await cache.load_article_content("Albert Einstein")
    """

    def __init__(
        self,
        primary: ArticleSource,
        extractor: ContentExtractor,
        secondary: ArticleSource | None = None,
        *,
        max_size: float = math.inf,
        cache_failures: bool = False,
    ) -> None:
        """
        Initialize cache.

        Args:
            primary: Source tried first on a miss
            extractor: Converts fetched content into Documents
            secondary: Source tried when the primary fails
            max_size: Maximum number of cached documents (LRU eviction)
            cache_failures: Also cache placeholder documents
        """
        self._primary = primary
        self._secondary = secondary
        self._extractor = extractor
        self._cache: LRUCache[str, Document] = LRUCache(maxsize=max_size)
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._cache_failures = cache_failures
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def source_key(self) -> str:
        return self._primary.source_key

    async def load_article_content(self, title: str) -> Document:
        """
        Return the Document for *title*, loading it on a miss.

        Never raises (cancellation aside): when every source fails the result
        is a placeholder Document naming the title and the failure.
        """
        if (doc := self._cache.get(title)) is not None:
            self._stats.hits += 1
            logger.debug(f"Cache hit: {title}")
            return doc

        lock = self._locks.setdefault(title, asyncio.Lock())
        self._lock_users[title] = self._lock_users.get(title, 0) + 1
        try:
            async with lock:
                if (doc := self._cache.get(title)) is not None:
                    self._stats.hits += 1
                    return doc

                self._stats.misses += 1
                doc = await self._load(title)
                if not doc.is_placeholder or self._cache_failures:
                    self._cache[title] = doc
                return doc
        finally:
            # Holders and waiters both count; the lock goes with the last of them.
            self._lock_users[title] -= 1
            if not self._lock_users[title]:
                del self._lock_users[title]
                del self._locks[title]

    async def _load(self, title: str) -> Document:
        errors: list[str] = []
        for source in (self._primary, self._secondary):
            if source is None:
                continue
            try:
                raw = await source.fetch(title)
            except Exception as e:
                logger.info(f"{source.source_key} could not provide {title!r}: {e}")
                errors.append(str(e))
                continue
            return self._extractor.extract(
                raw,
                title=title,
                source_key=source.source_key,
                url=source.page_url(title),
            )

        self._stats.failures += 1
        logger.warning(f"All sources failed for {title!r}")
        return Document.placeholder(title, self.source_key, "; ".join(errors) or "no source available")

    def clear_cache(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        count = len(self._cache)
        self._cache.clear()
        logger.info(f"Article cache cleared ({count} entries)")
        return count

    def get_cache_size(self) -> int:
        return len(self._cache)

    def __contains__(self, title: str) -> bool:
        return title in self._cache
