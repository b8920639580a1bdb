"""
Tests for ArticleCache - cache-aside loading with fallback and placeholders.
"""

import asyncio

import pytest

from wiki_search.application.article import ArticleCache
from wiki_search.application.extraction import ContentExtractor
from wiki_search.domain.entities import PlainTextContent
from wiki_search.shared.exceptions import NetworkError, NotFoundError


@pytest.fixture
def extractor():
    return ContentExtractor()


# =============================================================================
# Hits and misses
# =============================================================================


class TestCaching:
    @pytest.mark.asyncio
    async def test_miss_then_hit(self, make_article_source, extractor):
        primary = make_article_source(content="<p>Body</p>")
        cache = ArticleCache(primary, extractor)

        first = await cache.load_article_content("X")
        second = await cache.load_article_content("X")

        assert first is second
        primary.fetch.assert_awaited_once_with("X")
        assert cache.stats.hits == 1
        assert cache.stats.misses == 1
        assert "X" in cache

    @pytest.mark.asyncio
    async def test_titles_are_exact_keys(self, make_article_source, extractor):
        primary = make_article_source(content="<p>Body</p>")
        cache = ArticleCache(primary, extractor)

        await cache.load_article_content("Paris")
        await cache.load_article_content("paris")

        assert primary.fetch.await_count == 2
        assert cache.get_cache_size() == 2

    @pytest.mark.asyncio
    async def test_document_fields(self, make_article_source, extractor):
        cache = ArticleCache(make_article_source(content="<h2>Intro</h2><p>Body</p>"), extractor)

        doc = await cache.load_article_content("X")

        assert doc.title == "X"
        assert doc.source_key == "wikipedia"
        assert doc.url == "https://wikipedia.example/wiki/X"
        assert len(doc.content) == 2

    @pytest.mark.asyncio
    async def test_lru_eviction(self, make_article_source, extractor):
        cache = ArticleCache(make_article_source(content="<p>Body</p>"), extractor, max_size=2)
        for title in ("A", "B", "C"):
            await cache.load_article_content(title)

        assert cache.get_cache_size() == 2
        assert "A" not in cache
        assert "C" in cache

    @pytest.mark.asyncio
    async def test_clear_cache(self, make_article_source, extractor):
        cache = ArticleCache(make_article_source(content="<p>Body</p>"), extractor)
        await cache.load_article_content("A")
        await cache.load_article_content("B")

        assert cache.clear_cache() == 2
        assert cache.get_cache_size() == 0
        assert cache.clear_cache() == 0

    @pytest.mark.asyncio
    async def test_hit_rate(self, make_article_source, extractor):
        cache = ArticleCache(make_article_source(content="<p>Body</p>"), extractor)
        assert cache.stats.hit_rate == 0.0
        for _ in range(4):
            await cache.load_article_content("A")
        assert cache.stats.to_dict() == {"hits": 3, "misses": 1, "failures": 0, "hit_rate": 0.75}


# =============================================================================
# Fallback chain
# =============================================================================


class TestFallback:
    @pytest.mark.asyncio
    async def test_secondary_used_when_primary_fails(self, make_article_source, extractor):
        primary = make_article_source("wikipedia", error=NotFoundError("Article", "X"))
        secondary = make_article_source("simple", content="<p>Simple X</p>")
        cache = ArticleCache(primary, extractor, secondary)

        doc = await cache.load_article_content("X")

        assert doc.is_placeholder is False
        assert doc.source_key == "simple"
        assert doc.url == "https://simple.example/wiki/X"
        assert doc.content.blocks[0].text == "Simple X"
        primary.fetch.assert_awaited_once_with("X")
        secondary.fetch.assert_awaited_once_with("X")

    @pytest.mark.asyncio
    async def test_secondary_not_called_on_success(self, make_article_source, extractor):
        primary = make_article_source(content="<p>Body</p>")
        secondary = make_article_source("simple", content="<p>Other</p>")
        await ArticleCache(primary, extractor, secondary).load_article_content("X")
        secondary.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_placeholder_when_all_fail(self, make_article_source, extractor):
        primary = make_article_source(error=NetworkError("connection refused"))
        secondary = make_article_source("simple", error=NotFoundError("Article", "Atlantis"))
        cache = ArticleCache(primary, extractor, secondary)

        doc = await cache.load_article_content("Atlantis")

        assert doc.is_placeholder is True
        assert doc.title == "Atlantis"
        assert doc.source_key == "wikipedia"
        assert isinstance(doc.content, PlainTextContent)
        assert 'Unable to load article "Atlantis"' in doc.content.text
        assert "connection refused" in doc.error
        assert "Article not found: Atlantis" in doc.error
        assert cache.stats.failures == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_placeholder(self, make_article_source, extractor):
        cache = ArticleCache(make_article_source(error=RuntimeError("boom")), extractor)
        doc = await cache.load_article_content("X")
        assert doc.is_placeholder is True
        assert doc.error == "boom"

    @pytest.mark.asyncio
    async def test_placeholder_not_cached_by_default(self, make_article_source, extractor):
        primary = make_article_source(error=NetworkError("down"))
        cache = ArticleCache(primary, extractor)

        await cache.load_article_content("X")
        primary.fetch.side_effect = None
        primary.fetch.return_value = "<p>Back online</p>"
        doc = await cache.load_article_content("X")

        assert doc.is_placeholder is False
        assert primary.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_placeholder_cached_when_enabled(self, make_article_source, extractor):
        primary = make_article_source(error=NetworkError("down"))
        cache = ArticleCache(primary, extractor, cache_failures=True)

        first = await cache.load_article_content("X")
        second = await cache.load_article_content("X")

        assert first is second
        assert first.is_placeholder
        primary.fetch.assert_awaited_once()


# =============================================================================
# Concurrency
# =============================================================================


class TestConcurrentLoads:
    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_fetch(self, make_article_source, extractor):
        primary = make_article_source()

        async def slow_fetch(title):
            await asyncio.sleep(0.01)
            return f"<p>{title}</p>"

        primary.fetch.side_effect = slow_fetch
        cache = ArticleCache(primary, extractor)

        docs = await asyncio.gather(*(cache.load_article_content("X") for _ in range(5)))

        assert primary.fetch.await_count == 1
        assert all(doc is docs[0] for doc in docs)
        assert cache.stats.misses == 1
        assert cache.stats.hits == 4
        assert cache._locks == {}

    @pytest.mark.asyncio
    async def test_late_caller_joins_queued_load(self, make_article_source, extractor):
        primary = make_article_source()
        in_flight = 0
        peak = 0

        async def failing_fetch(title):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            for _ in range(5):
                await asyncio.sleep(0)
            in_flight -= 1
            raise NotFoundError("Article", title)

        primary.fetch.side_effect = failing_fetch
        cache = ArticleCache(primary, extractor)

        first = asyncio.create_task(cache.load_article_content("X"))
        queued = asyncio.create_task(cache.load_article_content("X"))
        await first
        late = asyncio.create_task(cache.load_article_content("X"))
        docs = await asyncio.gather(queued, late)

        assert all(doc.is_placeholder for doc in docs)
        assert peak == 1
        assert primary.fetch.await_count == 3
        assert cache._locks == {}
        assert cache._lock_users == {}

    @pytest.mark.asyncio
    async def test_different_titles_load_in_parallel(self, make_article_source, extractor):
        primary = make_article_source()
        in_flight = 0
        peak = 0

        async def slow_fetch(title):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return f"<p>{title}</p>"

        primary.fetch.side_effect = slow_fetch
        cache = ArticleCache(primary, extractor)

        await asyncio.gather(*(cache.load_article_content(t) for t in ("A", "B", "C")))

        assert peak == 3
        assert cache.get_cache_size() == 3
