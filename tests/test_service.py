"""
Tests for EncyclopediaService - the facade used by the MCP tools.
"""

from unittest.mock import AsyncMock

import pytest

from wiki_search.application.article import ArticleCache
from wiki_search.application.extraction import ContentExtractor
from wiki_search.application.search import SemanticSearchCoordinator, SourceAggregator, SourceConfig
from wiki_search.application.service import EncyclopediaService
from wiki_search.shared.exceptions import EmbeddingError, NotFoundError

from conftest import KeywordEmbeddings


class QueryFailingEmbeddings(KeywordEmbeddings):
    async def embed(self, text):
        if text == "quantum physics":
            raise EmbeddingError("model unavailable")
        return await super().embed(text)


class UnavailableEmbeddings(KeywordEmbeddings):
    async def embed(self, text):
        self.calls.append(text)
        raise EmbeddingError("model unavailable")


@pytest.fixture
def backends(make_backend, make_result):
    return {
        "wikipedia": make_backend([make_result("Cat", "wikipedia", 0), make_result("Quantum physics", "wikipedia", 1)]),
        "wikidata": make_backend([make_result("Physics", "wikidata", 0)]),
        "wiktionary": make_backend([]),
    }


@pytest.fixture
def caches(make_article_source):
    extractor = ContentExtractor()
    wikipedia = ArticleCache(
        make_article_source("wikipedia", content="<p>Wikipedia body</p>"),
        extractor,
        make_article_source("wikipedia", error=NotFoundError("Article")),
    )
    wiktionary = ArticleCache(make_article_source("wiktionary", content="<p>Definition</p>"), extractor)
    return {"wikipedia": wikipedia, "wikidata": wikipedia, "wiktionary": wiktionary}


@pytest.fixture
def make_service(backends, caches, three_sources):
    def _create(embeddings=None, **kwargs):
        aggregator = SourceAggregator(backends, SourceConfig(three_sources))
        coordinator = SemanticSearchCoordinator(embeddings) if embeddings is not None else None
        return EncyclopediaService(aggregator, caches, coordinator, **kwargs)

    return _create


# =============================================================================
# Search
# =============================================================================


class TestSearch:
    @pytest.mark.asyncio
    async def test_plain_search_keeps_source_order(self, make_service):
        results = await make_service(KeywordEmbeddings()).search("quantum physics")
        assert [r.title for r in results] == ["Cat", "Quantum physics", "Physics"]
        assert all(r.score is None for r in results)

    @pytest.mark.asyncio
    async def test_semantic_search_reranks(self, make_service):
        results = await make_service(KeywordEmbeddings()).search("quantum physics", semantic=True)
        assert [r.title for r in results] == ["Quantum physics", "Physics", "Cat"]
        assert results[0].score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_semantic_top_k(self, make_service):
        results = await make_service(KeywordEmbeddings()).search("quantum physics", semantic=True, k=1)
        assert [r.title for r in results] == ["Quantum physics"]

    @pytest.mark.asyncio
    async def test_query_embedding_failure_returns_unranked(self, make_service):
        service = make_service(QueryFailingEmbeddings())

        results, stats = await service.search_with_stats("quantum physics", semantic=True)

        assert [r.title for r in results] == ["Cat", "Quantum physics", "Physics"]
        assert stats.ranking_error["error"] == "model unavailable"
        assert stats.ranking_error["category"] == "embedding"

    @pytest.mark.asyncio
    async def test_provider_failing_on_every_input_returns_unranked(self, make_service):
        embeddings = UnavailableEmbeddings()

        results, stats = await make_service(embeddings).search_with_stats("quantum physics", semantic=True)

        assert [r.title for r in results] == ["Cat", "Quantum physics", "Physics"]
        assert all(r.score is None for r in results)
        assert "None of the 3 candidates" in stats.ranking_error["error"]
        assert "quantum physics" not in embeddings.calls

    @pytest.mark.asyncio
    async def test_semantic_without_provider(self, make_service):
        service = make_service()
        assert service.semantic_available is False
        results, stats = await service.search_with_stats("quantum physics", semantic=True)
        assert [r.title for r in results] == ["Cat", "Quantum physics", "Physics"]
        assert stats.ranking_error["category"] == "config"

    @pytest.mark.asyncio
    async def test_stats_returned(self, make_service):
        _, stats = await make_service().search_with_stats("quantum")
        assert stats.by_source == {"wikipedia": 2, "wikidata": 1, "wiktionary": 0}
        assert stats.ranking_error is None

    @pytest.mark.asyncio
    async def test_empty_results_skip_ranking(self, make_service, backends):
        embeddings = KeywordEmbeddings()
        for backend in backends.values():
            backend.search.return_value = []
        assert await make_service(embeddings).search("quantum", semantic=True) == []
        assert embeddings.calls == []


# =============================================================================
# Articles
# =============================================================================


class TestLoadArticle:
    @pytest.mark.asyncio
    async def test_default_source(self, make_service):
        doc = await make_service().load_article("Albert Einstein")
        assert doc.source_key == "wikipedia"
        assert doc.content.blocks[0].text == "Wikipedia body"

    @pytest.mark.asyncio
    async def test_routed_by_source_key(self, make_service):
        doc = await make_service().load_article("run", "wiktionary")
        assert doc.source_key == "wiktionary"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source_key", ["wikidata", "encarta", None, ""])
    async def test_other_keys_use_default_chain(self, make_service, source_key):
        doc = await make_service().load_article("Albert Einstein", source_key)
        assert doc.source_key == "wikipedia"

    @pytest.mark.asyncio
    async def test_title_stripped(self, make_service, caches):
        await make_service().load_article("  Albert Einstein  ")
        assert "Albert Einstein" in caches["wikipedia"]

    @pytest.mark.asyncio
    async def test_blank_title_placeholder(self, make_service, caches):
        doc = await make_service().load_article("   ")
        assert doc.is_placeholder
        assert caches["wikipedia"].get_cache_size() == 0

    @pytest.mark.asyncio
    async def test_clear_caches_counts_shared_cache_once(self, make_service):
        service = make_service()
        await service.load_article("A")
        await service.load_article("B", "wikidata")
        await service.load_article("C", "wiktionary")

        assert service.clear_caches() == 3
        assert service.clear_caches() == 0

    @pytest.mark.asyncio
    async def test_cache_stats(self, make_service):
        service = make_service()
        await service.load_article("A")
        await service.load_article("A")

        stats = service.cache_stats()
        assert stats["wikipedia"]["size"] == 1
        assert stats["wikipedia"]["hits"] == 1
        assert set(stats) == {"wikipedia", "wikidata", "wiktionary"}


# =============================================================================
# Sources and lifecycle
# =============================================================================


class TestSourcesAndLifecycle:
    def test_missing_default_cache(self, caches, three_sources):
        aggregator = SourceAggregator({}, SourceConfig(three_sources))
        with pytest.raises(ValueError):
            EncyclopediaService(aggregator, caches, default_source="wikiquote")

    def test_set_enabled_sources(self, make_service):
        service = make_service()
        assert service.set_enabled_sources(["wiktionary"]) == ["wiktionary"]
        assert [s.enabled for s in service.list_sources()] == [False, False, True]

    @pytest.mark.asyncio
    async def test_close_closes_http_client(self, make_service):
        client = AsyncMock()
        await make_service(http_client=client).close()
        client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_client(self, make_service):
        await make_service().close()
