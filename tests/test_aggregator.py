"""
Tests for SourceAggregator - fan-out search, deduplication and source toggling.
"""

import asyncio

import pytest

from wiki_search.application.search import (
    AggregationStats,
    SourceAggregator,
    SourceConfig,
    deduplicate_by_title,
)
from wiki_search.shared.exceptions import NetworkError


@pytest.fixture
def quantum_backends(make_backend, make_result):
    return {
        "wikipedia": make_backend(
            [
                make_result("Quantum mechanics", "wikipedia", 0),
                make_result("Quantum computing", "wikipedia", 1),
            ]
        ),
        "wikidata": make_backend(
            [
                make_result("quantum mechanics", "wikidata", 0),
                make_result("Quantum field", "wikidata", 1),
            ]
        ),
        "wiktionary": make_backend(error=NetworkError("connection refused")),
    }


@pytest.fixture
def aggregator(quantum_backends, three_sources):
    return SourceAggregator(quantum_backends, SourceConfig(three_sources))


# =============================================================================
# Fan-out and deduplication
# =============================================================================


class TestSearchAllSources:
    @pytest.mark.asyncio
    async def test_dedup_first_source_wins(self, aggregator):
        results = await aggregator.search_all_sources("quantum")

        assert [r.title for r in results] == ["Quantum mechanics", "Quantum computing", "Quantum field"]
        assert results[0].source_key == "wikipedia"

    @pytest.mark.asyncio
    async def test_stats(self, aggregator):
        _, stats = await aggregator.search_all_sources_with_stats("quantum")

        assert stats.total_input == 4
        assert stats.unique_results == 3
        assert stats.duplicates_removed == 1
        assert stats.by_source == {"wikipedia": 2, "wikidata": 2, "wiktionary": 0}
        assert stats.failed_sources == ["wiktionary"]

    @pytest.mark.asyncio
    async def test_all_backends_called_with_limit(self, aggregator, quantum_backends):
        await aggregator.search_all_sources("  quantum  ")

        for backend in quantum_backends.values():
            backend.search.assert_awaited_once_with("quantum", 15)

    @pytest.mark.asyncio
    async def test_custom_results_per_source(self, quantum_backends, three_sources):
        aggregator = SourceAggregator(quantum_backends, SourceConfig(three_sources), results_per_source=5)
        await aggregator.search_all_sources("quantum")
        quantum_backends["wikipedia"].search.assert_awaited_once_with("quantum", 5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", "\n\t"])
    async def test_blank_query_does_no_io(self, aggregator, quantum_backends, query):
        results, stats = await aggregator.search_all_sources_with_stats(query)

        assert results == []
        assert stats == AggregationStats()
        for backend in quantum_backends.values():
            backend.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_backends_failing(self, make_backend, three_sources):
        backends = {s.key: make_backend(error=NetworkError("down")) for s in three_sources}
        aggregator = SourceAggregator(backends, SourceConfig(three_sources))

        results, stats = await aggregator.search_all_sources_with_stats("quantum")

        assert results == []
        assert stats.failed_sources == ["wikipedia", "wikidata", "wiktionary"]

    @pytest.mark.asyncio
    async def test_source_without_backend_skipped(self, make_backend, make_result, three_sources):
        backends = {"wikipedia": make_backend([make_result("Quantum")])}
        aggregator = SourceAggregator(backends, SourceConfig(three_sources))

        results, stats = await aggregator.search_all_sources_with_stats("quantum")

        assert [r.title for r in results] == ["Quantum"]
        assert stats.by_source == {"wikipedia": 1}

    @pytest.mark.asyncio
    async def test_enumeration_order_not_completion_order(self, make_result, three_sources):
        async def slow_search(query, limit):
            await asyncio.sleep(0.02)
            return [make_result("Shared title", "wikipedia")]

        async def fast_search(query, limit):
            return [make_result("shared TITLE", "wikidata")]

        slow = type("Slow", (), {"search": staticmethod(slow_search)})()
        fast = type("Fast", (), {"search": staticmethod(fast_search)})()
        aggregator = SourceAggregator({"wikipedia": slow, "wikidata": fast}, SourceConfig(three_sources[:2]))

        results = await aggregator.search_all_sources("shared")

        assert len(results) == 1
        assert results[0].source_key == "wikipedia"


# =============================================================================
# Source configuration
# =============================================================================


class TestSourceToggling:
    def test_all_enabled_by_default(self, aggregator):
        assert [s.key for s in aggregator.get_enabled_sources()] == ["wikipedia", "wikidata", "wiktionary"]

    def test_set_enabled_sources(self, aggregator):
        enabled = aggregator.set_enabled_sources(["wiktionary", "wikipedia"])

        assert enabled == ["wikipedia", "wiktionary"]
        assert [s.key for s in aggregator.get_all_sources()] == ["wikipedia", "wikidata", "wiktionary"]
        assert aggregator.config.get("wikidata").enabled is False

    def test_unknown_keys_ignored(self, aggregator):
        enabled = aggregator.set_enabled_sources(["wikipedia", "encarta"])
        assert enabled == ["wikipedia"]

    @pytest.mark.asyncio
    async def test_disabled_sources_not_queried(self, aggregator, quantum_backends):
        aggregator.set_enabled_sources(["wikidata"])
        results = await aggregator.search_all_sources("quantum")

        assert [r.source_key for r in results] == ["wikidata", "wikidata"]
        quantum_backends["wikipedia"].search.assert_not_called()
        quantum_backends["wiktionary"].search.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_sources_enabled(self, aggregator):
        aggregator.set_enabled_sources([])
        assert await aggregator.search_all_sources("quantum") == []

    @pytest.mark.asyncio
    async def test_toggle_does_not_affect_inflight_search(self, aggregator, quantum_backends, make_result):
        gate = asyncio.Event()

        async def gated_search(query, limit):
            await gate.wait()
            return [make_result("Quantum mechanics", "wikipedia")]

        quantum_backends["wikipedia"].search.side_effect = gated_search
        task = asyncio.create_task(aggregator.search_all_sources("quantum"))
        await asyncio.sleep(0)

        aggregator.set_enabled_sources(["wikidata"])
        gate.set()
        results = await task

        assert results[0].source_key == "wikipedia"
        assert [s.key for s in aggregator.get_enabled_sources()] == ["wikidata"]


class TestSourceConfig:
    def test_with_enabled_returns_new_snapshot(self, three_sources):
        config = SourceConfig(three_sources)
        updated = config.with_enabled(["wikidata"])

        assert [s.key for s in config.enabled()] == ["wikipedia", "wikidata", "wiktionary"]
        assert [s.key for s in updated.enabled()] == ["wikidata"]

    def test_list_coerced_to_tuple(self, three_sources):
        assert isinstance(SourceConfig(list(three_sources)).sources, tuple)

    def test_get_unknown(self, three_sources):
        assert SourceConfig(three_sources).get("encarta") is None


def test_deduplicate_by_title(make_result):
    results = [make_result("Paris"), make_result("PARIS", "wikidata"), make_result("Lyon")]
    assert [r.title for r in deduplicate_by_title(results)] == ["Paris", "Lyon"]
