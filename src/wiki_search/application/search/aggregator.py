"""
SourceAggregator - Multi-Source Search Fan-out and Deduplication

One query is sent to every enabled backend concurrently; the outcomes are
joined, concatenated in source enumeration order and deduplicated by
case-insensitive title (first seen wins, so enumeration order is priority).

Architecture Decision:
    The enabled/disabled state lives in an immutable ``SourceConfig`` owned
    by one aggregator. ``set_enabled_sources`` swaps the whole snapshot, so a
    search that already started keeps the configuration it began with.

    A failing backend contributes no results; it never fails the search.
    Cancelling the caller cancels every in-flight backend call.

Example:
    >>> aggregator = SourceAggregator(backends, SourceConfig(DEFAULT_SOURCES))
    >>> results = await aggregator.search_all_sources("quantum")
    >>> results, stats = await aggregator.search_all_sources_with_stats("quantum")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wiki_search.shared.async_utils import gather_with_errors

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from wiki_search.domain.entities import SearchResult, SourceDescriptor
    from wiki_search.domain.protocols import SearchBackend

logger = logging.getLogger(__name__)

DEFAULT_RESULTS_PER_SOURCE = 15


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class SourceConfig:
    """Ordered, immutable snapshot of source descriptors."""

    sources: tuple[SourceDescriptor, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "sources", tuple(self.sources))

    @property
    def keys(self) -> list[str]:
        return [s.key for s in self.sources]

    def enabled(self) -> list[SourceDescriptor]:
        return [s for s in self.sources if s.enabled]

    def get(self, key: str) -> SourceDescriptor | None:
        return next((s for s in self.sources if s.key == key), None)

    def with_enabled(self, keys: Iterable[str]) -> SourceConfig:
        """New snapshot where exactly the sources in *keys* are enabled."""
        wanted = set(keys)
        return SourceConfig(tuple(s.with_enabled(s.key in wanted) for s in self.sources))


@dataclass
class AggregationStats:
    """Statistics from one fan-out search.

    ``ranking_error`` is set when semantic ranking was requested but could
    not be applied; the results are then in source order.
    """

    total_input: int = 0
    unique_results: int = 0
    duplicates_removed: int = 0
    by_source: dict[str, int] = field(default_factory=dict)
    failed_sources: list[str] = field(default_factory=list)
    ranking_error: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_input": self.total_input,
            "unique_results": self.unique_results,
            "duplicates_removed": self.duplicates_removed,
            "by_source": self.by_source,
            "failed_sources": self.failed_sources,
            "ranking_error": self.ranking_error,
        }


def deduplicate_by_title(results: Iterable[SearchResult]) -> list[SearchResult]:
    """Keep the first result for each case-insensitively equal title."""
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if result.title_key in seen:
            continue
        seen.add(result.title_key)
        unique.append(result)
    return unique


# =============================================================================
# Aggregator
# =============================================================================


class SourceAggregator:
    """Fans a query out to every enabled search backend."""

    def __init__(
        self,
        backends: Mapping[str, SearchBackend],
        config: SourceConfig,
        results_per_source: int = DEFAULT_RESULTS_PER_SOURCE,
    ) -> None:
        self._backends = dict(backends)
        self._config = config
        self._results_per_source = results_per_source

    @property
    def config(self) -> SourceConfig:
        return self._config

    def get_all_sources(self) -> list[SourceDescriptor]:
        """All descriptors in enumeration order, enabled or not."""
        return list(self._config.sources)

    def get_enabled_sources(self) -> list[SourceDescriptor]:
        return self._config.enabled()

    def set_enabled_sources(self, keys: Iterable[str]) -> list[str]:
        """
        Enable exactly the sources in *keys*; every other source is disabled.

        Only affects searches started after the call. Unknown keys are logged
        and ignored.

        Returns:
            Keys of the sources now enabled, in enumeration order
        """
        keys = list(keys)
        known = set(self._config.keys)
        unknown = [k for k in keys if k not in known]
        if unknown:
            logger.warning(f"Ignoring unknown source keys: {unknown}")
        self._config = self._config.with_enabled(keys)
        enabled = [s.key for s in self._config.enabled()]
        logger.info(f"Enabled sources: {enabled}")
        return enabled

    async def search_all_sources(self, query: str) -> list[SearchResult]:
        """Search every enabled source and return deduplicated results."""
        results, _ = await self.search_all_sources_with_stats(query)
        return results

    async def search_all_sources_with_stats(self, query: str) -> tuple[list[SearchResult], AggregationStats]:
        """
        Search every enabled source.

        Returns:
            Tuple of (deduplicated results, aggregation statistics)
        """
        stats = AggregationStats()
        if not query or not query.strip():
            return [], stats
        query = query.strip()

        sources = [s for s in self._config.enabled() if self._has_backend(s.key)]
        if not sources:
            return [], stats

        outcomes = await gather_with_errors(
            *(self._backends[s.key].search(query, self._results_per_source) for s in sources),
            return_exceptions=True,
        )

        combined: list[SearchResult] = []
        for source, outcome in zip(sources, outcomes, strict=True):
            if isinstance(outcome, Exception):
                logger.warning(f"Search failed for {source.key}: {outcome}")
                stats.failed_sources.append(source.key)
                stats.by_source[source.key] = 0
                continue
            stats.by_source[source.key] = len(outcome)
            combined.extend(outcome)

        unique = deduplicate_by_title(combined)
        stats.total_input = len(combined)
        stats.unique_results = len(unique)
        stats.duplicates_removed = len(combined) - len(unique)
        logger.debug(
            f"Aggregated {stats.total_input} results from {len(sources)} sources, "
            f"{stats.duplicates_removed} duplicates removed"
        )
        return unique, stats

    def _has_backend(self, key: str) -> bool:
        if key in self._backends:
            return True
        logger.warning(f"No search backend registered for enabled source {key!r}")
        return False
