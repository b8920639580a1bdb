"""
Application DI Container (dependency-injector).

Centralizes service creation and lifecycle management.

Usage::

    from wiki_search.container import ApplicationContainer, DEFAULT_CONFIG

    container = ApplicationContainer()
    container.config.from_dict({**DEFAULT_CONFIG, "embedding_backend": "hashing"})

    service = container.service()

    # In tests, override any provider:
    container.search_backends.override(providers.Object({"wikipedia": fake_backend}))
"""

from __future__ import annotations

import logging
import math
from typing import Any

import httpx
from dependency_injector import containers, providers

from wiki_search.application.article import ArticleCache
from wiki_search.application.extraction import ContentExtractor
from wiki_search.application.search import (
    DEFAULT_RESULTS_PER_SOURCE,
    SemanticSearchCoordinator,
    SourceAggregator,
    SourceConfig,
)
from wiki_search.application.service import DEFAULT_ARTICLE_SOURCE, EncyclopediaService
from wiki_search.infrastructure.dumps import (
    DUMP_SOURCE_KEY,
    ChunkedDumpLoader,
    DumpArticleSource,
    DumpSearchBackend,
    create_dump_descriptor,
)
from wiki_search.infrastructure.sources import (
    DEFAULT_SOURCES,
    EN_WIKIPEDIA_URL,
    SIMPLE_WIKIPEDIA_URL,
    WIKIPEDIA,
    RestHtmlArticleSource,
    create_page_source,
    create_search_backends,
)
from wiki_search.infrastructure.sources.base_client import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "user_agent": DEFAULT_USER_AGENT,
    "timeout": 30.0,
    "results_per_source": DEFAULT_RESULTS_PER_SOURCE,
    "embedding_backend": "sentence-transformers",
    "embedding_model": "sentence-transformers/all-MiniLM-L6-v2",
    "dump_dir": None,
    "cache_failures": False,
    "cache_max_size": None,
}

NO_EMBEDDINGS = ("", "none", "off")


def _create_http_client(timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
    )


def _create_dump_loader(dump_dir: str | None) -> ChunkedDumpLoader | None:
    if not dump_dir:
        return None
    logger.info(f"Offline dump enabled: {dump_dir}")
    return ChunkedDumpLoader(dump_dir)


def _create_source_config(dump_loader: ChunkedDumpLoader | None) -> SourceConfig:
    if dump_loader is None:
        return SourceConfig(DEFAULT_SOURCES)
    return SourceConfig((*DEFAULT_SOURCES, create_dump_descriptor(dump_loader.directory)))


def _create_search_backends(
    client: httpx.AsyncClient,
    user_agent: str,
    dump_loader: ChunkedDumpLoader | None,
) -> dict[str, Any]:
    backends = create_search_backends(DEFAULT_SOURCES, client=client, headers={"User-Agent": user_agent})
    if dump_loader is not None:
        backends[DUMP_SOURCE_KEY] = DumpSearchBackend(dump_loader, create_dump_descriptor(dump_loader.directory))
    return backends


def _create_embeddings(backend: str | None, model_name: str) -> object | None:
    """Lazy factory for the embedding provider (None disables semantic ranking)."""
    if backend is None or backend.lower() in NO_EMBEDDINGS:
        return None
    from wiki_search.infrastructure.embeddings import create_embedding_provider

    return create_embedding_provider(backend, model_name)


def _create_coordinator(embeddings: Any) -> SemanticSearchCoordinator | None:
    if embeddings is None:
        return None
    return SemanticSearchCoordinator(embeddings)


def _create_article_caches(
    client: httpx.AsyncClient,
    extractor: ContentExtractor,
    user_agent: str,
    dump_loader: ChunkedDumpLoader | None,
    cache_failures: bool,
    cache_max_size: int | None,
) -> dict[str, ArticleCache]:
    """
    One ArticleCache per source key.

    Wikidata and any source without a REST page endpoint share the
    Wikipedia cache. With a dump loader, dump pages get their own cache and
    the dump replaces Simple English Wikipedia as the Wikipedia fallback.
    """
    headers = {"User-Agent": user_agent}
    options = {
        "cache_failures": bool(cache_failures),
        "max_size": cache_max_size or math.inf,
    }
    en_wikipedia = RestHtmlArticleSource(WIKIPEDIA, EN_WIKIPEDIA_URL, client=client, headers=headers)

    if dump_loader is not None:
        fallback: Any = DumpArticleSource(dump_loader)
    else:
        fallback = RestHtmlArticleSource(WIKIPEDIA, SIMPLE_WIKIPEDIA_URL, client=client, headers=headers)

    default_cache = ArticleCache(en_wikipedia, extractor, fallback, **options)
    caches = {DEFAULT_ARTICLE_SOURCE: default_cache}
    for descriptor in DEFAULT_SOURCES:
        page_source = create_page_source(descriptor, client=client, headers=headers)
        if page_source is None:
            caches.setdefault(descriptor.key, default_cache)
            continue
        caches[descriptor.key] = ArticleCache(page_source, extractor, en_wikipedia, **options)
    if dump_loader is not None:
        caches[DUMP_SOURCE_KEY] = ArticleCache(fallback, extractor, **options)
    return caches


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for Wiki Search MCP.

    Manages creation and lifecycle of all core services:
    - ``http_client``: shared httpx connection pool
    - ``dump_loader``: offline dump chunks (None without ``dump_dir``)
    - ``aggregator``: multi-source fan-out search
    - ``coordinator``: semantic re-ranking (None when embeddings are disabled)
    - ``article_caches``: per-source article loading
    - ``service``: facade used by the MCP tools
    """

    config = providers.Configuration()

    http_client = providers.Singleton(_create_http_client, timeout=config.timeout)

    dump_loader = providers.Singleton(_create_dump_loader, dump_dir=config.dump_dir)

    source_config = providers.Singleton(_create_source_config, dump_loader=dump_loader)

    search_backends = providers.Singleton(
        _create_search_backends,
        client=http_client,
        user_agent=config.user_agent,
        dump_loader=dump_loader,
    )

    aggregator = providers.Singleton(
        SourceAggregator,
        backends=search_backends,
        config=source_config,
        results_per_source=config.results_per_source,
    )

    embeddings = providers.Singleton(
        _create_embeddings,
        backend=config.embedding_backend,
        model_name=config.embedding_model,
    )

    coordinator = providers.Singleton(_create_coordinator, embeddings=embeddings)

    extractor = providers.Singleton(ContentExtractor)

    article_caches = providers.Singleton(
        _create_article_caches,
        client=http_client,
        extractor=extractor,
        user_agent=config.user_agent,
        dump_loader=dump_loader,
        cache_failures=config.cache_failures,
        cache_max_size=config.cache_max_size,
    )

    service = providers.Singleton(
        EncyclopediaService,
        aggregator=aggregator,
        article_caches=article_caches,
        coordinator=coordinator,
        http_client=http_client,
    )


def create_container(**overrides: Any) -> ApplicationContainer:
    """Container configured with ``DEFAULT_CONFIG`` plus *overrides*."""
    container = ApplicationContainer()
    container.config.from_dict({**DEFAULT_CONFIG, **overrides})
    return container


__all__ = ["ApplicationContainer", "DEFAULT_CONFIG", "create_container"]
