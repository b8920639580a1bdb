"""
Wiki Search - Multi-source encyclopedia search and article reader.

Searches Wikipedia, Wikidata and the rest of the Wikimedia family at once,
normalizes articles into structured Documents and optionally re-ranks hits
by semantic similarity.

Usage:
    from wiki_search import create_container

    service = create_container(embedding_backend="hashing").service()
    results = await service.search("quantum", semantic=True)
    document = await service.load_article(results[0].title, results[0].source_key)

Components:
    - ContentExtractor: raw HTML / wikitext to Document
    - SourceAggregator: concurrent fan-out search with title deduplication
    - EmbeddingIndex / SemanticSearchCoordinator: cosine re-ranking
    - ArticleCache: cached article loading with source fallback
"""

from .application.article import ArticleCache
from .application.extraction import ContentExtractor, Wikitext
from .application.search import (
    EmbeddingIndex,
    SemanticSearchCoordinator,
    SourceAggregator,
    SourceConfig,
)
from .application.service import EncyclopediaService
from .container import ApplicationContainer, create_container
from .domain.entities import Document, SearchResult, SourceDescriptor

__version__ = "0.1.0"

__all__ = [
    "ContentExtractor",
    "Wikitext",
    "SourceAggregator",
    "SourceConfig",
    "EmbeddingIndex",
    "SemanticSearchCoordinator",
    "ArticleCache",
    "EncyclopediaService",
    "ApplicationContainer",
    "create_container",
    "Document",
    "SearchResult",
    "SourceDescriptor",
]
