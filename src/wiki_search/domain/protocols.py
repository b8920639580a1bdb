"""
Contracts for the collaborators the core consumes.

Implementations live in the infrastructure layer; tests substitute
``AsyncMock`` objects or small fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import numpy as np
    from bs4 import Tag

    from wiki_search.application.extraction.wikitext import Wikitext
    from wiki_search.domain.entities import SearchResult


@runtime_checkable
class SearchBackend(Protocol):
    """One pluggable search provider. May raise on failure."""

    async def search(self, query: str, limit: int) -> list[SearchResult]: ...


@runtime_checkable
class ArticleSource(Protocol):
    """
    Fetches the raw content of one article.

    Returns HTML (string or parsed tree) or ``Wikitext``. Raises
    ``NotFoundError`` when the source has no such title and
    ``TransportError`` on network failure.
    """

    source_key: str

    async def fetch(self, title: str) -> str | Tag | Wikitext: ...

    def page_url(self, title: str) -> str | None: ...


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Black-box text to vector function.

    Vectors are normalized, deterministic for identical text and of constant
    dimensionality within one process.
    """

    async def embed(self, text: str) -> np.ndarray: ...
