"""
Multi-Source Encyclopedia Search

Search backends and article sources for the Wikimedia family.

Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                    SourceAggregator                      │
    │  ┌──────────┬──────────┬───────────┬────────────┬─────┐  │
    │  │Wikipedia │ Wikidata │ Wikiquote │ Wiktionary │ ... │  │
    │  │(opensrch)│(wbsearch)│(opensearch)│(opensearch)│     │  │
    │  └──────────┴──────────┴───────────┴────────────┴─────┘  │
    └─────────────────────────────────────────────────────────┘

Enumeration order of ``DEFAULT_SOURCES`` is also the duplicate-resolution
priority of the aggregator.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wiki_search.domain.entities import SourceDescriptor

from .base_client import BaseAPIClient
from .mediawiki import MediaWikiSearchClient, WikidataSearchClient
from .rest_article import EN_WIKIPEDIA_URL, SIMPLE_WIKIPEDIA_URL, RestHtmlArticleSource

if TYPE_CHECKING:
    from collections.abc import Iterable

    import httpx

logger = logging.getLogger(__name__)

WIKIPEDIA = "wikipedia"
WIKIDATA = "wikidata"

DEFAULT_SOURCES: tuple[SourceDescriptor, ...] = (
    SourceDescriptor(WIKIPEDIA, "Wikipedia", "#000000", "https://en.wikipedia.org/w/api.php"),
    SourceDescriptor(WIKIDATA, "Wikidata", "#339966", "https://www.wikidata.org/w/api.php"),
    SourceDescriptor("wikiquote", "Wikiquote", "#990000", "https://en.wikiquote.org/w/api.php"),
    SourceDescriptor("wiktionary", "Wiktionary", "#0066cc", "https://en.wiktionary.org/w/api.php"),
    SourceDescriptor("wikivoyage", "Wikivoyage", "#ff6600", "https://en.wikivoyage.org/w/api.php"),
    SourceDescriptor("wikibooks", "Wikibooks", "#996633", "https://en.wikibooks.org/w/api.php"),
    SourceDescriptor("wikinews", "Wikinews", "#cc0000", "https://en.wikinews.org/w/api.php"),
    SourceDescriptor("wikiversity", "Wikiversity", "#6633cc", "https://en.wikiversity.org/w/api.php"),
    SourceDescriptor("wikisource", "Wikisource", "#666666", "https://en.wikisource.org/w/api.php"),
)

# Sources without a REST HTML page endpoint of their own
NO_PAGE_HTML_SOURCES = frozenset({WIKIPEDIA, WIKIDATA})


def create_search_backend(
    descriptor: SourceDescriptor,
    client: httpx.AsyncClient | None = None,
    **kwargs: Any,
) -> MediaWikiSearchClient:
    """Build the search client matching *descriptor*."""
    if descriptor.key == WIKIDATA:
        return WikidataSearchClient(descriptor, client=client, **kwargs)
    return MediaWikiSearchClient(descriptor, client=client, **kwargs)


def create_search_backends(
    descriptors: Iterable[SourceDescriptor] = DEFAULT_SOURCES,
    client: httpx.AsyncClient | None = None,
    **kwargs: Any,
) -> dict[str, MediaWikiSearchClient]:
    """Build one search client per descriptor, keyed by source key."""
    return {d.key: create_search_backend(d, client=client, **kwargs) for d in descriptors}


def create_page_source(
    descriptor: SourceDescriptor,
    client: httpx.AsyncClient | None = None,
    **kwargs: Any,
) -> RestHtmlArticleSource | None:
    """REST page source for a non-Wikipedia site, or None when it has none."""
    if descriptor.key in NO_PAGE_HTML_SOURCES:
        return None
    return RestHtmlArticleSource(descriptor.key, descriptor.site_url, client=client, **kwargs)


__all__ = [
    "BaseAPIClient",
    "MediaWikiSearchClient",
    "WikidataSearchClient",
    "RestHtmlArticleSource",
    "DEFAULT_SOURCES",
    "NO_PAGE_HTML_SOURCES",
    "WIKIPEDIA",
    "WIKIDATA",
    "EN_WIKIPEDIA_URL",
    "SIMPLE_WIKIPEDIA_URL",
    "create_search_backend",
    "create_search_backends",
    "create_page_source",
]
