"""
MediaWiki Integration

Search backends for MediaWiki sites (Wikipedia, Wikiquote, Wiktionary, ...)
and Wikidata.

API Documentation:
- https://www.mediawiki.org/wiki/API:Opensearch
- https://www.wikidata.org/w/api.php?action=help&modules=wbsearchentities

Both backends raise on failure; the aggregator isolates them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wiki_search.domain.entities import SearchResult
from wiki_search.infrastructure.sources.base_client import BaseAPIClient
from wiki_search.shared.exceptions import ParseError

if TYPE_CHECKING:
    import httpx

    from wiki_search.domain.entities import SourceDescriptor

logger = logging.getLogger(__name__)

WIKIDATA_NO_DESCRIPTION = "No description available"


class MediaWikiSearchClient(BaseAPIClient):
    """
    OpenSearch backend for one MediaWiki site.

    Usage:
        client = MediaWikiSearchClient(descriptor)
        results = await client.search("quantum", limit=15)
    """

    def __init__(
        self,
        descriptor: SourceDescriptor,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        self._descriptor = descriptor
        self._service_name = descriptor.display_name
        super().__init__(base_url=descriptor.api_url, timeout=timeout, client=client, **kwargs)

    @property
    def descriptor(self) -> SourceDescriptor:
        return self._descriptor

    async def search(self, query: str, limit: int = 15) -> list[SearchResult]:
        """
        Search page titles.

        The opensearch payload is ``[query, titles, descriptions, urls]``.
        Result ids are ``"{source_key}-{position}"``.
        """
        params = {
            "action": "opensearch",
            "search": query,
            "limit": str(limit),
            "namespace": "0",
            "format": "json",
        }
        data = await self._make_request(self._descriptor.api_url, params=params)

        if not isinstance(data, list) or len(data) < 2:
            raise ParseError("Unexpected opensearch payload", source=self._service_name)

        titles = data[1] or []
        descriptions = data[2] if len(data) > 2 and data[2] else []
        return [
            self._to_result(idx, title, descriptions[idx] if idx < len(descriptions) else "")
            for idx, title in enumerate(titles)
        ]

    def _to_result(self, idx: int, title: str, description: str) -> SearchResult:
        return SearchResult(
            id=f"{self._descriptor.key}-{idx}",
            title=title,
            description=description or "",
            source_key=self._descriptor.key,
            source_name=self._descriptor.display_name,
            source_color=self._descriptor.color,
        )


class WikidataSearchClient(MediaWikiSearchClient):
    """Wikidata entity search (``wbsearchentities``)."""

    def __init__(
        self,
        descriptor: SourceDescriptor,
        *,
        language: str = "en",
        **kwargs: Any,
    ) -> None:
        self._language = language
        super().__init__(descriptor, **kwargs)

    async def search(self, query: str, limit: int = 15) -> list[SearchResult]:
        params = {
            "action": "wbsearchentities",
            "search": query,
            "language": self._language,
            "limit": str(limit),
            "format": "json",
        }
        data = await self._make_request(self._descriptor.api_url, params=params)

        if not isinstance(data, dict):
            raise ParseError("Unexpected wbsearchentities payload", source=self._service_name)

        results = []
        for item in data.get("search", []):
            entity_id = item.get("id", "")
            results.append(
                SearchResult(
                    id=f"wikidata-{entity_id}",
                    title=item.get("label") or entity_id,
                    description=item.get("description") or WIKIDATA_NO_DESCRIPTION,
                    source_key=self._descriptor.key,
                    source_name=self._descriptor.display_name,
                    source_color=self._descriptor.color,
                )
            )
        return results
