"""
Wikimedia REST page source.

Fetches the Parsoid HTML of a page:
    GET {site}/api/rest_v1/page/html/{title}

A missing page answers 404, surfaced as NotFoundError.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import TYPE_CHECKING, Any

from wiki_search.infrastructure.sources.base_client import BaseAPIClient

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

EN_WIKIPEDIA_URL = "https://en.wikipedia.org"
SIMPLE_WIKIPEDIA_URL = "https://simple.wikipedia.org"


def quote_title(title: str) -> str:
    """Percent-encode a page title for use as a single path segment."""
    return urllib.parse.quote(title, safe="")


class RestHtmlArticleSource(BaseAPIClient):
    """
    Article source backed by the Wikimedia REST API.

    Usage:
        source = RestHtmlArticleSource("wikipedia", EN_WIKIPEDIA_URL)
        html = await source.fetch("Albert Einstein")
    """

    def __init__(
        self,
        source_key: str,
        site_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        self.source_key = source_key
        self._site_url = site_url.rstrip("/")
        self._service_name = f"{urllib.parse.urlparse(self._site_url).netloc} REST"
        super().__init__(base_url=self._site_url, timeout=timeout, client=client, **kwargs)

    @property
    def site_url(self) -> str:
        return self._site_url

    async def fetch(self, title: str) -> str:
        """Return the page HTML for *title*."""
        logger.debug(f"Fetching {title!r} from {self._site_url}")
        return await self._make_request(
            f"/api/rest_v1/page/html/{quote_title(title)}",
            expect_json=False,
        )

    def page_url(self, title: str) -> str:
        return f"{self._site_url}/wiki/{quote_title(title)}"
