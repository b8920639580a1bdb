"""
Article Tools - Read normalized articles.

Tools:
- read_article: Load an article as Markdown (cached)
- clear_article_cache: Drop every cached article
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..formatting import document_to_markdown
from ._common import ResponseFormatter

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from wiki_search.application.service import EncyclopediaService

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 20000


def register_article_tools(mcp: FastMCP, service: EncyclopediaService) -> None:
    """Register article reading tools."""

    @mcp.tool()
    async def read_article(title: str, source_key: str = "", max_chars: int = DEFAULT_MAX_CHARS) -> str:
        """
        Read an encyclopedia article as Markdown.

        Args:
            title: Exact article title, as returned by search_encyclopedias
            source_key: Source of the hit (e.g. "wikiquote"); defaults to Wikipedia
            max_chars: Truncate the rendered article after this many characters

        Returns:
            Article Markdown. If the article cannot be loaded, a short notice
            naming the failure is returned instead.
        """
        logger.info(f"read_article: title={title!r}, source_key={source_key!r}")

        if not title or not title.strip():
            return ResponseFormatter.error(
                "Empty title",
                suggestion="Use a title from search_encyclopedias results",
                example='read_article(title="Albert Einstein")',
                tool_name="read_article",
            )

        document = await service.load_article(title, source_key or None)
        return document_to_markdown(document, max_chars=max_chars if max_chars > 0 else None)

    @mcp.tool()
    def clear_article_cache() -> str:
        """
        Drop every cached article so the next read fetches fresh content.

        Returns:
            JSON with the number of entries removed
        """
        removed = service.clear_caches()
        return ResponseFormatter.json({"success": True, "cleared": removed})
