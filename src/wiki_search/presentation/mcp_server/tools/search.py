"""
Search Tools - Multi-source encyclopedia search and source selection.

Tools:
- search_encyclopedias: Fan-out search with optional semantic ranking
- list_sources: Show every source and whether it is enabled
- set_enabled_sources: Choose which sources participate in searches
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wiki_search.application.search import DEFAULT_TOP_K

from ..formatting import results_to_markdown
from ._common import ResponseFormatter, parse_key_list

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from wiki_search.application.service import EncyclopediaService

logger = logging.getLogger(__name__)


def register_search_tools(mcp: FastMCP, service: EncyclopediaService) -> None:
    """Register search and source tools."""

    @mcp.tool()
    async def search_encyclopedias(query: str, semantic: bool = False, limit: int = DEFAULT_TOP_K) -> str:
        """
        Search Wikipedia, Wikidata, Wiktionary and the other enabled Wikimedia sources at once.

        Results from all sources are merged; when two sources return the same
        title (case-insensitive) only the first source's hit is kept.

        Args:
            query: Search terms, e.g. "quantum entanglement"
            semantic: Re-rank hits by semantic similarity to the query
            limit: Maximum results kept after semantic ranking (default 50)

        Returns:
            Markdown list of hits. Pass a hit's title and source_key to read_article.
        """
        logger.info(f"search_encyclopedias: query={query!r}, semantic={semantic}")

        if not query or not query.strip():
            return ResponseFormatter.error(
                "Empty query",
                suggestion="Provide search terms",
                example='search_encyclopedias(query="quantum mechanics")',
                tool_name="search_encyclopedias",
            )
        if limit < 1:
            return ResponseFormatter.error(
                f"Invalid limit: {limit}",
                suggestion="limit must be a positive integer",
                tool_name="search_encyclopedias",
            )

        results, stats = await service.search_with_stats(query, semantic=semantic, k=limit)
        return results_to_markdown(query.strip(), results, stats)

    @mcp.tool()
    def list_sources() -> str:
        """
        List every encyclopedia source with its key and whether it is enabled.

        Returns:
            JSON array of sources in priority order
        """
        return ResponseFormatter.json([s.to_dict() for s in service.list_sources()])

    @mcp.tool()
    def set_enabled_sources(sources: str) -> str:
        """
        Choose which sources take part in future searches.

        Every source not listed is disabled. Unknown keys are ignored.

        Args:
            sources: Comma separated source keys, e.g. "wikipedia,wiktionary" ("dump" with an offline dump)

        Returns:
            JSON with the keys now enabled
        """
        keys = parse_key_list(sources)
        known = {s.key for s in service.list_sources()}
        if not any(k in known for k in keys):
            return ResponseFormatter.error(
                f"No known source in {sources!r}",
                suggestion=f"Use keys from list_sources: {', '.join(sorted(known))}",
                example='set_enabled_sources(sources="wikipedia,wikiquote")',
                tool_name="set_enabled_sources",
            )
        enabled = service.set_enabled_sources(keys)
        ignored = [k for k in keys if k not in known]
        return ResponseFormatter.json({"success": True, "enabled": enabled, "ignored": ignored})
