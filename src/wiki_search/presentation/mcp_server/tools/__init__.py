"""
Wiki Search MCP Tools

Search (3):
- search_encyclopedias: multi-source search, optional semantic ranking
- list_sources, set_enabled_sources

Articles (2):
- read_article: normalized article as Markdown
- clear_article_cache

Usage:
    from .tools import register_all_tools
    register_all_tools(mcp, service)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .articles import register_article_tools
from .search import register_search_tools

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from wiki_search.application.service import EncyclopediaService


def register_all_tools(mcp: FastMCP, service: EncyclopediaService) -> None:
    """Register all tools with the MCP server."""
    register_search_tools(mcp, service)
    register_article_tools(mcp, service)


__all__ = ["register_all_tools", "register_search_tools", "register_article_tools"]
