"""
Tool Registry - central list of every MCP tool.

Usage:
    from .tool_registry import register_all_mcp_tools, list_registered_tools

    register_all_mcp_tools(mcp, service)
    tools = list_registered_tools()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from wiki_search.application.service import EncyclopediaService

logger = logging.getLogger(__name__)


TOOL_CATEGORIES: dict[str, dict[str, Any]] = {
    "search": {
        "name": "Search",
        "description": "Multi-source encyclopedia search",
        "tools": ["search_encyclopedias"],
    },
    "sources": {
        "name": "Sources",
        "description": "Source listing and selection",
        "tools": ["list_sources", "set_enabled_sources"],
    },
    "articles": {
        "name": "Articles",
        "description": "Article reading and cache control",
        "tools": ["read_article", "clear_article_cache"],
    },
}


def register_all_mcp_tools(mcp: FastMCP, service: EncyclopediaService) -> dict[str, int]:
    """
    Register all MCP tools.

    Returns:
        Dict with category ids and tool counts
    """
    from .tools import register_all_tools

    logger.info("Registering tools...")
    register_all_tools(mcp, service)

    stats = {cat_id: len(cat_info["tools"]) for cat_id, cat_info in TOOL_CATEGORIES.items()}
    logger.info(f"Total registered: {sum(stats.values())} tools")
    return stats


def list_registered_tools() -> dict[str, list[str]]:
    """All defined tools grouped by category."""
    return {cat_id: cat_info["tools"] for cat_id, cat_info in TOOL_CATEGORIES.items()}


def get_tool_info(tool_name: str) -> dict[str, str] | None:
    for cat_id, cat_info in TOOL_CATEGORIES.items():
        if tool_name in cat_info["tools"]:
            return {
                "name": tool_name,
                "category": cat_info["name"],
                "category_id": cat_id,
                "category_description": cat_info["description"],
            }
    return None


async def validate_tool_registry(mcp: FastMCP) -> dict[str, Any]:
    """
    Check that TOOL_CATEGORIES and the tools registered on *mcp* agree.

    Returns:
        Dict with ``defined``, ``registered``, ``missing``, ``extra`` and ``valid``
    """
    defined = {tool for cat_info in TOOL_CATEGORIES.values() for tool in cat_info["tools"]}
    registered = {tool.name for tool in await mcp.list_tools()}

    missing = defined - registered
    extra = registered - defined
    if missing:
        logger.warning(f"Tools defined but not registered: {missing}")
    if extra:
        logger.info(f"Tools registered but not in TOOL_CATEGORIES: {extra}")

    return {
        "defined": sorted(defined),
        "registered": sorted(registered),
        "missing": sorted(missing),
        "extra": sorted(extra),
        "valid": not missing and not extra,
    }


__all__ = [
    "TOOL_CATEGORIES",
    "register_all_mcp_tools",
    "list_registered_tools",
    "get_tool_info",
    "validate_tool_registry",
]
