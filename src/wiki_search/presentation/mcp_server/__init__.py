"""
Wiki Search MCP Server

This module provides a Model Context Protocol (MCP) server for encyclopedia search.

Usage as standalone server:
    python -m wiki_search.presentation.mcp_server

Or in mcp.json:
    {
        "servers": {
            "wiki-search": {
                "type": "stdio",
                "command": "python",
                "args": ["-m", "wiki_search.presentation.mcp_server"]
            }
        }
    }

Usage for integration:
    from wiki_search.presentation.mcp_server import create_server, register_all_tools

    # Option 1: Create standalone server
    server = create_server(config={"embedding_backend": "hashing"})
    server.run()

    # Option 2: Register tools to an existing server
    register_all_tools(your_mcp_server, container.service())
"""

from __future__ import annotations

from .formatting import document_to_markdown, results_to_markdown
from .server import create_server, get_container, main
from .tools import register_all_tools

__all__ = [
    "create_server",
    "get_container",
    "main",
    "register_all_tools",
    "document_to_markdown",
    "results_to_markdown",
]
