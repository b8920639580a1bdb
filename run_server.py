#!/usr/bin/env python3
"""
Wiki Search MCP Server - HTTP Mode

This script runs the Wiki Search MCP server in HTTP mode (SSE or streamable-http),
allowing remote clients from other machines to connect.

Usage:
    # Run with SSE transport (default, more compatible)
    python run_server.py --transport sse --port 8765

    # Run with streamable-http transport
    python run_server.py --transport streamable-http --port 8765

    # Offline-friendly semantic ranking and a local dump fallback
    python run_server.py --embeddings hashing --dump-dir ./data

Environment Variables:
    MCP_PORT: Server port (default: 8765)
    MCP_HOST: Server host (default: 0.0.0.0)
    WIKI_SEARCH_*: see wiki_search.presentation.mcp_server.server
"""

import argparse
import logging
import os

import uvicorn
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from wiki_search.presentation.mcp_server.server import create_server, get_container, make_app_lifespan

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run Wiki Search MCP Server in HTTP mode")
    parser.add_argument(
        "--transport",
        choices=["sse", "streamable-http"],
        default="sse",
        help="Transport protocol (default: sse)",
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("MCP_HOST", "0.0.0.0"),
        help="Server host (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("MCP_PORT", "8765")),
        help="Server port (default: 8765)",
    )
    parser.add_argument(
        "--embeddings",
        choices=["sentence-transformers", "hashing", "none"],
        help="Embedding backend for semantic ranking (default: WIKI_SEARCH_EMBEDDINGS or sentence-transformers)",
    )
    parser.add_argument("--dump-dir", help="Directory of XML dump chunks used as article fallback")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    parser.add_argument(
        "--enable-security",
        action="store_true",
        help="Keep DNS rebinding protection on (off by default for remote access)",
    )
    return parser


def config_overrides(args: argparse.Namespace) -> dict:
    """CLI values that take precedence over the environment."""
    overrides = {}
    if args.embeddings:
        overrides["embedding_backend"] = args.embeddings
    if args.dump_dir:
        overrides["dump_dir"] = args.dump_dir
    if args.timeout:
        overrides["timeout"] = args.timeout
    return overrides


def main():
    args = build_parser().parse_args()

    logger.info("Creating Wiki Search MCP Server...")
    logger.info(f"  Transport: {args.transport}")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  DNS Rebinding Protection: {'Enabled' if args.enable_security else 'Disabled'}")

    server = create_server(config=config_overrides(args), disable_security=not args.enable_security)

    if args.transport == "sse":
        mcp_app = server.sse_app()
        logger.info("SSE endpoint: /sse")
        logger.info("Message endpoint: /messages")
    else:
        mcp_app = server.streamable_http_app()
        logger.info("Streamable HTTP endpoint: /mcp")

    container = get_container()
    service = container.service()

    async def health(request):
        return JSONResponse({"status": "ok", "service": "wiki-search-mcp"})

    async def info(request):
        return JSONResponse(
            {
                "service": "Wiki Search MCP Server",
                "transport": args.transport,
                "semantic_ranking": service.semantic_available,
                "sources": [s.to_dict() for s in service.list_sources()],
                "article_cache": service.cache_stats(),
                "endpoints": {
                    "mcp": "/sse" if args.transport == "sse" else "/mcp",
                    "health": "/health",
                },
            }
        )

    app = Starlette(
        routes=[
            Route("/health", health),
            Route("/info", info),
            Mount("/", app=mcp_app),
        ],
        lifespan=make_app_lifespan(container, mcp_app.router.lifespan_context),
    )

    logger.info(f"Starting server at http://{args.host}:{args.port}")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


if __name__ == "__main__":
    main()
