"""
Wiki Search MCP Server

A Model Context Protocol server for searching and reading encyclopedia
articles across the Wikimedia family.

Architecture:
- instructions.py: SERVER_INSTRUCTIONS for AI agents
- tool_registry.py: Centralized tool registration
- tools/: Individual tool implementations by category
- container: DI container (dependency-injector) for service lifecycle

Configuration (environment, overridden by ``create_server`` arguments):
    WIKI_SEARCH_USER_AGENT       User-Agent sent to Wikimedia APIs
    WIKI_SEARCH_TIMEOUT          HTTP timeout in seconds
    WIKI_SEARCH_EMBEDDINGS       "sentence-transformers", "hashing" or "none"
    WIKI_SEARCH_EMBEDDING_MODEL  Sentence Transformers model name
    WIKI_SEARCH_DUMP_DIR         Directory of dump chunks used as article fallback
    WIKI_SEARCH_CACHE_FAILURES   Cache placeholder articles ("1"/"true")
"""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import TYPE_CHECKING, Any, cast

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from wiki_search.container import DEFAULT_CONFIG, ApplicationContainer
from wiki_search.shared.exceptions import ConfigurationError

from .instructions import SERVER_INSTRUCTIONS
from .tool_registry import register_all_mcp_tools

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Mapping

    from wiki_search.application.service import EncyclopediaService

logger = logging.getLogger(__name__)

ENV_PREFIX = "WIKI_SEARCH_"
_TRUTHY = {"1", "true", "yes", "on"}

# ── Module-level DI container ──────────────────────────────────────────────
_container: ApplicationContainer | None = None


def get_container() -> ApplicationContainer:
    """Get the application DI container.

    Raises:
        RuntimeError: If ``create_server()`` has not been called yet.
    """
    if _container is None:
        msg = "Container not initialized. Call create_server() first."
        raise RuntimeError(msg)
    return _container


def config_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Container configuration: defaults overridden by ``WIKI_SEARCH_*`` variables."""
    env = os.environ if environ is None else environ
    config = dict(DEFAULT_CONFIG)

    def get(name: str) -> str | None:
        value = env.get(f"{ENV_PREFIX}{name}", "").strip()
        return value or None

    if user_agent := get("USER_AGENT"):
        config["user_agent"] = user_agent
    if timeout := get("TIMEOUT"):
        try:
            config["timeout"] = float(timeout)
        except ValueError as e:
            raise ConfigurationError(f"{ENV_PREFIX}TIMEOUT must be a number, got {timeout!r}") from e
    if backend := get("EMBEDDINGS"):
        config["embedding_backend"] = backend
    if model := get("EMBEDDING_MODEL"):
        config["embedding_model"] = model
    if dump_dir := get("DUMP_DIR"):
        config["dump_dir"] = dump_dir
    if cache_failures := get("CACHE_FAILURES"):
        config["cache_failures"] = cache_failures.lower() in _TRUTHY
    return config


def _make_lifespan(
    container: ApplicationContainer,
) -> Callable[[FastMCP[Any]], AbstractAsyncContextManager[ApplicationContainer]]:
    """
    Create a FastMCP lifespan handler bound to *container*.

    The SDK enters this lifespan once per client session (every SSE
    connection), so it must not release process-wide resources. That is
    ``shutdown``'s job.
    """

    @asynccontextmanager
    async def _lifespan(server: FastMCP[Any]) -> AsyncIterator[ApplicationContainer]:
        logger.info("Lifecycle: session started")
        try:
            yield container
        finally:
            logger.info("Lifecycle: session ended")

    return _lifespan


async def shutdown(container: ApplicationContainer) -> None:
    """Release process-wide resources; call once, after the last session ended."""
    service = cast("EncyclopediaService", container.service())
    await service.close()
    logger.info("Shutdown: shared HTTP client closed")


def make_app_lifespan(
    container: ApplicationContainer,
    inner: Callable[[Any], AbstractAsyncContextManager[Any]],
) -> Callable[[Any], AbstractAsyncContextManager[None]]:
    """
    Starlette lifespan for HTTP mode: runs *inner* (the MCP app's own
    lifespan) and calls ``shutdown`` once the web server stops.
    """

    @asynccontextmanager
    async def _app_lifespan(app: Any) -> AsyncIterator[None]:
        try:
            async with inner(app):
                yield
        finally:
            await shutdown(container)

    return _app_lifespan


async def run_stdio(server: FastMCP, container: ApplicationContainer) -> None:
    """Serve one stdio session, then release the shared resources."""
    try:
        await server.run_stdio_async()
    finally:
        await shutdown(container)


def create_server(
    name: str = "wiki-search",
    config: Mapping[str, Any] | None = None,
    disable_security: bool = False,
    json_response: bool = False,
    stateless_http: bool = False,
) -> FastMCP:
    """
    Create and configure the Wiki Search MCP server.

    Args:
        name: Server name.
        config: Container configuration overrides; environment values are
            used for every key not given here.
        disable_security: Disable DNS rebinding protection (needed for remote access).
        json_response: Use JSON responses instead of SSE.
        stateless_http: Use stateless HTTP mode (no session management).

    Returns:
        Configured FastMCP server instance.
    """
    global _container
    logger.info("Initializing Wiki Search MCP Server...")

    # ── DI container ────────────────────────────────────────────────────
    _container = ApplicationContainer()
    _container.config.from_dict({**config_from_env(), **(config or {})})

    service = cast("EncyclopediaService", _container.service())
    if service.semantic_available:
        logger.info(f"Semantic ranking enabled ({_container.config.embedding_backend()})")
    else:
        logger.info("Semantic ranking disabled")

    # ── Transport security ──────────────────────────────────────────────
    if disable_security:
        transport_security = TransportSecuritySettings(enable_dns_rebinding_protection=False)
        logger.info("DNS rebinding protection disabled for remote access")
    else:
        transport_security = None

    # ── Create MCP server with lifespan ─────────────────────────────────
    mcp = FastMCP(
        name,
        instructions=SERVER_INSTRUCTIONS,
        transport_security=transport_security,
        json_response=json_response,
        stateless_http=stateless_http,
        lifespan=_make_lifespan(_container),
    )

    # ── Register all tools via centralized registry ─────────────────────
    stats = register_all_mcp_tools(mcp=mcp, service=service)
    logger.info("Tool registration complete: %s", stats)

    logger.info("Wiki Search MCP Server initialized successfully")
    return mcp


def main() -> None:
    """Run the MCP server over stdio."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    server = create_server()
    asyncio.run(run_stdio(server, get_container()))


if __name__ == "__main__":
    main()
