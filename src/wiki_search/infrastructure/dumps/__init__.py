"""
Offline XML dump access.
"""

from __future__ import annotations

from .chunk_loader import (
    DEFAULT_CHUNK_PREFIX,
    DUMP_SOURCE_KEY,
    ChunkedDumpLoader,
    DumpArticleSource,
    DumpPage,
    DumpSearchBackend,
    create_dump_descriptor,
    parse_chunk,
    parse_dump_pages,
)

__all__ = [
    "ChunkedDumpLoader",
    "DumpArticleSource",
    "DumpPage",
    "DumpSearchBackend",
    "DEFAULT_CHUNK_PREFIX",
    "DUMP_SOURCE_KEY",
    "create_dump_descriptor",
    "parse_chunk",
    "parse_dump_pages",
]
