"""
Domain Entities

Core business objects for encyclopedia search.
"""

from __future__ import annotations

from .document import (
    Block,
    Document,
    DocumentContent,
    Heading,
    Image,
    Infobox,
    InfoboxRow,
    InlineMarkup,
    ListBlock,
    Paragraph,
    PlainTextContent,
    StructuredContent,
)
from .search import EmbeddingRecord, SearchResult
from .source import SourceDescriptor

__all__ = [
    # Document entities
    "Document",
    "DocumentContent",
    "StructuredContent",
    "PlainTextContent",
    "Block",
    "Heading",
    "Paragraph",
    "ListBlock",
    "Image",
    "Infobox",
    "InfoboxRow",
    "InlineMarkup",
    # Search entities
    "SearchResult",
    "EmbeddingRecord",
    "SourceDescriptor",
]
