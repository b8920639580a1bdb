"""
Domain Entity: Document

Normalized representation of one encyclopedia article.

A Document's content is a tagged union: either an ordered sequence of
structural Blocks (extracted from a markup tree) or plain text (cleaned
wikitext, or a placeholder message). Consumers must handle both shapes,
typically with a ``match`` statement:

    match document.content:
        case StructuredContent(blocks=blocks):
            ...
        case PlainTextContent(text=text):
            ...

All entities are frozen: a Document is never edited after extraction.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class InlineMarkup:
    """Inline content of a heading, paragraph or list item."""

    html: str
    text: str
    wiki_links: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Heading:
    level: int
    text: str
    inline: InlineMarkup

    kind = "heading"


@dataclass(frozen=True, slots=True)
class Paragraph:
    inline: InlineMarkup

    kind = "paragraph"

    @property
    def text(self) -> str:
        return self.inline.text


@dataclass(frozen=True, slots=True)
class ListBlock:
    ordered: bool
    items: tuple[InlineMarkup, ...]

    kind = "list"


@dataclass(frozen=True, slots=True)
class Image:
    """
    An image reference.

    ``src`` is always absolute; ``full_src`` is the high resolution candidate
    picked from a responsive source set, or ``src`` when there is none.
    """

    src: str
    alt: str = ""
    title: str = ""
    full_src: str | None = None
    caption: str | None = None

    kind = "image"


@dataclass(frozen=True, slots=True)
class InfoboxRow:
    label: str
    value: str


@dataclass(frozen=True, slots=True)
class Infobox:
    images: tuple[Image, ...] = ()
    rows: tuple[InfoboxRow, ...] = ()

    kind = "infobox"


Block = Heading | Paragraph | ListBlock | Image | Infobox


@dataclass(frozen=True, slots=True)
class StructuredContent:
    blocks: tuple[Block, ...] = ()

    def __len__(self) -> int:
        return len(self.blocks)

    @property
    def is_empty(self) -> bool:
        return not self.blocks


@dataclass(frozen=True, slots=True)
class PlainTextContent:
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.text


DocumentContent = StructuredContent | PlainTextContent


@dataclass(frozen=True)
class Document:
    """
    Extracted article.

    Placeholder documents are synthesized when every source failed; they
    carry plain text naming the requested title and the failure.
    """

    title: str
    source_key: str
    content: DocumentContent = field(default_factory=StructuredContent)
    url: str | None = None
    is_placeholder: bool = False
    error: str | None = None

    @property
    def is_structured(self) -> bool:
        return isinstance(self.content, StructuredContent)

    @property
    def images(self) -> list[Image]:
        """All images in document order, including infobox images."""
        if not isinstance(self.content, StructuredContent):
            return []
        images: list[Image] = []
        for block in self.content.blocks:
            if isinstance(block, Image):
                images.append(block)
            elif isinstance(block, Infobox):
                images.extend(block.images)
        return images

    @classmethod
    def placeholder(cls, title: str, source_key: str, error: str) -> Document:
        """Build the document returned when no source could provide *title*."""
        message = (
            f'Unable to load article "{title}". The article may not exist or there was a '
            f"network error ({error}). Please try again or search for a different article."
        )
        return cls(
            title=title,
            source_key=source_key,
            content=PlainTextContent(message),
            is_placeholder=True,
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        data = dataclasses.asdict(self)
        match self.content:
            case StructuredContent(blocks=blocks):
                data["content"] = {
                    "type": "structured",
                    "blocks": [{"type": b.kind, **dataclasses.asdict(b)} for b in blocks],
                }
            case PlainTextContent(text=text):
                data["content"] = {"type": "plain", "text": text}
        return data
