"""
Content Extractor - Normalize raw article markup into a Document.

Input shapes:
    - Parsed markup tree (``bs4.Tag`` / ``BeautifulSoup``)
    - HTML string (parsed with the stdlib ``html.parser`` backend)
    - ``Wikitext`` string (cleaned to plain text)

Tree path:
    1. Drop noise nodes (scripts, edit links, reference lists, navboxes, ...)
    2. Walk candidate nodes in document order
    3. Skip nodes owned by an infobox, a captioned figure or a list item
    4. Classify each remaining node into a Block

Extraction is best effort: a node that fails to classify is logged and
skipped, and ``extract`` never raises.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from wiki_search.domain.entities import (
    Document,
    Heading,
    Infobox,
    InfoboxRow,
    ListBlock,
    Paragraph,
    PlainTextContent,
    StructuredContent,
)
from wiki_search.shared.exceptions import ParseError

from .markup import build_image, node_text, render_inline
from .wikitext import Wikitext, clean_wikitext

if TYPE_CHECKING:
    from wiki_search.domain.entities import Block, Image

logger = logging.getLogger(__name__)

DEFAULT_NOISE_SELECTORS: tuple[str, ...] = (
    "script",
    "style",
    ".mw-editsection",
    ".mw-references-wrap",
    ".navbox",
    "sup.reference",
)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
CANDIDATE_SELECTOR = "h1, h2, h3, h4, h5, h6, p, ul, ol, img, figure, .thumb, .infobox"


@dataclass(frozen=True)
class ExtractionConfig:
    """Extraction settings."""

    noise_selectors: tuple[str, ...] = DEFAULT_NOISE_SELECTORS
    min_full_image_width: int = 500


def _is_infobox(node: Tag) -> bool:
    return "infobox" in (node.get("class") or [])


def _is_figure(node: Tag) -> bool:
    return node.name == "figure" or "thumb" in (node.get("class") or [])


class ContentExtractor:
    """
    Converts raw article content into a normalized Document.

    Usage:
        extractor = ContentExtractor()
        doc = extractor.extract(html, title="Albert Einstein", source_key="wikipedia")
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self._config = config or ExtractionConfig()

    @property
    def config(self) -> ExtractionConfig:
        return self._config

    def extract(
        self,
        raw: str | Tag,
        *,
        title: str,
        source_key: str,
        url: str | None = None,
    ) -> Document:
        """
        Extract a Document from *raw*.

        A parsed tree is copied before noise removal; the caller's tree is
        left untouched.
        """
        try:
            if isinstance(raw, Wikitext):
                content = PlainTextContent(clean_wikitext(raw))
            else:
                content = StructuredContent(tuple(self._extract_blocks(raw)))
        except Exception as e:
            logger.warning(f"Extraction of {title!r} failed: {e}")
            content = StructuredContent()
        return Document(title=title, source_key=source_key, content=content, url=url)

    # -------------------------------------------------------------------------
    # Tree walk
    # -------------------------------------------------------------------------

    def _extract_blocks(self, raw: str | Tag) -> list[Block]:
        root = BeautifulSoup(raw, "html.parser") if isinstance(raw, str) else copy.copy(raw)
        self._remove_noise(root)

        blocks: list[Block] = []
        for node in root.select(CANDIDATE_SELECTOR):
            if self._is_owned(node):
                continue
            try:
                block = self._classify(node)
            except Exception as e:
                logger.debug(f"Skipping <{node.name}> node: {e}")
                continue
            if block is not None:
                blocks.append(block)
        return blocks

    def _remove_noise(self, root: Tag) -> None:
        for selector in self._config.noise_selectors:
            for node in root.select(selector):
                if not node.decomposed:
                    node.decompose()

    @staticmethod
    def _is_owned(node: Tag) -> bool:
        """True when an enclosing infobox, figure or list item claims *node*."""
        nested_in_item = node.name in ("p", "ul", "ol")
        for ancestor in node.parents:
            if not isinstance(ancestor, Tag):
                continue
            if _is_infobox(ancestor) or _is_figure(ancestor):
                return True
            if nested_in_item and ancestor.name == "li":
                return True
        return False

    def _classify(self, node: Tag) -> Block | None:
        if _is_infobox(node):
            return self._extract_infobox(node)
        if _is_figure(node):
            return self._extract_figure(node)
        match node.name:
            case name if name in HEADING_TAGS:
                return self._extract_heading(node)
            case "p":
                return self._extract_paragraph(node)
            case "ul" | "ol":
                return self._extract_list(node)
            case "img":
                return build_image(node, min_width=self._config.min_full_image_width)
        return None

    # -------------------------------------------------------------------------
    # Block classifiers
    # -------------------------------------------------------------------------

    def _extract_heading(self, node: Tag) -> Heading | None:
        inline = render_inline(node)
        if not inline.text:
            return None
        return Heading(level=int(node.name[1]), text=inline.text, inline=inline)

    def _extract_paragraph(self, node: Tag) -> Paragraph | None:
        inline = render_inline(node)
        if not inline.text:
            return None
        return Paragraph(inline)

    def _extract_list(self, node: Tag) -> ListBlock | None:
        items = tuple(
            inline for li in node.find_all("li", recursive=False) if (inline := render_inline(li)).text
        )
        if not items:
            return None
        return ListBlock(ordered=node.name == "ol", items=items)

    def _extract_figure(self, node: Tag) -> Image | None:
        img = node.find("img")
        if img is None:
            return None
        caption_node = node.select_one("figcaption, .thumbcaption")
        caption = node_text(caption_node) if caption_node is not None else None
        return build_image(img, min_width=self._config.min_full_image_width, caption=caption or None)

    def _extract_infobox(self, node: Tag) -> Infobox | None:
        images = tuple(
            image
            for img in node.find_all("img")
            if (image := build_image(img, min_width=self._config.min_full_image_width)) is not None
        )
        rows: list[InfoboxRow] = []
        for tr in node.find_all("tr"):
            th = tr.find("th")
            td = tr.find("td")
            if th is None or td is None:
                continue
            rows.append(InfoboxRow(label=node_text(th), value=node_text(td)))
        if not images and not rows:
            raise ParseError("infobox has neither images nor label/value rows")
        return Infobox(images=images, rows=tuple(rows))
