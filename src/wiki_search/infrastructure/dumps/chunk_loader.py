"""
Chunked XML Dump Loader

Reads a MediaWiki XML export that was split offline into chunk files:

    {directory}/simplewiki-chunk-001.xml
    {directory}/simplewiki-chunk-002.xml
    ...

Every chunk is a complete ``<mediawiki>`` document and no page spans two
files. Chunks are parsed lazily in a worker thread and kept in memory. A
chunk that is not well-formed XML (e.g. cut short by the splitter) is
scanned with ``parse_dump_pages`` so its complete pages are still found.

``DumpSearchBackend`` and ``DumpArticleSource`` expose the dump to the
aggregator and to the article caches.
"""

from __future__ import annotations

import asyncio
import html
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from xml.etree import ElementTree

from wiki_search.application.extraction.wikitext import Wikitext, clean_wikitext
from wiki_search.domain.entities import SearchResult, SourceDescriptor
from wiki_search.shared.exceptions import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_PREFIX = "simplewiki-chunk-"
DUMP_SOURCE_KEY = "dump"
DUMP_DISPLAY_NAME = "Local dump"
DUMP_COLOR = "#808080"
SUMMARY_CHARS = 200


@dataclass(frozen=True)
class DumpPage:
    """One page of an XML dump."""

    title: str
    wikitext: str
    timestamp: str | None = None

    @property
    def text(self) -> str:
        """Cleaned plain text."""
        return clean_wikitext(self.wikitext)


# =============================================================================
# Raw dump scanning
# =============================================================================

_PAGE = re.compile(r"<page>(.*?)</page>", re.DOTALL)
_TITLE = re.compile(r"<title>(.*?)</title>", re.DOTALL)
_TEXT = re.compile(r"<text[^>]*>(.*?)</text>", re.DOTALL)
_TIMESTAMP = re.compile(r"<timestamp>(.*?)</timestamp>")


def parse_dump_pages(xml_text: str, max_pages: int | None = 500, min_length: int = 100) -> list[DumpPage]:
    """
    Scan a raw dump for pages with substantial content.

    Args:
        xml_text: Dump XML as text
        max_pages: Stop after this many pages were kept (None: no limit)
        min_length: Keep pages whose cleaned text is longer than this

    Returns:
        Kept pages in dump order
    """
    pages: list[DumpPage] = []
    scanned = 0
    for match in _PAGE.finditer(xml_text):
        if max_pages is not None and len(pages) >= max_pages:
            break
        scanned += 1
        body = match.group(1)
        title_match = _TITLE.search(body)
        text_match = _TEXT.search(body)
        if not title_match or not text_match:
            continue
        page = DumpPage(
            title=html.unescape(title_match.group(1)),
            wikitext=html.unescape(text_match.group(1)),
            timestamp=ts.group(1) if (ts := _TIMESTAMP.search(body)) else None,
        )
        if len(page.text) > min_length:
            pages.append(page)

    logger.info(f"Parsed {len(pages)} pages from {scanned} scanned")
    return pages


# =============================================================================
# Chunk loader
# =============================================================================


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ElementTree.Element, name: str) -> str | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child.text or ""
    return None


def _child(element: ElementTree.Element, name: str) -> ElementTree.Element | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def parse_chunk(xml_bytes: bytes) -> list[DumpPage]:
    """Parse one ``<mediawiki>`` chunk document into its pages."""
    root = ElementTree.fromstring(xml_bytes)
    pages: list[DumpPage] = []
    for page in root.iter():
        if _local_name(page.tag) != "page":
            continue
        revision = _child(page, "revision")
        pages.append(
            DumpPage(
                title=_child_text(page, "title") or "Untitled",
                wikitext=(_child_text(revision, "text") or "") if revision is not None else "",
                timestamp=_child_text(revision, "timestamp") if revision is not None else None,
            )
        )
    return pages


class ChunkedDumpLoader:
    """
    Title lookup over chunked dump files.

    Example:
        loader = ChunkedDumpLoader("data/")
        page = await loader.find_article("Albert Einstein")
        hits = await loader.search_titles("einstein", max_results=5)
    """

    def __init__(
        self,
        directory: str | Path,
        prefix: str = DEFAULT_CHUNK_PREFIX,
        total_chunks: int | None = None,
    ) -> None:
        """
        Initialize loader.

        Args:
            directory: Directory holding the chunk files
            prefix: Chunk file name prefix
            total_chunks: Number of chunks; discovered from the directory when None
        """
        self._directory = Path(directory)
        self._prefix = prefix
        self._total_chunks = total_chunks
        self._chunks: dict[int, list[DumpPage]] = {}
        self._lock = asyncio.Lock()

    @property
    def directory(self) -> Path:
        return self._directory

    def chunk_path(self, number: int) -> Path:
        return self._directory / f"{self._prefix}{number:03d}.xml"

    def chunk_numbers(self) -> list[int]:
        if self._total_chunks is not None:
            return list(range(1, self._total_chunks + 1))
        pattern = re.compile(rf"^{re.escape(self._prefix)}(\d+)\.xml$")
        numbers = []
        for path in self._directory.glob(f"{self._prefix}*.xml"):
            if match := pattern.match(path.name):
                numbers.append(int(match.group(1)))
        return sorted(numbers)

    async def load_chunk(self, number: int) -> list[DumpPage]:
        """Pages of chunk *number*; an unreadable chunk yields no pages."""
        async with self._lock:
            if number in self._chunks:
                return self._chunks[number]
            path = self.chunk_path(number)
            try:
                pages = await asyncio.to_thread(self._read_chunk, path)
            except OSError as e:
                logger.error(f"Error loading chunk {path.name}: {e}")
                return []
            self._chunks[number] = pages
            logger.debug(f"Loaded {len(pages)} pages from {path.name}")
            return pages

    @staticmethod
    def _read_chunk(path: Path) -> list[DumpPage]:
        data = path.read_bytes()
        try:
            return parse_chunk(data)
        except ElementTree.ParseError as e:
            logger.warning(f"{path.name} is not well-formed ({e}), scanning it for complete pages")
            return parse_dump_pages(data.decode("utf-8", errors="replace"), max_pages=None, min_length=0)

    async def find_article(self, title: str) -> DumpPage | None:
        """First page whose title matches *title*, ignoring case and surrounding space."""
        wanted = title.strip().casefold()
        for number in self.chunk_numbers():
            for page in await self.load_chunk(number):
                if page.title.strip().casefold() == wanted:
                    return page
        return None

    async def search_titles(self, term: str, max_results: int = 10) -> list[DumpPage]:
        """Pages whose title contains *term*, in chunk order."""
        needle = term.casefold()
        results: list[DumpPage] = []
        for number in self.chunk_numbers():
            if len(results) >= max_results:
                break
            for page in await self.load_chunk(number):
                if needle in page.title.casefold():
                    results.append(page)
                    if len(results) >= max_results:
                        break
        return results

    def loaded_chunks(self) -> int:
        return len(self._chunks)


class DumpArticleSource:
    """ArticleSource over a ChunkedDumpLoader, returning raw Wikitext."""

    def __init__(self, loader: ChunkedDumpLoader, source_key: str = DUMP_SOURCE_KEY) -> None:
        self._loader = loader
        self.source_key = source_key

    async def fetch(self, title: str) -> Wikitext:
        page = await self._loader.find_article(title)
        if page is None:
            raise NotFoundError("Dump page", title)
        return Wikitext(page.wikitext)

    def page_url(self, title: str) -> str | None:
        return None


def create_dump_descriptor(directory: str | Path) -> SourceDescriptor:
    """Source descriptor for a dump directory; listed after the online sources."""
    return SourceDescriptor(DUMP_SOURCE_KEY, DUMP_DISPLAY_NAME, DUMP_COLOR, Path(directory).resolve().as_uri())


def _summary(text: str) -> str:
    first = text.split("\n\n", 1)[0].strip()
    return first if len(first) <= SUMMARY_CHARS else first[:SUMMARY_CHARS].rstrip() + "…"


class DumpSearchBackend:
    """
    SearchBackend over dump page titles (case-insensitive substring match).

    Usage:
        backend = DumpSearchBackend(loader, create_dump_descriptor("data/"))
        results = await backend.search("einstein", limit=15)
    """

    def __init__(self, loader: ChunkedDumpLoader, descriptor: SourceDescriptor) -> None:
        self._loader = loader
        self._descriptor = descriptor

    @property
    def descriptor(self) -> SourceDescriptor:
        return self._descriptor

    async def search(self, query: str, limit: int = 15) -> list[SearchResult]:
        pages = await self._loader.search_titles(query.strip(), max_results=limit)
        return [
            SearchResult(
                id=f"{self._descriptor.key}-{idx}",
                title=page.title,
                description=_summary(page.text),
                source_key=self._descriptor.key,
                source_name=self._descriptor.display_name,
                source_color=self._descriptor.color,
            )
            for idx, page in enumerate(pages)
        ]
