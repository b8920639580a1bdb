"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import numpy as np
import pytest

from wiki_search.domain.entities import SearchResult, SourceDescriptor

# ============================================================
# Environment Fixtures
# ============================================================


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_http_client():
    """Factory for httpx clients answering through a handler function."""

    def _create(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _create


# ============================================================
# Search Fixtures
# ============================================================


@pytest.fixture
def make_result():
    """Factory for SearchResult objects."""

    def _create(
        title: str,
        source_key: str = "wikipedia",
        idx: int = 0,
        description: str = "",
    ) -> SearchResult:
        return SearchResult(
            id=f"{source_key}-{idx}",
            title=title,
            description=description,
            source_key=source_key,
            source_name=source_key.capitalize(),
            source_color="#000000",
        )

    return _create


@pytest.fixture
def make_backend():
    """Factory for AsyncMock search backends returning fixed results (or raising)."""

    def _create(results=None, error: Exception | None = None) -> AsyncMock:
        backend = AsyncMock()
        if error is not None:
            backend.search.side_effect = error
        else:
            backend.search.return_value = list(results or [])
        return backend

    return _create


@pytest.fixture
def three_sources():
    """wikipedia, wikidata, wiktionary descriptors in priority order."""
    return (
        SourceDescriptor("wikipedia", "Wikipedia", "#000000", "https://en.wikipedia.org/w/api.php"),
        SourceDescriptor("wikidata", "Wikidata", "#339966", "https://www.wikidata.org/w/api.php"),
        SourceDescriptor("wiktionary", "Wiktionary", "#0066cc", "https://en.wiktionary.org/w/api.php"),
    )


# ============================================================
# Embedding Fixtures
# ============================================================


class KeywordEmbeddings:
    """
    Embeds text as counts over a fixed vocabulary.

    Gives tests exact control over similarity: texts sharing more vocabulary
    words with the query score higher.
    """

    VOCABULARY = ("quantum", "physics", "computer", "cat", "dog", "music", "paris", "france")

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def embed(self, text: str) -> np.ndarray:
        self.calls.append(text)
        words = text.lower().split()
        return np.array([float(words.count(w)) for w in self.VOCABULARY])


@pytest.fixture
def keyword_embeddings():
    return KeywordEmbeddings()


# ============================================================
# Article Fixtures
# ============================================================


SAMPLE_ARTICLE_HTML = """
<html><body>
<h1>Albert Einstein</h1>
<span class="mw-editsection">[edit]</span>
<table class="infobox">
  <tr><td colspan="2"><img src="//upload.wikimedia.org/einstein.jpg" alt="Einstein"
      srcset="//upload.wikimedia.org/einstein-330.jpg 330w, //upload.wikimedia.org/einstein-640.jpg 640w"></td></tr>
  <tr><th>Born</th><td>14 March 1879 <p>Ulm</p></td></tr>
  <tr><th>Died</th><td>18 April 1955</td></tr>
</table>
<p>Albert Einstein was a <a href="./Theoretical_physics">theoretical physicist</a>
known for <a href="/wiki/Theory_of_relativity#Special">relativity</a>.<sup class="reference">[1]</sup></p>
<figure>
  <img src="https://upload.wikimedia.org/lecture.jpg" alt="Lecture">
  <figcaption>Einstein during a lecture</figcaption>
</figure>
<h2>Career</h2>
<ul>
  <li>Patent office in <a href="./Bern">Bern</a></li>
  <li>Professor <ul><li>Zurich</li><li>Prague</li></ul></li>
</ul>
<p>   </p>
<script>console.log("noise")</script>
<div class="navbox"><p>Navigation noise</p></div>
</body></html>
"""


@pytest.fixture
def sample_article_html():
    return SAMPLE_ARTICLE_HTML


@pytest.fixture
def make_article_source():
    """Factory for AsyncMock article sources."""

    def _create(source_key: str = "wikipedia", content=None, error: Exception | None = None) -> AsyncMock:
        source = AsyncMock()
        source.source_key = source_key
        source.page_url = lambda title: f"https://{source_key}.example/wiki/{title}"
        if error is not None:
            source.fetch.side_effect = error
        else:
            source.fetch.return_value = content
        return source

    return _create
