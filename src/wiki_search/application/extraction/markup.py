"""
Markup helpers for the HTML extraction path.

- Internal link rewriting (``./Target`` and ``/wiki/Target``)
- Inline rendering of a node into ``InlineMarkup``
- Image URL normalization and responsive source selection
"""

from __future__ import annotations

import urllib.parse
from typing import TYPE_CHECKING

from wiki_search.domain.entities import Image, InlineMarkup

if TYPE_CHECKING:
    from bs4 import Tag

WIKI_LINK_ATTR = "data-wiki-link"
WIKI_LINK_CLASS = "wiki-link"


def decode_wiki_href(href: str) -> str | None:
    """
    Return the article title an internal href points to, or None.

    Only ``./Target`` and ``/wiki/Target`` forms are internal. The fragment
    is dropped, underscores become spaces, then percent-escapes are decoded.

    Example:
        >>> decode_wiki_href("./Albert_Einstein#Early_life")
        'Albert Einstein'
        >>> decode_wiki_href("https://example.org/wiki/X") is None
        True
    """
    if href.startswith("./"):
        target = href[2:]
    elif href.startswith("/wiki/"):
        target = href[len("/wiki/") :]
    else:
        return None
    target = target.split("#", 1)[0]
    title = urllib.parse.unquote(target.replace("_", " ")).strip()
    return title or None


def rewrite_links(node: Tag) -> list[str]:
    """Rewrite internal anchors under *node* in place; return their titles in order."""
    titles: list[str] = []
    for anchor in node.find_all("a", href=True):
        title = decode_wiki_href(anchor["href"])
        if title is None:
            continue
        anchor[WIKI_LINK_ATTR] = title
        anchor["href"] = "#"
        classes = list(anchor.get("class") or [])
        if WIKI_LINK_CLASS not in classes:
            classes.append(WIKI_LINK_CLASS)
        anchor["class"] = classes
        titles.append(title)
    return titles


def node_text(node: Tag) -> str:
    """Text content with whitespace runs collapsed."""
    return " ".join(node.get_text().split())


def render_inline(node: Tag) -> InlineMarkup:
    """Render the children of *node*, rewriting its internal links."""
    links = rewrite_links(node)
    return InlineMarkup(
        html=node.decode_contents().strip(),
        text=node_text(node),
        wiki_links=tuple(links),
    )


def absolute_url(url: str) -> str:
    if url.startswith("//"):
        return f"https:{url}"
    return url


def pick_srcset_candidate(srcset: str, min_width: int) -> str | None:
    """
    First candidate whose width descriptor is at least *min_width*.

    Density descriptors (``2x``) are not widths and never qualify.
    """
    for entry in srcset.split(","):
        parts = entry.split()
        if len(parts) < 2 or not parts[1].endswith("w"):
            continue
        try:
            width = int(parts[1][:-1])
        except ValueError:
            continue
        if width >= min_width:
            return absolute_url(parts[0])
    return None


def build_image(img: Tag, *, min_width: int = 500, caption: str | None = None) -> Image | None:
    """Build an Image from an ``img`` element; None when it has no source."""
    src = img.get("src") or img.get("data-src")
    if not src:
        return None
    src = absolute_url(src)
    full_src = None
    if srcset := img.get("srcset"):
        full_src = pick_srcset_candidate(srcset, min_width)
    return Image(
        src=src,
        alt=img.get("alt") or "",
        title=img.get("title") or "",
        full_src=full_src or src,
        caption=caption,
    )
