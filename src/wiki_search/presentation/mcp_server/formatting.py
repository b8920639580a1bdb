"""
Markdown rendering of search results and documents for tool output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from wiki_search.domain.entities import (
    Heading,
    Image,
    Infobox,
    ListBlock,
    Paragraph,
    PlainTextContent,
    StructuredContent,
)

if TYPE_CHECKING:
    from wiki_search.application.search import AggregationStats
    from wiki_search.domain.entities import Block, Document, SearchResult


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def _image_markdown(image: Image) -> list[str]:
    label = image.alt or image.title or "image"
    lines = [f"![{label}]({image.full_src or image.src})"]
    if image.caption:
        lines.append(f"*{image.caption}*")
    return lines


def block_to_markdown(block: Block) -> str:
    match block:
        case Heading(level=level, text=text):
            return f"{'#' * min(level + 1, 6)} {text}"
        case Paragraph():
            return block.text
        case ListBlock(ordered=ordered, items=items):
            return "\n".join(
                f"{i}. {item.text}" if ordered else f"- {item.text}" for i, item in enumerate(items, start=1)
            )
        case Image():
            return "\n".join(_image_markdown(block))
        case Infobox(images=images, rows=rows):
            lines: list[str] = []
            for image in images:
                lines.extend(_image_markdown(image))
            if rows:
                lines += ["| | |", "|---|---|"]
                lines += [f"| **{_escape_cell(r.label)}** | {_escape_cell(r.value)} |" for r in rows]
            return "\n".join(lines)
    return ""


def _wiki_links(blocks: tuple[Block, ...]) -> list[str]:
    """Distinct internal link targets in document order."""
    links: dict[str, None] = {}
    for block in blocks:
        match block:
            case Heading(inline=inline) | Paragraph(inline=inline):
                links.update(dict.fromkeys(inline.wiki_links))
            case ListBlock(items=items):
                for item in items:
                    links.update(dict.fromkeys(item.wiki_links))
    return list(links)


def document_to_markdown(document: Document, max_chars: int | None = None) -> str:
    """
    Render a Document as Markdown.

    Headings are shifted one level down so the article title stays the only
    top-level heading. Internal links are listed after the body, so they can
    be passed to read_article. Output longer than *max_chars* is truncated.
    """
    parts = [f"# {document.title}"]
    if document.url:
        parts.append(f"Source: {document.url}")

    match document.content:
        case StructuredContent(blocks=blocks):
            parts.extend(md for block in blocks if (md := block_to_markdown(block)))
            if not blocks:
                parts.append("_No readable content was extracted._")
            if links := _wiki_links(blocks):
                parts.append("**Links:** " + ", ".join(links))
        case PlainTextContent(text=text):
            parts.append(text)

    markdown = "\n\n".join(parts)
    if max_chars is not None and len(markdown) > max_chars:
        markdown = markdown[:max_chars].rstrip() + "\n\n…(truncated)"
    return markdown


def results_to_markdown(
    query: str,
    results: list[SearchResult],
    stats: AggregationStats | None = None,
) -> str:
    """Numbered result list with source badges and optional scores."""
    if not results:
        return f'No results found for "{query}".'

    lines = [f'## Results for "{query}" ({len(results)})', ""]
    if stats is not None and stats.ranking_error:
        error = stats.ranking_error
        notice = f"_Semantic ranking unavailable, results are in source order: {error['error']}_"
        if error.get("suggestion"):
            notice += f"\n_{error['suggestion']}_"
        lines += [notice, ""]
    for i, result in enumerate(results, start=1):
        score = f" (score {result.score:.3f})" if result.score is not None else ""
        lines.append(f"{i}. **{result.title}** [{result.source_name}]{score}")
        if result.description:
            lines.append(f"   {result.description}")
        lines.append(f"   source_key: `{result.source_key}`")

    if stats is not None:
        lines.append("")
        lines.append(
            f"_{stats.total_input} hits, {stats.duplicates_removed} duplicates removed"
            + (f", failed sources: {', '.join(stats.failed_sources)}_" if stats.failed_sources else "_")
        )
    return "\n".join(lines)
