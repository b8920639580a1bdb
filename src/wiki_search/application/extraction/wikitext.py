"""
Wikitext cleaning.

Raw MediaWiki markup (from XML dumps) is reduced to readable plain text.
Markup is removed in dependency order: comments and references first, then
templates (innermost first, so nested ``{{a|{{b}}}}`` collapses fully), then
file links and HTML tags, and finally links, emphasis and headings.
"""

from __future__ import annotations

import html
import re


class Wikitext(str):
    """Marker type: a string holding raw wikitext rather than HTML."""

    __slots__ = ()


_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_REF_PAIRED = re.compile(r"<ref\b[^>/]*>.*?</ref\s*>", re.DOTALL | re.IGNORECASE)
_REF_SELF_CLOSING = re.compile(r"<ref\b[^>]*/>", re.IGNORECASE)
_INNER_TEMPLATE = re.compile(r"\{\{[^{}]*\}\}")
_FILE_LINK = re.compile(r"\[\[(?:File|Image):(?:[^\[\]]|\[\[[^\[\]]*\]\])*\]\]", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_PIPED_LINK = re.compile(r"\[\[[^\[\]|]*\|([^\[\]]*)\]\]")
_PLAIN_LINK = re.compile(r"\[\[([^\[\]|]*)\]\]")
_LABELLED_EXTERNAL = re.compile(r"\[(?:https?:)?//[^\s\]]+\s+([^\]]+)\]")
_BARE_EXTERNAL = re.compile(r"\[(?:https?:)?//[^\s\]]*\]")
_EMPHASIS = re.compile(r"'{2,}")
_HEADING = re.compile(r"^[ \t]*(={1,6})[ \t]*(.+?)[ \t]*\1[ \t]*$", re.MULTILINE)
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def _strip_templates(text: str) -> str:
    while True:
        stripped = _INNER_TEMPLATE.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def clean_wikitext(text: str) -> str:
    """
    Convert wikitext to plain text.

    Example:
        >>> clean_wikitext("'''Paris''' is the [[capital city|capital]] of [[France]].")
        'Paris is the capital of France.'
    """
    text = _COMMENT.sub("", text)
    text = _REF_PAIRED.sub("", text)
    text = _REF_SELF_CLOSING.sub("", text)
    text = _strip_templates(text)
    text = _FILE_LINK.sub("", text)
    text = _TAG.sub("", text)
    text = _PIPED_LINK.sub(r"\1", text)
    text = _PLAIN_LINK.sub(r"\1", text)
    text = _LABELLED_EXTERNAL.sub(r"\1", text)
    text = _BARE_EXTERNAL.sub("", text)
    text = _EMPHASIS.sub("", text)
    text = _HEADING.sub(r"\2", text)
    text = html.unescape(text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()
