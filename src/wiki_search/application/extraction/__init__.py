"""
Content extraction: raw article markup to normalized Documents.
"""

from __future__ import annotations

from .extractor import DEFAULT_NOISE_SELECTORS, ContentExtractor, ExtractionConfig
from .markup import decode_wiki_href, pick_srcset_candidate
from .wikitext import Wikitext, clean_wikitext

__all__ = [
    "ContentExtractor",
    "ExtractionConfig",
    "DEFAULT_NOISE_SELECTORS",
    "Wikitext",
    "clean_wikitext",
    "decode_wiki_href",
    "pick_srcset_candidate",
]
