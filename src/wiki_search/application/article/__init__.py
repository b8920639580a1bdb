"""
Article loading with caching and source fallback.
"""

from __future__ import annotations

from .cache import ArticleCache, CacheStats

__all__ = ["ArticleCache", "CacheStats"]
