"""
MCP Server Instructions - usage guide for AI agents.
"""

from __future__ import annotations

SERVER_INSTRUCTIONS = """
Wiki Search MCP Server - encyclopedia lookup across the Wikimedia family

Sources (priority order): Wikipedia, Wikidata, Wikiquote, Wiktionary,
Wikivoyage, Wikibooks, Wikinews, Wikiversity, Wikisource.

## Workflow
1. search_encyclopedias(query="...") searches every enabled source at once.
   Duplicate titles across sources are merged; the higher-priority source wins.
   Use semantic=True to order hits by meaning instead of by source.
2. read_article(title="...", source_key="...") returns the article as Markdown.
   Pass the source_key of the hit so Wikiquote/Wiktionary/... pages are read
   from their own site. Wikidata hits are read from Wikipedia.
3. list_sources() / set_enabled_sources(sources="wikipedia,wiktionary")
   narrow the search to the sources that matter for the question.

## Notes
- Articles are cached; clear_article_cache() forces a fresh fetch.
- If an article cannot be loaded, read_article returns a short notice
  instead of failing. Try another title from the search results.
- A source that is down simply contributes no hits.
"""
