"""
Embedding providers.

Two backends implement ``EmbeddingProvider``:
- SentenceTransformerEmbeddings: neural sentence embeddings (``semantic`` extra)
- HashingEmbeddings: deterministic token hashing, no model download
"""

from __future__ import annotations

from wiki_search.shared.exceptions import ConfigurationError

from .hashing import DEFAULT_DIMENSIONS, HashingEmbeddings
from .sentence_transformer import DEFAULT_MODEL, SentenceTransformerEmbeddings

SENTENCE_TRANSFORMERS = "sentence-transformers"
HASHING = "hashing"


def create_embedding_provider(
    backend: str = SENTENCE_TRANSFORMERS,
    model_name: str = DEFAULT_MODEL,
) -> SentenceTransformerEmbeddings | HashingEmbeddings:
    """Build the provider named by *backend*."""
    match backend:
        case "sentence-transformers":
            return SentenceTransformerEmbeddings(model_name)
        case "hashing":
            return HashingEmbeddings()
    raise ConfigurationError(
        f"Unknown embedding backend: {backend!r} (expected {SENTENCE_TRANSFORMERS!r} or {HASHING!r})"
    )


__all__ = [
    "HashingEmbeddings",
    "SentenceTransformerEmbeddings",
    "create_embedding_provider",
    "DEFAULT_DIMENSIONS",
    "DEFAULT_MODEL",
    "SENTENCE_TRANSFORMERS",
    "HASHING",
]
