"""
Feature-hashing embeddings.

Deterministic, dependency-free vectors: every lowercase word token is hashed
into one of ``dimensions`` buckets with a hash-derived sign, and the bucket
counts are L2-normalized. Texts sharing vocabulary score higher than
unrelated ones, which is enough for offline use and tests.
"""

from __future__ import annotations

import hashlib
import re

import numpy as np

DEFAULT_DIMENSIONS = 384

_TOKEN = re.compile(r"\w+")


class HashingEmbeddings:
    """EmbeddingProvider backed by token hashing."""

    def __init__(self, dimensions: int = DEFAULT_DIMENSIONS) -> None:
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed_sync(self, text: str) -> np.ndarray:
        vector = np.zeros(self._dimensions, dtype=np.float32)
        for token in _TOKEN.findall(text.lower()):
            digest = hashlib.sha256(token.encode()).digest()
            bucket = int.from_bytes(digest[:4], "little") % self._dimensions
            vector[bucket] += 1.0 if digest[4] & 1 else -1.0
        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector

    async def embed(self, text: str) -> np.ndarray:
        return self.embed_sync(text)
