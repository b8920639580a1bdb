"""
Sentence Transformers embedding provider.

Default model: sentence-transformers/all-MiniLM-L6-v2
- Embedding dim: 384
- Vectors are L2-normalized, so cosine similarity equals the dot product

The model is loaded on first use, in a worker thread; encoding also runs in
a worker thread so the event loop is never blocked.

Requires the ``semantic`` extra:
    pip install "wiki-search-mcp[semantic]"
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from wiki_search.shared.exceptions import ConfigurationError, EmbeddingError

if TYPE_CHECKING:
    import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


class SentenceTransformerEmbeddings:
    """
    EmbeddingProvider using a local Sentence Transformers model.

    Usage:
        embeddings = SentenceTransformerEmbeddings()
        vector = await embeddings.embed("quantum mechanics")
    """

    def __init__(self, model_name: str = DEFAULT_MODEL, device: str | None = None) -> None:
        self.model_name = model_name
        self.device = device
        self._model: Any = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def _load_model(self) -> Any:
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ConfigurationError(
                'sentence-transformers is required. Install with: pip install "wiki-search-mcp[semantic]"'
            ) from e
        logger.info(f"Loading embedding model: {self.model_name}")
        return SentenceTransformer(self.model_name, device=self.device)

    async def load(self) -> None:
        """Load the model if it is not loaded yet."""
        async with self._lock:
            if self._model is None:
                self._model = await asyncio.to_thread(self._load_model)

    def _encode(self, text: str) -> np.ndarray:
        return self._model.encode(
            text if text.strip() else " ",
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )

    async def embed(self, text: str) -> np.ndarray:
        await self.load()
        try:
            return await asyncio.to_thread(self._encode, text)
        except Exception as e:
            raise EmbeddingError(f"Embedding failed: {e}", text=text[:100]) from e
