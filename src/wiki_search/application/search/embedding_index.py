"""
In-memory embedding index with cosine similarity ranking.

All records of one index share the dimensionality of the first record added.
Ranking is a stable descending sort, so equal scores keep insertion order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from wiki_search.shared.exceptions import InvalidParameterError

if TYPE_CHECKING:
    from wiki_search.domain.entities import EmbeddingRecord

logger = logging.getLogger(__name__)


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """
    Cosine similarity of two vectors, clipped to [-1, 1].

    Returns 0.0 when either vector has zero norm.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.clip(np.dot(a, b) / denom, -1.0, 1.0))


class EmbeddingIndex:
    """
    Holds embedding records and answers top-k similarity queries.

    Example:
        index = EmbeddingIndex()
        index.add(EmbeddingRecord("wikipedia-0", "Quantum", vec))
        for record, score in index.query(query_vec, k=10):
            ...
    """

    def __init__(self) -> None:
        self._records: list[EmbeddingRecord] = []
        self._matrix: np.ndarray | None = None
        self._dimension: int | None = None

    def __len__(self) -> int:
        return len(self._records)

    @property
    def dimension(self) -> int | None:
        return self._dimension

    @property
    def records(self) -> list[EmbeddingRecord]:
        return list(self._records)

    def add(self, record: EmbeddingRecord) -> None:
        """Add a record. Raises InvalidParameterError on a dimension mismatch."""
        vector = self._as_vector(record.vector, "record.vector")
        if self._dimension is None:
            self._dimension = vector.shape[0]
        elif vector.shape[0] != self._dimension:
            raise InvalidParameterError(
                "record.vector",
                f"dimension {vector.shape[0]}",
                f"dimension {self._dimension}",
            )
        self._records.append(record)
        self._matrix = None

    def clear(self) -> None:
        self._records.clear()
        self._matrix = None
        self._dimension = None

    def query(self, vector: np.ndarray, k: int) -> list[tuple[EmbeddingRecord, float]]:
        """
        Rank records by cosine similarity to *vector*.

        Returns:
            At most ``k`` (record, score) pairs, best first
        """
        if k <= 0 or not self._records:
            return []
        query = self._as_vector(vector, "vector")
        if query.shape[0] != self._dimension:
            raise InvalidParameterError("vector", f"dimension {query.shape[0]}", f"dimension {self._dimension}")

        scores = self._scores(query)
        order = np.argsort(-scores, kind="stable")[:k]
        return [(self._records[i], float(scores[i])) for i in order]

    def _scores(self, query: np.ndarray) -> np.ndarray:
        if self._matrix is None:
            self._matrix = np.vstack([np.asarray(r.vector, dtype=np.float64) for r in self._records])
        denom = np.linalg.norm(self._matrix, axis=1) * np.linalg.norm(query)
        dots = self._matrix @ query
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(denom > 0, dots / np.where(denom > 0, denom, 1.0), 0.0)
        return np.clip(scores, -1.0, 1.0)

    @staticmethod
    def _as_vector(vector: np.ndarray, name: str) -> np.ndarray:
        array = np.asarray(vector, dtype=np.float64)
        if array.ndim != 1 or array.shape[0] == 0:
            raise InvalidParameterError(name, f"shape {array.shape}", "a non-empty 1-D vector")
        return array
