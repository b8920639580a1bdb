"""
Domain Entities: search hits and embedding records.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import numpy as np


@dataclass(frozen=True)
class SearchResult:
    """
    One hit returned by a search backend.

    ``score`` is only set after semantic ranking.
    """

    id: str
    title: str
    description: str = ""
    source_key: str = ""
    source_name: str = ""
    source_color: str = ""
    score: float | None = None

    @property
    def title_key(self) -> str:
        """Case-insensitive identity used for cross-source deduplication."""
        return self.title.casefold()

    def with_score(self, score: float) -> SearchResult:
        return dataclasses.replace(self, score=score)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        if self.score is None:
            del data["score"]
        return data


@dataclass(frozen=True, eq=False)
class EmbeddingRecord:
    """A candidate's embedding held by an EmbeddingIndex."""

    id: str
    title: str
    vector: np.ndarray = field(repr=False)
    source_content: str = ""

    @property
    def dimension(self) -> int:
        return int(self.vector.shape[-1])
