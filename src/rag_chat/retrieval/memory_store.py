"""In-process vector index for development and tests.

Exact brute-force cosine search over everything upserted so far.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from langchain_core.documents import Document

from rag_chat.models import EmbeddedChunk
from rag_chat.retrieval.base import VectorIndex


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """``1 - cos(a, b)``; a zero vector is at distance 1 from everything."""
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0.0:
        return 1.0
    return 1.0 - dot / norm


class InMemoryVectorIndex(VectorIndex):
    """Dictionary-backed :class:`VectorIndex`."""

    def __init__(self, collection_name: str = "memory") -> None:
        super().__init__(collection_name)
        self._records: dict[str, EmbeddedChunk] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def upsert(self, records: Sequence[EmbeddedChunk]) -> None:
        for record in records:
            self._records[record.id] = record

    async def query(self, vector: list[float], k: int) -> list[Document]:
        scored = sorted(
            ((cosine_distance(vector, r.vector), r) for r in self._records.values()),
            key=lambda pair: pair[0],
        )
        return [
            Document(page_content=r.text, metadata={**r.metadata, "distance": dist})
            for dist, r in scored[:k]
        ]
