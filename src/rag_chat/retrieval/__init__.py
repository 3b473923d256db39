"""
Retrieval: the vector index the ingestion pipeline writes to and the
conversation graph queries.

Public surface
--------------
- :class:`VectorIndex`: abstract backend.
- :class:`InMemoryVectorIndex`: brute-force cosine index for dev / tests.
- :class:`ChromaVectorIndex`: default Chroma backend (lazy import).
"""

from rag_chat.retrieval.base import VectorIndex
from rag_chat.retrieval.memory_store import InMemoryVectorIndex, cosine_distance

__all__ = [
    "ChromaVectorIndex",
    "InMemoryVectorIndex",
    "VectorIndex",
    "cosine_distance",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorIndex to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorIndex":
        from rag_chat.retrieval.chroma_store import ChromaVectorIndex

        return ChromaVectorIndex
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
