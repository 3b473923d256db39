"""Abstract base class for vector-index backends.

Adding a new backend (pgvector, Qdrant, …) only requires subclassing
:class:`VectorIndex` and implementing :meth:`upsert` and :meth:`query`.
The ingestion pipeline and the conversation graph are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rag_chat.models import EmbeddedChunk, RetrievedDocument


class VectorIndex(ABC):
    """Backend-agnostic vector-index interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / table / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    async def upsert(self, records: Sequence[EmbeddedChunk]) -> None:
        """Write *records* as one logical batch.

        Each record contributes its ``id``, ``vector``, ``text`` and
        ``metadata``.
        """
        ...

    @abstractmethod
    async def query(self, vector: list[float], k: int) -> list[RetrievedDocument]:
        """Return up to *k* documents nearest to *vector*.

        Results are ordered by ascending cosine distance; the distance is
        reported under ``metadata["distance"]``.  An empty index yields
        an empty list.
        """
        ...

    # -- optional overrides ---------------------------------------------------

    async def connect(self) -> None:
        """Open connections.  No-op by default."""

    async def close(self) -> None:
        """Release connections.  No-op by default."""

    async def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        return True
