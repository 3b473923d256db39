"""Chroma implementation of the vector-index abstraction."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import chromadb
from langchain_core.documents import Document

from rag_chat.models import EmbeddedChunk
from rag_chat.retrieval.base import VectorIndex

logger = logging.getLogger(__name__)

# Collection-level distance function; fixed when the collection is created.
_COSINE = {"hnsw:space": "cosine"}


class ChromaVectorIndex(VectorIndex):
    """Chroma-backed vector index using the async HTTP client.

    Vectors are computed by :class:`~rag_chat.embedding.client.EmbeddingClient`
    and handed over ready-made; Chroma never embeds anything itself.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    """

    def __init__(self, collection_name: str, *, host: str = "localhost", port: int = 8000) -> None:
        super().__init__(collection_name)
        self._host = host
        self._port = port
        self._client: Any = None
        self._collection: Any = None

    # -- lifecycle ------------------------------------------------------------

    async def connect(self) -> None:
        self._client = await chromadb.AsyncHttpClient(host=self._host, port=self._port)
        self._collection = await self._client.get_or_create_collection(
            self.collection_name,
            metadata=_COSINE,
        )
        logger.info("Connected to Chroma %s:%s collection=%s", self._host, self._port, self.collection_name)

    async def close(self) -> None:
        self._collection = None
        self._client = None

    # -- VectorIndex overrides ------------------------------------------------

    async def upsert(self, records: Sequence[EmbeddedChunk]) -> None:
        if not records:
            return
        collection = self._require_collection()
        await collection.upsert(
            ids=[r.id for r in records],
            embeddings=[r.vector for r in records],
            documents=[r.text for r in records],
            metadatas=[r.metadata for r in records],
        )

    async def query(self, vector: list[float], k: int) -> list[Document]:
        collection = self._require_collection()
        results = await collection.query(
            query_embeddings=[vector],
            n_results=k,
            include=["documents", "metadatas", "distances"],
        )

        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits: list[Document] = []
        for content, meta, dist in zip(docs, metas, distances):
            hits.append(
                Document(
                    page_content=content or "",
                    metadata={**(meta or {}), "distance": float(dist)},
                )
            )
        return hits

    async def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _require_collection(self) -> Any:
        if self._collection is None:
            raise RuntimeError("ChromaVectorIndex.connect() has not been awaited")
        return self._collection
