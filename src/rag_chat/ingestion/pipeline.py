"""Document ingestion: chunk → embed → one logical upsert.

The pipeline never partially indexes a document.  All chunks of a document
are embedded in a single :meth:`EmbeddingClient.embed_batch` call, which is
all-or-nothing, and only when every vector is available are the records
written in a single :meth:`VectorIndex.upsert` call.

Re-ingesting the same ``source_id`` is not deduplicated; it indexes a
second copy of the chunks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rag_chat.errors import EmbeddingFailure
from rag_chat.models import EmbeddedChunk

if TYPE_CHECKING:
    from rag_chat.embedding.client import EmbeddingClient
    from rag_chat.ingestion.chunker import TextChunker
    from rag_chat.retrieval.base import VectorIndex

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Turn raw document text into indexed, embedded chunks.

    Parameters
    ----------
    chunker:
        Configured :class:`TextChunker`.
    embedder:
        Rate-limited :class:`EmbeddingClient`.
    index:
        Destination :class:`VectorIndex`.
    """

    def __init__(self, chunker: TextChunker, embedder: EmbeddingClient, index: VectorIndex) -> None:
        self._chunker = chunker
        self._embedder = embedder
        self._index = index

    async def ingest(self, document_text: str, source_id: str) -> int:
        """Index *document_text* under *source_id*.

        Returns
        -------
        int
            Number of chunks written (``0`` for an empty document).

        Raises
        ------
        EmbeddingFailure
            When any chunk fails to embed; ``index`` is the chunk's
            ``sequence_index``.  Nothing is written in that case.
        """
        chunks = self._chunker.chunk(document_text, source_id)
        if not chunks:
            logger.info("Nothing to ingest for source=%s (empty text)", source_id)
            return 0

        try:
            vectors = await self._embedder.embed_batch([c.text for c in chunks])
        except EmbeddingFailure as exc:
            logger.warning(
                "Ingestion of source=%s aborted at chunk %d/%d; nothing was indexed",
                source_id,
                exc.index + 1,
                len(chunks),
            )
            raise

        records = [EmbeddedChunk(chunk=c, vector=v) for c, v in zip(chunks, vectors, strict=True)]
        await self._index.upsert(records)

        logger.info(
            "Ingested source=%s: %d chunk(s) into collection=%s",
            source_id,
            len(records),
            self._index.collection_name,
        )
        return len(records)
