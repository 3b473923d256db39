"""Service container: explicit construction and lifecycle of long-lived clients.

The embedding provider, chat model, vector index and database engine are
built once in :meth:`ServiceContainer.startup` and released in
:meth:`ServiceContainer.shutdown`.  The FastAPI lifespan drives both; tests
inject fakes through the constructor instead of patching globals.

Usage::

    container = ServiceContainer(load_settings())
    await container.startup()
    count = await container.ingestion.ingest(text, "report.pdf")
    result = await container.chat.chat("thread-1", "What is X?")
    await container.shutdown()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rag_chat.agent.graph import ConversationGraph
from rag_chat.embedding.client import EmbeddingClient
from rag_chat.ingestion.chunker import TextChunker
from rag_chat.ingestion.pipeline import IngestionPipeline
from rag_chat.retrieval.memory_store import InMemoryVectorIndex
from rag_chat.serving.chat import ChatService
from rag_chat.storage.memory import InMemoryCheckpointStore, InMemoryConversationStore

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings
    from langchain_core.language_models import BaseChatModel
    from sqlalchemy.ext.asyncio import AsyncEngine

    from rag_chat.config import Settings
    from rag_chat.retrieval.base import VectorIndex
    from rag_chat.storage.base import CheckpointStore, ConversationStore

logger = logging.getLogger(__name__)


def build_index(settings: Settings) -> VectorIndex:
    if settings.vector_backend == "memory":
        return InMemoryVectorIndex(settings.vector_collection)
    from rag_chat.retrieval.chroma_store import ChromaVectorIndex

    return ChromaVectorIndex(
        settings.vector_collection,
        host=settings.chroma_host,
        port=settings.chroma_port,
    )


class ServiceContainer:
    """Owns every long-lived collaborator of the service.

    Parameters
    ----------
    settings:
        Validated application settings.
    embeddings, llm, index, conversations, checkpoints:
        Optional pre-built collaborators; anything left ``None`` is built
        from *settings* during :meth:`startup`.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        embeddings: Embeddings | None = None,
        llm: BaseChatModel | None = None,
        index: VectorIndex | None = None,
        conversations: ConversationStore | None = None,
        checkpoints: CheckpointStore | None = None,
    ) -> None:
        self.settings = settings
        self._embeddings = embeddings
        self._llm = llm
        self._index = index
        self._conversations = conversations
        self._checkpoints = checkpoints
        self._engine: AsyncEngine | None = None
        self._started = False

    # -- lifecycle ------------------------------------------------------------

    async def startup(self) -> None:
        if self._started:
            return
        settings = self.settings
        settings.require_credentials(embedding=self._embeddings is None, llm=self._llm is None)

        chunker = TextChunker(settings.chunk_size, settings.chunk_overlap)

        if self._embeddings is None:
            from rag_chat.embedding.providers import build_embeddings

            self._embeddings = build_embeddings(settings)
        self.embedder = EmbeddingClient(
            self._embeddings,
            dimension=settings.embedding_dimension,
            delay_seconds=settings.embedding_delay_seconds,
            timeout_seconds=settings.embedding_timeout_seconds,
        )

        if self._index is None:
            self._index = build_index(settings)
        await self._index.connect()
        self.index = self._index

        await self._open_stores()

        if self._llm is None:
            from rag_chat.agent.llm import build_chat_model

            self._llm = build_chat_model(settings)

        self.graph = ConversationGraph(
            embedder=self.embedder,
            index=self.index,
            llm=self._llm,
            checkpoints=self.checkpoints,
            k=settings.retrieval_k,
            retrieval_timeout_seconds=settings.retrieval_timeout_seconds,
            generation_timeout_seconds=settings.generation_timeout_seconds,
            serialize_threads=settings.serialize_threads,
        )
        self.ingestion = IngestionPipeline(chunker, self.embedder, self.index)
        self.chat = ChatService(self.graph, self.conversations, fallback_answer=settings.fallback_answer)

        self._started = True
        logger.info(
            "Services started: vector_backend=%s collection=%s database=%s",
            settings.vector_backend,
            settings.vector_collection,
            "memory" if settings.uses_memory_database else "sql",
        )

    async def shutdown(self) -> None:
        if not self._started:
            return
        await self.index.close()
        await self.conversations.close()
        await self.checkpoints.close()
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
        self._started = False
        logger.info("Services stopped")

    # -- internals ------------------------------------------------------------

    async def _open_stores(self) -> None:
        if self._conversations is None or self._checkpoints is None:
            if self.settings.uses_memory_database:
                self._conversations = self._conversations or InMemoryConversationStore()
                self._checkpoints = self._checkpoints or InMemoryCheckpointStore()
            else:
                from rag_chat.storage.db import create_engine, create_session_factory, create_tables
                from rag_chat.storage.sql import SqlCheckpointStore, SqlConversationStore

                self._engine = create_engine(self.settings.database_url, echo=self.settings.database_echo)
                await create_tables(self._engine)
                sessions = create_session_factory(self._engine)
                self._conversations = self._conversations or SqlConversationStore(sessions)
                self._checkpoints = self._checkpoints or SqlCheckpointStore(sessions)
        self.conversations = self._conversations
        self.checkpoints = self._checkpoints
