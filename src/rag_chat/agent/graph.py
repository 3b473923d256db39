"""LangGraph graph definition: the retrieve → generate conversation workflow.

This module wires the nodes defined in :mod:`rag_chat.agent.nodes` into a
compiled :class:`StateGraph` and wraps it in :class:`ConversationGraph`,
which owns the per-thread checkpointing:

1. **Load** the thread's last checkpoint (if any).
2. **Retrieve** the top-k chunks for the question.
3. **Generate** an answer from the fixed prompt.
4. **Checkpoint** ``{question, context, answer}`` under the thread id,
   replacing whatever was stored before.

A failing run writes no checkpoint.  Checkpoints are written by this class
rather than by a LangGraph checkpointer because only the final state of a
*successful* run may be persisted, and only the latest one is kept.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from langgraph.graph import END, StateGraph

from rag_chat.agent.nodes import Node, make_generate_node, make_retrieve_node
from rag_chat.agent.state import GraphState, GraphStatus, create_initial_state
from rag_chat.errors import RagError
from rag_chat.models import ThreadState

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from rag_chat.embedding.client import EmbeddingClient
    from rag_chat.retrieval.base import VectorIndex
    from rag_chat.storage.base import CheckpointStore

logger = logging.getLogger(__name__)


def build_graph(retrieve: Node, generate: Node) -> Any:
    """Construct and return the compiled LangGraph workflow.

    Graph topology::

        [ START ] → retrieve → generate → [ END ]

    Returns
    -------
    CompiledGraph
        A compiled LangGraph workflow ready for ``.ainvoke()``.
    """
    workflow = StateGraph(GraphState)

    workflow.add_node("retrieve", retrieve)
    workflow.add_node("generate", generate)

    workflow.set_entry_point("retrieve")
    workflow.add_edge("retrieve", "generate")
    workflow.add_edge("generate", END)

    return workflow.compile()


class _ThreadLocks:
    """Per-thread ``asyncio.Lock`` registry; entries are dropped when idle."""

    def __init__(self) -> None:
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def hold(self, thread_id: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(thread_id, (asyncio.Lock(), 0))
        self._locks[thread_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[thread_id]
            if users == 1:
                del self._locks[thread_id]
            else:
                self._locks[thread_id] = (lock, users - 1)


class ConversationGraph:
    """Checkpointed retrieve → generate state machine, keyed by thread id.

    Parameters
    ----------
    embedder:
        Client used to embed the question.
    index:
        Vector index queried for context.
    llm:
        Chat model used for the answer.
    checkpoints:
        Store holding the latest :class:`ThreadState` per thread.
    k:
        Number of chunks retrieved per question.
    retrieval_timeout_seconds / generation_timeout_seconds:
        Bounds for the vector query and the model call.
    serialize_threads:
        When ``True``, concurrent invocations of the same thread inside
        this process run one after another.  Otherwise they race and the
        last checkpoint write wins.
    """

    def __init__(
        self,
        *,
        embedder: EmbeddingClient,
        index: VectorIndex,
        llm: BaseChatModel,
        checkpoints: CheckpointStore,
        k: int = 3,
        retrieval_timeout_seconds: float = 15.0,
        generation_timeout_seconds: float = 60.0,
        serialize_threads: bool = False,
    ) -> None:
        self._checkpoints = checkpoints
        self._graph = build_graph(
            make_retrieve_node(embedder, index, k=k, timeout_seconds=retrieval_timeout_seconds),
            make_generate_node(llm, timeout_seconds=generation_timeout_seconds),
        )
        self._locks = _ThreadLocks() if serialize_threads else None

    async def invoke(self, thread_id: str, question: str) -> str:
        """Answer *question* within *thread_id* and checkpoint the run.

        Raises
        ------
        RetrievalFailure, GenerationFailure
            When the run ends in ``FAILED``; no checkpoint is written.
        """
        async with self._guard(thread_id):
            prior = await self._checkpoints.get(thread_id)
            if prior is not None:
                logger.debug("thread=%s resuming from checkpoint %s", thread_id, prior.checkpoint_id)

            state = create_initial_state(
                thread_id,
                question,
                prior.model_dump(mode="json") if prior is not None else None,
            )
            try:
                result = await self._graph.ainvoke(state)
            except RagError as exc:
                logger.warning("thread=%s -> %s: %s", thread_id, GraphStatus.FAILED.value, exc)
                raise

            checkpoint = ThreadState.from_run(question, result["context"], result["answer"])
            await self._checkpoints.put(thread_id, checkpoint)
            logger.info(
                "thread=%s %s, checkpoint=%s, %d context document(s)",
                thread_id,
                result["status"].value,
                checkpoint.checkpoint_id,
                len(result["context"]),
            )
            return result["answer"]

    @asynccontextmanager
    async def _guard(self, thread_id: str) -> AsyncIterator[None]:
        if self._locks is None:
            yield
            return
        async with self._locks.hold(thread_id):
            yield
