"""Graph nodes: each factory returns one step of the retrieve → generate workflow.

Node contract
-------------
* Accepts the full :class:`GraphState` dict.
* Returns a *partial* dict with **only the keys that changed**.
* Raises a typed :class:`~rag_chat.errors.RagError` on failure; the run
  then ends in ``FAILED`` and the error reaches the caller of
  :meth:`ConversationGraph.invoke`.

Collaborators (embedding client, vector index, chat model) are bound when
the nodes are built, so every node is testable with fakes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from rag_chat.agent.prompts import build_rag_prompt
from rag_chat.agent.response import extract_text, parse_content
from rag_chat.agent.state import GraphState, GraphStatus
from rag_chat.errors import GenerationFailure, RetrievalFailure

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from rag_chat.embedding.client import EmbeddingClient
    from rag_chat.retrieval.base import VectorIndex

logger = logging.getLogger(__name__)

Node = Callable[[GraphState], Awaitable[dict[str, Any]]]


# ── 1. RETRIEVE ───────────────────────────────────────────────────────


def make_retrieve_node(
    embedder: EmbeddingClient,
    index: VectorIndex,
    *,
    k: int = 3,
    timeout_seconds: float = 15.0,
) -> Node:
    """Build the ``retrieve`` node.

    Embeds the question as a batch of one, then asks the index for the
    *k* nearest chunks.  Any failure on the way, embedding errors included,
    is raised as :class:`RetrievalFailure`.  Zero matches is not a failure.
    """

    async def retrieve(state: GraphState) -> dict[str, Any]:
        thread_id = state["thread_id"]
        logger.debug("thread=%s %s -> %s", thread_id, GraphStatus.START.value, GraphStatus.RETRIEVING.value)
        try:
            [vector] = await embedder.embed_batch([state["question"]])
            documents = await asyncio.wait_for(index.query(vector, k), timeout=timeout_seconds)
        except Exception as exc:
            logger.warning("thread=%s retrieval failed: %r", thread_id, exc)
            raise RetrievalFailure(f"retrieval failed: {exc!r}") from exc

        logger.debug(
            "thread=%s retrieved %d document(s); %s -> %s",
            thread_id,
            len(documents),
            GraphStatus.RETRIEVING.value,
            GraphStatus.GENERATING.value,
        )
        return {"context": documents, "status": GraphStatus.GENERATING}

    return retrieve


# ── 2. GENERATE ───────────────────────────────────────────────────────


def make_generate_node(llm: BaseChatModel, *, timeout_seconds: float = 60.0) -> Node:
    """Build the ``generate`` node.

    Fills the fixed RAG prompt with the question and the retrieved texts,
    calls the model once, and keeps only the textual part of its reply.
    """

    async def generate(state: GraphState) -> dict[str, Any]:
        thread_id = state["thread_id"]
        messages = build_rag_prompt(state["question"], state.get("context", []))
        try:
            response = await asyncio.wait_for(llm.ainvoke(messages), timeout=timeout_seconds)
        except Exception as exc:
            logger.warning("thread=%s generation failed: %r", thread_id, exc)
            raise GenerationFailure(f"language model call failed: {exc!r}") from exc

        answer = extract_text(parse_content(response.content))
        if not answer.strip():
            raise GenerationFailure("language model returned no text")

        logger.debug(
            "thread=%s answer of %d chars; %s -> %s",
            thread_id,
            len(answer),
            GraphStatus.GENERATING.value,
            GraphStatus.DONE.value,
        )
        return {"answer": answer, "status": GraphStatus.DONE}

    return generate
