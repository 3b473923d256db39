"""Graph state definition: shared by the retrieve and generate nodes."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypedDict

from langchain_core.documents import Document


class GraphStatus(str, Enum):
    """Lifecycle of one conversation-graph run.

    ``START → RETRIEVING → GENERATING → DONE``; ``FAILED`` is reachable from
    ``RETRIEVING`` and ``GENERATING``.
    """

    START = "start"
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


class GraphState(TypedDict):
    """Typed state that flows through the conversation graph.

    Attributes
    ----------
    thread_id:
        Conversation the run belongs to.
    question:
        The user's current question.
    previous:
        The thread's last checkpoint as a plain dict, or ``None`` for a new
        thread.  Carried for continuity; prompt construction ignores it.
    context:
        Retrieved documents, in similarity-search order.
    answer:
        Generated answer (populated by the ``generate`` node).
    status:
        Current :class:`GraphStatus`.
    """

    thread_id: str
    question: str
    previous: dict[str, Any] | None
    context: list[Document]
    answer: str
    status: GraphStatus


def create_initial_state(
    thread_id: str,
    question: str,
    previous: dict[str, Any] | None = None,
) -> GraphState:
    """Build the input state for ``graph.ainvoke()``."""
    return {
        "thread_id": thread_id,
        "question": question,
        "previous": previous,
        "context": [],
        "answer": "",
        "status": GraphStatus.START,
    }
