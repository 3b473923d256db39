"""Chat orchestration around the conversation graph.

:meth:`ChatService.chat` is the one place where a failed graph run is
caught.  The answer then degrades to a fixed fallback message, but the
transcript always receives the user turn followed by the assistant turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rag_chat.agent.graph import ConversationGraph
    from rag_chat.models import ConversationTurn
    from rag_chat.storage.base import ConversationStore

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_ANSWER = "Sorry, something went wrong while processing your request."


@dataclass(frozen=True)
class ChatResult:
    question: str
    answer: str
    failed: bool = False


class ChatService:
    """Validate a chat request, run the graph, and record the transcript.

    Parameters
    ----------
    graph:
        The conversation graph.
    conversations:
        Transcript store.
    fallback_answer:
        Assistant reply recorded and returned when the graph fails.
    """

    def __init__(
        self,
        graph: ConversationGraph,
        conversations: ConversationStore,
        *,
        fallback_answer: str = DEFAULT_FALLBACK_ANSWER,
    ) -> None:
        self._graph = graph
        self._conversations = conversations
        self.fallback_answer = fallback_answer

    async def chat(self, thread_id: str, question: str) -> ChatResult:
        """Answer *question* in *thread_id*.

        Raises
        ------
        ValueError
            If either argument is empty.  Nothing is recorded in that case.
        """
        if not thread_id or not thread_id.strip() or not question or not question.strip():
            raise ValueError("chatId and question are required")

        logger.info("Incoming chat thread=%s (%d chars)", thread_id, len(question))
        failed = False
        try:
            answer = await self._graph.invoke(thread_id, question)
        except Exception:
            logger.exception("Conversation graph failed for thread=%s; using fallback answer", thread_id)
            answer = self.fallback_answer
            failed = True

        await self._conversations.append(thread_id, "user", question)
        await self._conversations.append(thread_id, "assistant", answer)

        logger.info("Outgoing answer thread=%s (%d chars, failed=%s)", thread_id, len(answer), failed)
        return ChatResult(question=question, answer=answer, failed=failed)

    async def history(self, thread_id: str) -> list[ConversationTurn]:
        return await self._conversations.list_turns(thread_id)
