"""In-process stores for development and tests."""

from __future__ import annotations

from collections import defaultdict

from rag_chat.models import ConversationTurn, Role, ThreadState
from rag_chat.storage.base import CheckpointStore, ConversationStore


class InMemoryConversationStore(ConversationStore):
    def __init__(self) -> None:
        self._turns: dict[str, list[ConversationTurn]] = defaultdict(list)

    async def append(self, thread_id: str, role: Role, content: str) -> ConversationTurn:
        turn = ConversationTurn(thread_id=thread_id, role=role, content=content)
        self._turns[thread_id].append(turn)
        return turn

    async def list_turns(self, thread_id: str) -> list[ConversationTurn]:
        # Appends arrive in creation order already.
        return list(self._turns.get(thread_id, []))


class InMemoryCheckpointStore(CheckpointStore):
    def __init__(self) -> None:
        self._states: dict[str, ThreadState] = {}

    async def get(self, thread_id: str) -> ThreadState | None:
        return self._states.get(thread_id)

    async def put(self, thread_id: str, state: ThreadState) -> None:
        self._states[thread_id] = state
