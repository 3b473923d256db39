"""Abstract transcript and checkpoint stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rag_chat.models import ConversationTurn, Role, ThreadState


class ConversationStore(ABC):
    """Append-only transcript of user/assistant turns, keyed by thread id."""

    @abstractmethod
    async def append(self, thread_id: str, role: Role, content: str) -> ConversationTurn:
        """Persist one turn and return it."""
        ...

    @abstractmethod
    async def list_turns(self, thread_id: str) -> list[ConversationTurn]:
        """Return every turn of *thread_id*, oldest first."""
        ...

    async def close(self) -> None:
        """Release resources.  No-op by default."""


class CheckpointStore(ABC):
    """Latest :class:`ThreadState` per thread.  Writes overwrite; no history."""

    @abstractmethod
    async def get(self, thread_id: str) -> ThreadState | None:
        ...

    @abstractmethod
    async def put(self, thread_id: str, state: ThreadState) -> None:
        ...

    async def close(self) -> None:
        """Release resources.  No-op by default."""
