"""
Storage: durable transcript and per-thread checkpoint stores.

SQL-backed implementations live in :mod:`rag_chat.storage.sql` and are
imported lazily by the service container.
"""

from rag_chat.storage.base import CheckpointStore, ConversationStore
from rag_chat.storage.memory import InMemoryCheckpointStore, InMemoryConversationStore

__all__ = [
    "CheckpointStore",
    "ConversationStore",
    "InMemoryCheckpointStore",
    "InMemoryConversationStore",
]
