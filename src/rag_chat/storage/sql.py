"""SQLAlchemy-backed transcript and checkpoint stores."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import async_sessionmaker

from rag_chat.errors import ConfigurationError
from rag_chat.models import ConversationTurn, Role, ThreadState
from rag_chat.storage.base import CheckpointStore, ConversationStore
from rag_chat.storage.db import ChatMessage, ThreadCheckpoint

logger = logging.getLogger(__name__)

# Dialects offering INSERT ... ON CONFLICT DO UPDATE.
_UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; values were written in UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SqlConversationStore(ConversationStore):
    """Transcript stored in ``chat_messages``.  Each append is its own transaction."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._sessions = session_factory

    async def append(self, thread_id: str, role: Role, content: str) -> ConversationTurn:
        async with self._sessions() as session, session.begin():
            row = ChatMessage(chat_id=thread_id, role=role, content=content)
            session.add(row)
        return ConversationTurn(
            thread_id=thread_id,
            role=role,
            content=content,
            created_at=_aware(row.created_at),
        )

    async def list_turns(self, thread_id: str) -> list[ConversationTurn]:
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.chat_id == thread_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        )
        async with self._sessions() as session:
            rows = (await session.scalars(stmt)).all()
        return [
            ConversationTurn(
                thread_id=row.chat_id,
                role=row.role,  # type: ignore[arg-type]
                content=row.content,
                created_at=_aware(row.created_at),
            )
            for row in rows
        ]


class SqlCheckpointStore(CheckpointStore):
    """One ``thread_checkpoints`` row per thread, replaced on every put."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._sessions = session_factory

    async def get(self, thread_id: str) -> ThreadState | None:
        async with self._sessions() as session:
            row = await session.get(ThreadCheckpoint, thread_id)
        if row is None:
            return None
        return ThreadState(
            question=row.question,
            context=row.context,
            answer=row.answer,
            checkpoint_id=row.checkpoint_id,
            updated_at=_aware(row.updated_at),
        )

    async def put(self, thread_id: str, state: ThreadState) -> None:
        """Insert or replace the thread's row in one atomic statement.

        Concurrent first writes for the same thread both succeed; the last
        one to commit is kept.

        Raises
        ------
        ConfigurationError
            If the database dialect has no ``ON CONFLICT`` upsert.
        """
        values = {
            "thread_id": thread_id,
            "checkpoint_id": state.checkpoint_id,
            "question": state.question,
            "context": state.context,
            "answer": state.answer,
            "updated_at": state.updated_at,
        }
        async with self._sessions() as session, session.begin():
            dialect = session.get_bind().dialect.name
            insert = _UPSERT_INSERTS.get(dialect)
            if insert is None:
                raise ConfigurationError(f"checkpoint upsert is not supported on {dialect!r}")
            stmt = insert(ThreadCheckpoint).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[ThreadCheckpoint.thread_id],
                set_={name: stmt.excluded[name] for name in values if name != "thread_id"},
            )
            await session.execute(stmt)
        logger.debug("Checkpoint %s written for thread=%s", state.checkpoint_id, thread_id)
