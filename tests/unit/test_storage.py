"""Unit tests for the transcript and checkpoint stores.

The SQL stores run against an on-disk SQLite file through ``aiosqlite``;
the schema is the same one created on PostgreSQL.
"""

from __future__ import annotations

import asyncio
from datetime import timezone

import pytest
import pytest_asyncio

from rag_chat.models import ThreadState
from rag_chat.storage.memory import InMemoryCheckpointStore, InMemoryConversationStore


# ── In-memory stores ───────────────────────────────────────────────────


class TestInMemoryConversationStore:
    @pytest.mark.asyncio
    async def test_append_and_list_in_order(self) -> None:
        store = InMemoryConversationStore()
        await store.append("t-1", "user", "Hi")
        await store.append("t-1", "assistant", "Hello")
        await store.append("t-2", "user", "Other thread")

        turns = await store.list_turns("t-1")
        assert [(t.role, t.content) for t in turns] == [("user", "Hi"), ("assistant", "Hello")]
        assert all(t.thread_id == "t-1" for t in turns)

    @pytest.mark.asyncio
    async def test_unknown_thread(self) -> None:
        assert await InMemoryConversationStore().list_turns("missing") == []


class TestInMemoryCheckpointStore:
    @pytest.mark.asyncio
    async def test_put_overwrites(self) -> None:
        store = InMemoryCheckpointStore()
        await store.put("t-1", ThreadState(question="a", answer="1"))
        await store.put("t-1", ThreadState(question="b", answer="2"))
        assert (await store.get("t-1")).question == "b"

    @pytest.mark.asyncio
    async def test_missing_thread(self) -> None:
        assert await InMemoryCheckpointStore().get("missing") is None


# ── SQL stores ─────────────────────────────────────────────────────────


@pytest_asyncio.fixture()
async def session_factory(tmp_path):
    pytest.importorskip("aiosqlite")
    from rag_chat.storage.db import create_engine, create_session_factory, create_tables

    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}")
    await create_tables(engine)
    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


class TestSqlConversationStore:
    @pytest.mark.asyncio
    async def test_append_and_list(self, session_factory) -> None:
        from rag_chat.storage.sql import SqlConversationStore

        store = SqlConversationStore(session_factory)
        turn = await store.append("t-1", "user", "What is Kubeflow?")
        await store.append("t-1", "assistant", "An ML platform.")
        await store.append("t-2", "user", "Unrelated")

        assert turn.created_at.tzinfo is not None
        turns = await store.list_turns("t-1")
        assert [(t.role, t.content) for t in turns] == [
            ("user", "What is Kubeflow?"),
            ("assistant", "An ML platform."),
        ]
        assert turns[0].created_at <= turns[1].created_at

    @pytest.mark.asyncio
    async def test_many_turns_keep_insertion_order(self, session_factory) -> None:
        from rag_chat.storage.sql import SqlConversationStore

        store = SqlConversationStore(session_factory)
        for i in range(10):
            await store.append("t-1", "user" if i % 2 == 0 else "assistant", f"turn {i}")

        assert [t.content for t in await store.list_turns("t-1")] == [f"turn {i}" for i in range(10)]


class TestSqlCheckpointStore:
    @pytest.mark.asyncio
    async def test_round_trip(self, session_factory) -> None:
        from rag_chat.storage.sql import SqlCheckpointStore

        store = SqlCheckpointStore(session_factory)
        state = ThreadState(
            question="What is Kubeflow?",
            context=[{"text": "Kubeflow docs", "metadata": {"source_id": "a.pdf", "distance": 0.1}}],
            answer="An ML platform.",
        )
        await store.put("t-1", state)

        loaded = await store.get("t-1")
        assert loaded.question == state.question
        assert loaded.context == state.context
        assert loaded.checkpoint_id == state.checkpoint_id
        assert loaded.updated_at.tzinfo == timezone.utc

    @pytest.mark.asyncio
    async def test_put_replaces_row(self, session_factory) -> None:
        from sqlalchemy import func, select

        from rag_chat.storage.db import ThreadCheckpoint
        from rag_chat.storage.sql import SqlCheckpointStore

        store = SqlCheckpointStore(session_factory)
        await store.put("t-1", ThreadState(question="first", answer="1"))
        await store.put("t-1", ThreadState(question="second", answer="2"))

        assert (await store.get("t-1")).question == "second"
        async with session_factory() as session:
            assert await session.scalar(select(func.count()).select_from(ThreadCheckpoint)) == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_writes_both_succeed(self, session_factory) -> None:
        from sqlalchemy import func, select

        from rag_chat.storage.db import ThreadCheckpoint
        from rag_chat.storage.sql import SqlCheckpointStore

        store = SqlCheckpointStore(session_factory)
        first = ThreadState(question="A?", answer="a")
        second = ThreadState(question="B?", answer="b")

        results = await asyncio.gather(
            store.put("t-1", first),
            store.put("t-1", second),
            return_exceptions=True,
        )

        assert results == [None, None]
        saved = await store.get("t-1")
        assert saved.checkpoint_id in {first.checkpoint_id, second.checkpoint_id}
        async with session_factory() as session:
            assert await session.scalar(select(func.count()).select_from(ThreadCheckpoint)) == 1

    @pytest.mark.asyncio
    async def test_missing_thread(self, session_factory) -> None:
        from rag_chat.storage.sql import SqlCheckpointStore

        assert await SqlCheckpointStore(session_factory).get("missing") is None
