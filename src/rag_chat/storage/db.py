"""SQLAlchemy async engine, session factory, and ORM models.

Two tables back the service:

* ``chat_messages``: the append-only transcript.
* ``thread_checkpoints``: one row per thread holding the latest graph
  checkpoint, overwritten on every successful run.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for every ORM model of the service."""


class TimestampMixin:
    """``created_at`` set once on insert, ``updated_at`` refreshed on update (UTC)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )


class ChatMessage(Base, TimestampMixin):
    """One transcript turn.

    Attributes:
        id: Autoincrement key, breaks created_at ties in insertion order
        chat_id: Thread identifier supplied by the caller
        role: ``"user"`` or ``"assistant"``
        content: Turn text
    """

    __tablename__ = "chat_messages"
    __table_args__ = (Index("ix_chat_messages_chat_id_created_at", "chat_id", "created_at"),)

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    chat_id: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)


class ThreadCheckpoint(Base):
    """Latest conversation-graph checkpoint of a thread."""

    __tablename__ = "thread_checkpoints"

    thread_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    checkpoint_id: Mapped[str] = mapped_column(String(64), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def create_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine; ``pool_pre_ping`` drops stale connections early."""
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing tables.  Existing tables are left untouched."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
