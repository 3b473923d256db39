"""Domain models for chunks, per-thread checkpoints, and transcript turns."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal
from uuid import uuid4

from langchain_core.documents import Document
from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]

#: A passage returned by one similarity query.  LangChain's ``Document``
#: already carries exactly ``{page_content, metadata}``.
RetrievedDocument = Document


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Chunk:
    """A bounded slice of one source document.

    Attributes
    ----------
    text:
        The chunk content.
    sequence_index:
        Ordinal position of the chunk within its source.
    source_id:
        Identifier of the document the chunk was cut from.
    """

    text: str
    sequence_index: int
    source_id: str

    @property
    def metadata(self) -> dict[str, Any]:
        return {"source_id": self.source_id, "sequence_index": self.sequence_index}


@dataclass(frozen=True)
class EmbeddedChunk:
    """A :class:`Chunk` together with its vector and a fresh opaque id."""

    chunk: Chunk
    vector: list[float]
    id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def text(self) -> str:
        return self.chunk.text

    @property
    def metadata(self) -> dict[str, Any]:
        return self.chunk.metadata


class ThreadState(BaseModel):
    """Latest completed run of the conversation graph for one thread.

    Attributes
    ----------
    question:
        The question answered by that run.
    context:
        Retrieved passages, as ``{"text", "metadata"}`` dicts, in the order
        the similarity search returned them.
    answer:
        The generated answer.
    checkpoint_id:
        Opaque resumability token, regenerated on every write.
    updated_at:
        UTC timestamp of the write.
    """

    question: str
    context: list[dict[str, Any]] = Field(default_factory=list)
    answer: str
    checkpoint_id: str = Field(default_factory=lambda: uuid4().hex)
    updated_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_run(cls, question: str, documents: list[Document], answer: str) -> ThreadState:
        return cls(
            question=question,
            context=[{"text": d.page_content, "metadata": dict(d.metadata)} for d in documents],
            answer=answer,
        )

    def context_documents(self) -> list[Document]:
        return [Document(page_content=c["text"], metadata=c.get("metadata", {})) for c in self.context]


class ConversationTurn(BaseModel):
    """One append-only transcript entry."""

    thread_id: str
    role: Role
    content: str
    created_at: datetime = Field(default_factory=_utcnow)
