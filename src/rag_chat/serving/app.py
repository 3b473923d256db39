"""FastAPI application exposing PDF upload and threaded chat as a REST API."""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from rag_chat.config import load_settings
from rag_chat.container import ServiceContainer
from rag_chat.errors import EmbeddingFailure
from rag_chat.ingestion.loader import load_pdf_text
from rag_chat.logging_setup import configure_logging

logger = logging.getLogger(__name__)


# ── Request / Response schemas ────────────────────────────────────────
class ChatRequest(BaseModel):
    """Incoming question for one conversation thread."""

    chatId: str = ""
    question: str = ""


class ChatResponse(BaseModel):
    """Answer returned for the question."""

    question: str
    answer: str


class TurnResponse(BaseModel):
    role: str
    content: str
    createdAt: datetime


class UploadResponse(BaseModel):
    status: str
    chunks: int


# ── Application factory ───────────────────────────────────────────────
def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Build the FastAPI app.

    When *container* is ``None`` one is built from the environment when
    the application starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        services = container or ServiceContainer(load_settings())
        configure_logging(services.settings.log_level)
        await services.startup()
        app.state.container = services
        try:
            yield
        finally:
            await services.shutdown()

    app = FastAPI(
        title="RAG Chat API",
        version="0.1.0",
        description="Upload PDFs and ask questions about them, one conversation thread at a time.",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health(services: ServiceContainer = Depends(get_container)) -> dict[str, str]:
        """Readiness probe; 503 while the vector index is unreachable."""
        if not await services.index.health_check():
            raise HTTPException(status_code=503, detail="Vector index unavailable")
        return {"status": "ok"}

    @app.post("/pdf/upload", response_model=UploadResponse)
    async def upload_pdf(
        file: UploadFile = File(...),
        services: ServiceContainer = Depends(get_container),
    ) -> UploadResponse:
        """Extract, chunk, embed and index an uploaded PDF; the file is not kept."""
        filename = file.filename or ""
        if not filename.lower().endswith(".pdf"):
            raise HTTPException(status_code=400, detail="A .pdf file is required")

        upload_dir = Path(services.settings.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)
        path = upload_dir / f"{uuid.uuid4().hex}.pdf"
        await run_in_threadpool(path.write_bytes, await file.read())
        try:
            text = await run_in_threadpool(load_pdf_text, path)
            chunks = await services.ingestion.ingest(text, source_id=filename)
        except EmbeddingFailure as exc:
            raise HTTPException(
                status_code=502,
                detail=f"Embedding failed at chunk {exc.index}; nothing was indexed",
            ) from exc
        finally:
            path.unlink(missing_ok=True)

        return UploadResponse(status="success", chunks=chunks)

    @app.post("/chat", response_model=ChatResponse)
    async def chat(
        request: ChatRequest,
        services: ServiceContainer = Depends(get_container),
    ) -> ChatResponse:
        """Answer a question within a conversation thread."""
        try:
            result = await services.chat.chat(request.chatId, request.question)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return ChatResponse(question=result.question, answer=result.answer)

    @app.get("/chat/{chat_id}/history", response_model=list[TurnResponse])
    async def history(
        chat_id: str,
        services: ServiceContainer = Depends(get_container),
    ) -> list[TurnResponse]:
        """Transcript of a thread, oldest turn first."""
        turns = await services.chat.history(chat_id)
        return [TurnResponse(role=t.role, content=t.content, createdAt=t.created_at) for t in turns]

    return app


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


app = create_app()
