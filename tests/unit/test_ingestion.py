"""Unit tests for the ingestion pipeline and PDF loader."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from langchain_core.documents import Document

from rag_chat.embedding.client import EmbeddingClient
from rag_chat.errors import EmbeddingFailure
from rag_chat.ingestion.chunker import TextChunker
from rag_chat.ingestion.loader import load_pdf_text
from rag_chat.ingestion.pipeline import IngestionPipeline

DOCUMENT = "word " * 1000  # 5,000 characters
# Unique words, so every chunk is a distinct string.
NUMBERED_DOCUMENT = " ".join(f"w{i:04d}" for i in range(1000))


@pytest.fixture()
def pipeline(embedding_client, memory_index) -> IngestionPipeline:
    return IngestionPipeline(TextChunker(2000, 100), embedding_client, memory_index)


class TestIngest:
    @pytest.mark.asyncio
    async def test_five_thousand_chars_write_three_records(
        self, pipeline, fake_embeddings, memory_index
    ) -> None:
        count = await pipeline.ingest(DOCUMENT, "report.pdf")

        assert count == 3
        assert len(fake_embeddings.calls) == 3
        assert memory_index.upsert_calls == 1
        assert len(memory_index) == 3

    @pytest.mark.asyncio
    async def test_records_carry_source_and_sequence(self, pipeline, memory_index) -> None:
        await pipeline.ingest(DOCUMENT, "report.pdf")

        records = list(memory_index._records.values())
        assert sorted(r.metadata["sequence_index"] for r in records) == [0, 1, 2]
        assert {r.metadata["source_id"] for r in records} == {"report.pdf"}
        assert len({r.id for r in records}) == 3
        assert all(len(r.vector) == 8 for r in records)

    @pytest.mark.asyncio
    async def test_embedding_failure_writes_nothing(
        self, embeddings_factory, memory_index, recording_sleep
    ) -> None:
        chunker = TextChunker(2000, 100)
        chunks = chunker.split(NUMBERED_DOCUMENT)
        assert len(set(chunks)) == len(chunks) >= 3
        second_chunk = chunks[1]
        provider = embeddings_factory(fail_on={second_chunk})
        client = EmbeddingClient(provider, dimension=8, sleep=recording_sleep)
        pipeline = IngestionPipeline(chunker, client, memory_index)

        with pytest.raises(EmbeddingFailure) as info:
            await pipeline.ingest(NUMBERED_DOCUMENT, "report.pdf")

        assert info.value.index == 1
        assert provider.calls == chunks[:2]
        assert memory_index.upsert_calls == 0
        assert len(memory_index) == 0

    @pytest.mark.asyncio
    async def test_empty_document(self, pipeline, fake_embeddings, memory_index) -> None:
        assert await pipeline.ingest("", "empty.pdf") == 0
        assert fake_embeddings.calls == []
        assert memory_index.upsert_calls == 0

    @pytest.mark.asyncio
    async def test_reingestion_is_not_deduplicated(self, pipeline, memory_index) -> None:
        await pipeline.ingest(DOCUMENT, "report.pdf")
        await pipeline.ingest(DOCUMENT, "report.pdf")
        assert len(memory_index) == 6

    @pytest.mark.asyncio
    async def test_ingested_chunks_are_retrievable(self, pipeline, embedding_client, memory_index) -> None:
        await pipeline.ingest("Kubeflow pipelines orchestrate workflows.", "kubeflow.pdf")
        await pipeline.ingest("Zebra quartz jukebox.", "zebra.pdf")
        [vector] = await embedding_client.embed_batch(["Zebra quartz jukebox."])
        hits = await memory_index.query(vector, 2)
        assert [h.metadata["source_id"] for h in hits] == ["zebra.pdf", "kubeflow.pdf"]
        assert hits[0].metadata["distance"] == pytest.approx(0.0)


class TestLoader:
    def test_load_pdf_text_joins_pages(self) -> None:
        loader = MagicMock()
        loader.load.return_value = [
            Document(page_content="Page one.", metadata={"page": 0}),
            Document(page_content="Page two.", metadata={"page": 1}),
        ]
        with patch("rag_chat.ingestion.loader.PyPDFLoader", return_value=loader) as cls:
            text = load_pdf_text("/tmp/doc.pdf")

        cls.assert_called_once_with("/tmp/doc.pdf")
        assert text == "Page one.\nPage two."
