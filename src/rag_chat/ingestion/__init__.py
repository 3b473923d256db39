"""
Ingestion: chunking, embedding, and indexing of uploaded documents.

This module converts extracted document text into embedded chunks stored
in the shared vector index.
"""

from rag_chat.ingestion.chunker import TextChunker, split_text
from rag_chat.ingestion.pipeline import IngestionPipeline

__all__ = ["IngestionPipeline", "TextChunker", "split_text"]
