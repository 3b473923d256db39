"""Text chunking strategies."""

from __future__ import annotations

from langchain_text_splitters import RecursiveCharacterTextSplitter

from rag_chat.errors import ConfigurationError
from rag_chat.models import Chunk

# Paragraph, line, sentence, word, then a hard character cut.
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


class TextChunker:
    """Deterministic recursive splitter with overlapping chunks.

    Parameters
    ----------
    max_chunk_size:
        Maximum number of characters per chunk.
    overlap:
        Number of characters shared between consecutive chunks.  Must be
        strictly smaller than *max_chunk_size*; checked here so that a bad
        configuration fails when the service is wired, not per request.
    """

    def __init__(self, max_chunk_size: int = 2000, overlap: int = 100) -> None:
        if max_chunk_size <= 0:
            raise ConfigurationError(f"max_chunk_size must be positive, got {max_chunk_size}")
        if overlap < 0 or overlap >= max_chunk_size:
            raise ConfigurationError(
                f"overlap ({overlap}) must be in [0, max_chunk_size={max_chunk_size})"
            )
        self.max_chunk_size = max_chunk_size
        self.overlap = overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=max_chunk_size,
            chunk_overlap=overlap,
            length_function=len,
            separators=SEPARATORS,
        )

    def split(self, text: str) -> list[str]:
        """Split *text* into chunks; empty or blank input yields ``[]``."""
        if not text or not text.strip():
            return []
        return self._splitter.split_text(text)

    def chunk(self, text: str, source_id: str) -> list[Chunk]:
        """Split *text* and tag each piece with its position and source."""
        return [
            Chunk(text=piece, sequence_index=i, source_id=source_id)
            for i, piece in enumerate(self.split(text))
        ]


def split_text(text: str, max_chunk_size: int, overlap: int) -> list[str]:
    """One-shot helper around :class:`TextChunker`."""
    return TextChunker(max_chunk_size, overlap).split(text)
