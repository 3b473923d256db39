"""
Embedding: rate-limited access to the external embedding provider.

Both document ingestion and query-time retrieval go through
:class:`EmbeddingClient`, so the provider's rate limit is respected in one
place.
"""

from rag_chat.embedding.client import EmbeddingClient
from rag_chat.embedding.providers import build_embeddings

__all__ = ["EmbeddingClient", "build_embeddings"]
