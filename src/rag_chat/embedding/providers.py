"""Embedding provider factory: single place to swap providers.

Supports two modes:

1. **Gemini API** (default): set ``GOOGLE_API_KEY``.  This is the rate
   limited provider :class:`~rag_chat.embedding.client.EmbeddingClient`
   paces its calls for.
2. **Local sentence-transformers**: set ``EMBEDDING_PROVIDER=huggingface``
   and ``EMBEDDING_MODEL`` / ``EMBEDDING_DIMENSION`` accordingly (requires
   the ``huggingface`` extra).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rag_chat.errors import ConfigurationError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from rag_chat.config import Settings

logger = logging.getLogger(__name__)


def build_embeddings(settings: Settings) -> Embeddings:
    """Return the configured LangChain embedding provider."""
    if settings.embedding_provider == "google":
        from langchain_google_genai import GoogleGenerativeAIEmbeddings

        logger.info("Using Gemini embeddings: %s", settings.embedding_model)
        return GoogleGenerativeAIEmbeddings(
            model=settings.embedding_model,
            google_api_key=settings.google_api_key,
        )
    if settings.embedding_provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        logger.info("Using local sentence-transformers embeddings: %s", settings.embedding_model)
        return HuggingFaceEmbeddings(model_name=settings.embedding_model)
    raise ConfigurationError(f"Unknown embedding_provider: {settings.embedding_provider!r}")
