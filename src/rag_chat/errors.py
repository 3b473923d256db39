"""Exception taxonomy shared by the ingestion and conversation layers.

Every failure raised by the core derives from :class:`RagError` so that the
chat orchestrator can catch one type at its single fallback point.
"""

from __future__ import annotations


class RagError(Exception):
    """Base class for all errors raised by the RAG core."""


class ConfigurationError(RagError):
    """Invalid or missing configuration.  Raised at startup, never per request."""


class EmbeddingFailure(RagError):
    """An embedding provider call failed inside a batch.

    Attributes
    ----------
    index:
        Position of the offending text in the batch passed to
        :meth:`~rag_chat.embedding.client.EmbeddingClient.embed_batch`.
    cause:
        The underlying exception (network error, timeout, malformed or
        wrongly sized vector, …).
    """

    def __init__(self, index: int, cause: BaseException) -> None:
        self.index = index
        self.cause = cause
        super().__init__(f"embedding failed for input #{index}: {cause!r}")


class RetrievalFailure(RagError):
    """Query-time embedding or vector-index lookup failed."""


class GenerationFailure(RagError):
    """The language-model call failed or returned no usable text."""
