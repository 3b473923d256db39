"""Rate-limited embedding client.

The upstream embedding API answers concurrent requests with HTTP 429, so
this client runs every batch as a single-flight sequential queue: one
provider call per text, in order, with a mandatory pause of
``delay_seconds`` between two consecutive calls.  Separate batches (for
example two unrelated chat requests) each keep their own queue and may run
concurrently.

Failure policy is all-or-nothing per batch and there is no retry here;
the caller decides whether to retry the whole batch.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from langchain_core.embeddings import Embeddings

from rag_chat.errors import EmbeddingFailure

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Turn texts into fixed-length vectors through a LangChain provider.

    Parameters
    ----------
    provider:
        Any LangChain :class:`~langchain_core.embeddings.Embeddings`.
    dimension:
        Expected vector length.  A response of any other length fails the
        batch.
    delay_seconds:
        Minimum pause between two provider calls of one batch.
    timeout_seconds:
        Upper bound for a single provider call.
    sleep:
        Awaitable used for the pause; injectable for tests.
    """

    def __init__(
        self,
        provider: Embeddings,
        *,
        dimension: int,
        delay_seconds: float = 1.0,
        timeout_seconds: float = 30.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self.dimension = dimension
        self.delay_seconds = delay_seconds
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts* in order, one provider call per text.

        Returns
        -------
        list[list[float]]
            One vector per input, same order.

        Raises
        ------
        EmbeddingFailure
            On the first failing input; vectors already obtained for the
            batch are discarded.
        """
        vectors: list[list[float]] = []
        for index, text in enumerate(texts):
            if index and self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)
            try:
                raw = await asyncio.wait_for(
                    self._provider.aembed_query(text),
                    timeout=self.timeout_seconds,
                )
                vectors.append(self._validate(raw))
            except Exception as exc:
                logger.warning("Embedding call %d/%d failed: %r", index + 1, len(texts), exc)
                raise EmbeddingFailure(index, exc) from exc
            logger.debug("Embedded text %d/%d (%d chars)", index + 1, len(texts), len(text))
        return vectors

    def _validate(self, raw: Any) -> list[float]:
        if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
            raise ValueError(f"provider returned {type(raw).__name__}, expected a vector")
        if len(raw) != self.dimension:
            raise ValueError(f"provider returned a vector of length {len(raw)}, expected {self.dimension}")
        vector = [float(x) for x in raw]
        if not all(math.isfinite(x) for x in vector):
            raise ValueError("provider returned non-finite vector components")
        return vector
