"""LLM initialisation: single place to swap providers.

Any OpenAI-compatible chat API works through ``ChatOpenAI``:

1. **Groq** (default): ``LLM_BASE_URL=https://api.groq.com/openai/v1``
   and ``OPENAI_API_KEY`` set to the Groq key.
2. **OpenAI cloud**: leave ``LLM_BASE_URL`` empty.
3. **Self-hosted vLLM / other**: point ``LLM_BASE_URL`` at the server.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from langchain_openai import ChatOpenAI

if TYPE_CHECKING:
    from rag_chat.config import Settings

logger = logging.getLogger(__name__)


def build_chat_model(settings: Settings) -> ChatOpenAI:
    """Return the configured chat model.

    Retries are disabled so that a failing call surfaces immediately as a
    generation failure; the request timeout matches the graph's own bound.
    """
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": settings.llm_temperature,
        "max_retries": 0,
        "timeout": settings.generation_timeout_seconds,
    }

    if settings.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        # Unauthenticated servers still need a non-empty key for the client.
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)
