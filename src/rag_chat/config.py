"""Shared configuration loaded from environment / ``.env`` file."""

from __future__ import annotations

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings

from rag_chat.errors import ConfigurationError

MEMORY_DATABASE_URL = "memory://"


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file.

    Nothing here is instantiated at import time; the application builds one
    ``Settings`` object at startup and hands it to
    :class:`~rag_chat.container.ServiceContainer`.
    """

    # Embedding provider
    embedding_provider: str = Field(
        default="google",
        description="'google' (Gemini API) or 'huggingface' (local sentence-transformers)",
    )
    google_api_key: str = Field(default="", description="Gemini API key")
    embedding_model: str = "models/gemini-embedding-exp-03-07"
    embedding_dimension: int = Field(default=3072, gt=0, description="Expected vector length")
    embedding_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Minimum pause between two provider calls inside one batch",
    )
    embedding_timeout_seconds: float = Field(default=30.0, gt=0.0)

    # LLM
    openai_api_key: str = Field(default="", description="Key for the OpenAI-compatible chat API")
    llm_model_name: str = Field(default="llama3-8b-8192", description="LLM model identifier")
    llm_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description=(
            "Base URL for an OpenAI-compatible chat API. "
            "Leave empty to use OpenAI cloud."
        ),
    )
    llm_temperature: float = 0.0
    generation_timeout_seconds: float = Field(default=60.0, gt=0.0)

    # Vector index
    vector_backend: str = Field(default="chroma", description="'chroma' or 'memory'")
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    vector_collection: str = "testlangchainjs"
    retrieval_timeout_seconds: float = Field(default=15.0, gt=0.0)

    # Transcript + checkpoint database
    database_url: str = Field(
        default="postgresql+asyncpg://postgres:@localhost:5432/langGraphAgent",
        description=f"SQLAlchemy async URL, or {MEMORY_DATABASE_URL!r} for in-process stores",
    )
    database_echo: bool = False

    # Chunking / retrieval
    chunk_size: int = 2000
    chunk_overlap: int = 100
    retrieval_k: int = Field(default=3, gt=0)

    # Conversation
    serialize_threads: bool = Field(
        default=False,
        description="Serialize concurrent invocations of the same thread inside this process",
    )
    fallback_answer: str = "Sorry, something went wrong while processing your request."

    # Serving
    upload_dir: str = "./uploads"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_chunking(self) -> Settings:
        if self.chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.chunk_overlap < 0:
            raise ConfigurationError(f"chunk_overlap must be >= 0, got {self.chunk_overlap}")
        if self.chunk_overlap >= self.chunk_size:
            raise ConfigurationError(
                f"chunk_overlap ({self.chunk_overlap}) must be less than "
                f"chunk_size ({self.chunk_size})"
            )
        return self

    @property
    def uses_memory_database(self) -> bool:
        return self.database_url == MEMORY_DATABASE_URL

    def require_credentials(self, *, embedding: bool = True, llm: bool = True) -> None:
        """Fail fast when a configured provider has no credentials.

        Parameters
        ----------
        embedding / llm:
            Whether the embedding provider / chat model will be built from
            these settings (``False`` when the caller injects its own).

        Raises
        ------
        ConfigurationError
            If a required key is missing or a provider/backend name is unknown.
        """
        if self.vector_backend not in {"chroma", "memory"}:
            raise ConfigurationError(f"Unknown vector_backend: {self.vector_backend!r}")
        if embedding:
            if self.embedding_provider not in {"google", "huggingface"}:
                raise ConfigurationError(f"Unknown embedding_provider: {self.embedding_provider!r}")
            if self.embedding_provider == "google" and not self.google_api_key:
                raise ConfigurationError("GOOGLE_API_KEY is required for the 'google' embedding provider")
        # A custom base URL may point at an unauthenticated OpenAI-compatible server.
        if llm and not self.openai_api_key and not self.llm_base_url:
            raise ConfigurationError("OPENAI_API_KEY is required when LLM_BASE_URL is empty")


def load_settings(**overrides: object) -> Settings:
    """Build validated settings, reporting any problem as :class:`ConfigurationError`."""
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
