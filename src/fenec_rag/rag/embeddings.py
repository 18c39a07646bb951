"""Embedding factory and batch helpers for Fenec RAG."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings

from fenec_rag.env import read_secret
from fenec_rag.exceptions import ConfigurationError, EmbeddingError
from fenec_rag.rag.chunking import Chunk

LOGGER = logging.getLogger(__name__)

ProviderLiteral = Literal["azure-openai", "openai", "fake"]
SUPPORTED_EMBEDDING_PROVIDERS: tuple[str, ...] = ("azure-openai", "openai", "fake")


@dataclass(slots=True, frozen=True)
class EmbeddingConfig:
    """Configuration parameters for creating embedding clients."""

    provider: ProviderLiteral = "azure-openai"
    model_name: str = "text-embedding-3-large"
    # Azure specific
    deployment: str | None = None
    endpoint: str | None = None
    api_version: str = "2024-06-01"
    api_key_env: str = "AZURE_OPENAI_API_KEY"
    dimensions: int | None = None
    timeout: float | None = None
    # dimensionality of the offline fake provider
    fake_size: int = 3072


@dataclass(slots=True, frozen=True)
class EmbeddedChunk:
    """A chunk paired with the vector computed for it."""

    chunk: Chunk
    vector: list[float]

    @property
    def text(self) -> str:
        return self.chunk.text


class EmbeddingFactory:
    """Factory wrapper that instantiates embedding clients on demand."""

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self._config = config or EmbeddingConfig()
        self._embedding: Embeddings | None = None

    @property
    def config(self) -> EmbeddingConfig:
        return self._config

    def build(self) -> Embeddings:
        """Instantiate and memoize the embedding client."""
        if self._embedding is None:
            provider = self._config.provider
            if provider == "azure-openai":
                self._embedding = self._build_azure_openai()
            elif provider == "openai":
                self._embedding = self._build_openai()
            elif provider == "fake":
                LOGGER.warning(
                    "Using deterministic fake embeddings (size=%d); results are not semantic",
                    self._config.fake_size,
                )
                self._embedding = DeterministicFakeEmbedding(size=self._config.fake_size)
            else:
                supported = ", ".join(SUPPORTED_EMBEDDING_PROVIDERS)
                message = f"Unsupported embedding provider: {provider}. Supported: {supported}"
                raise ConfigurationError(message)
        return self._embedding

    def _build_azure_openai(self) -> Embeddings:
        from langchain_openai import AzureOpenAIEmbeddings

        if not self._config.endpoint:
            message = "Azure OpenAI embeddings require an 'endpoint'"
            raise ConfigurationError(message, details={"provider": "azure-openai"})
        deployment = self._config.deployment or self._config.model_name
        LOGGER.info(
            "Loading Azure OpenAI embedding deployment '%s' at %s",
            deployment,
            self._config.endpoint,
        )
        options: dict[str, Any] = {
            "azure_deployment": deployment,
            "azure_endpoint": self._config.endpoint,
            "api_version": self._config.api_version,
            "api_key": read_secret(self._config.api_key_env, purpose="Azure OpenAI embeddings"),
            "model": self._config.model_name,
        }
        if self._config.dimensions:
            options["dimensions"] = self._config.dimensions
        if self._config.timeout:
            options["timeout"] = self._config.timeout
        return AzureOpenAIEmbeddings(**options)

    def _build_openai(self) -> Embeddings:
        from langchain_openai import OpenAIEmbeddings

        LOGGER.info("Loading OpenAI embedding model '%s'", self._config.model_name)
        options: dict[str, Any] = {
            "model": self._config.model_name,
            "api_key": read_secret(self._config.api_key_env, purpose="OpenAI embeddings"),
        }
        if self._config.endpoint:
            options["base_url"] = self._config.endpoint
        if self._config.dimensions:
            options["dimensions"] = self._config.dimensions
        if self._config.timeout:
            options["timeout"] = self._config.timeout
        return OpenAIEmbeddings(**options)


def embed_chunks(embeddings: Embeddings, chunks: Sequence[Chunk]) -> list[EmbeddedChunk]:
    """Embed ``chunks`` in one batched call and pair each chunk with its vector.

    The provider must return one vector per input text, in input order, all of the
    same length. Anything else raises :class:`EmbeddingError`.
    """
    if not chunks:
        return []
    source = chunks[0].source
    vectors = embeddings.embed_documents([chunk.text for chunk in chunks])
    if len(vectors) != len(chunks):
        message = f"Embedding provider returned {len(vectors)} vectors for {len(chunks)} texts"
        raise EmbeddingError(message, document_name=source)

    dimensions = {len(vector) for vector in vectors}
    if len(dimensions) > 1:
        message = f"Embedding provider returned vectors of mixed dimensions: {sorted(dimensions)}"
        raise EmbeddingError(message, document_name=source)
    if 0 in dimensions:
        message = "Embedding provider returned an empty vector"
        raise EmbeddingError(message, document_name=source)

    return [
        EmbeddedChunk(chunk=chunk, vector=[float(value) for value in vector])
        for chunk, vector in zip(chunks, vectors)
    ]
