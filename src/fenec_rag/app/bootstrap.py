"""Runtime bootstrap helpers for the CLI front-end."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from langchain_core.embeddings import Embeddings

from fenec_rag.config import FenecConfig
from fenec_rag.llm import CompletionClient, LangChainChatAdapter
from fenec_rag.rag import (
    ChromaVectorIndex,
    DocumentIngestionPipeline,
    EmbeddingFactory,
    InMemoryVectorIndex,
    QueryPipeline,
    VectorIndex,
    VectorIndexConfig,
)
from fenec_rag.storage import LocalDirectoryObjectStore, ObjectStore, StorageConfig

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RuntimeComponents:
    """Bundled runtime components shared by the CLI commands."""

    config: FenecConfig
    object_store: ObjectStore
    embeddings: Embeddings
    vector_index: VectorIndex
    ingestion: DocumentIngestionPipeline
    completion: CompletionClient | None = None
    _query: QueryPipeline | None = field(default=None, repr=False)

    @property
    def query(self) -> QueryPipeline:
        """Query pipeline, built together with its completion client on first access."""
        if self._query is None:
            if self.completion is None:
                self.completion = LangChainChatAdapter(self.config.completion_config())
            self._query = QueryPipeline(
                self.embeddings,
                self.vector_index,
                self.completion,
                self.config.query_config(),
            )
        return self._query


def build_object_store(config: StorageConfig) -> ObjectStore:
    if config.provider == "azure-blob":
        from fenec_rag.storage.azure_blob import AzureBlobObjectStore

        return AzureBlobObjectStore.from_config(config)
    return LocalDirectoryObjectStore(config.root)


def build_vector_index(config: VectorIndexConfig) -> VectorIndex:
    if config.provider == "azure-search":
        from fenec_rag.rag.azure_search import AzureSearchVectorIndex

        return AzureSearchVectorIndex.from_config(config)
    if config.provider == "memory":
        LOGGER.warning("Using in-memory vector index; entries are lost when the process exits")
        return InMemoryVectorIndex()
    return ChromaVectorIndex(config)


def build_runtime_components(
    config: FenecConfig,
    *,
    completion: CompletionClient | None = None,
) -> RuntimeComponents:
    object_store = build_object_store(config.storage_config())
    embeddings = EmbeddingFactory(config.embedding_config()).build()
    vector_index = build_vector_index(config.vector_index_config())
    ingestion = DocumentIngestionPipeline(object_store, embeddings, vector_index, config.ingestion_config())
    LOGGER.debug(
        "Runtime ready (storage=%s, embedding=%s, index=%s)",
        config.storage_config().provider,
        config.embedding_config().provider,
        config.vector_index_config().provider,
    )
    return RuntimeComponents(
        config=config,
        object_store=object_store,
        embeddings=embeddings,
        vector_index=vector_index,
        ingestion=ingestion,
        completion=completion,
    )


def load_runtime_from_path(config_path: Path) -> RuntimeComponents:
    """Load configuration and bootstrap all runtime services."""
    return build_runtime_components(FenecConfig.from_file(config_path))
