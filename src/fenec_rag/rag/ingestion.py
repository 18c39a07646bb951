"""Document ingestion pipeline for Fenec RAG.

Reads every eligible document from the object store, chunks it, embeds all chunks of
a document in one batched call and upserts the resulting entries in one call per
document. Runs are fail-fast: the first failing document aborts the run with an
:class:`~fenec_rag.exceptions.IngestionError`, and documents committed before it stay
indexed. Runs are not idempotent; every run writes entries with fresh identifiers.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from langchain_core.embeddings import Embeddings

from fenec_rag.exceptions import EmptyDocumentSetError, FenecRAGError, IngestionError, ValidationError
from fenec_rag.rag.chunking import ChunkingConfig, ParagraphChunker
from fenec_rag.rag.embeddings import embed_chunks
from fenec_rag.rag.vector_store import DEFAULT_CATEGORY, IndexedEntry, VectorIndex
from fenec_rag.storage.object_store import ObjectStore

LOGGER = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".txt",)


@dataclass(slots=True, frozen=True)
class IngestionConfig:
    """Configuration settings for the document ingestion pipeline."""

    max_chunk_size: int = 500
    extensions: Sequence[str] = DEFAULT_EXTENSIONS
    category: str = DEFAULT_CATEGORY


@dataclass(slots=True)
class DocumentIngestion:
    """What a single document contributed to the index."""

    name: str
    chunk_count: int
    entry_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class IngestionResult:
    """Summary returned after a completed ingestion run."""

    documents: list[DocumentIngestion] = field(default_factory=list)

    @property
    def chunk_count(self) -> int:
        return sum(document.chunk_count for document in self.documents)


class DocumentIngestionPipeline:
    """Materializes the object store's documents into the vector index."""

    def __init__(
        self,
        object_store: ObjectStore,
        embeddings: Embeddings,
        vector_index: VectorIndex,
        config: IngestionConfig | None = None,
    ) -> None:
        self._object_store = object_store
        self._embeddings = embeddings
        self._vector_index = vector_index
        self._config = config or IngestionConfig()
        self._extensions = frozenset(extension.lower() for extension in self._config.extensions)
        self._chunker = ParagraphChunker(ChunkingConfig(max_chunk_size=self._config.max_chunk_size))
        LOGGER.debug(
            "Initialized DocumentIngestionPipeline(max_chunk_size=%s, extensions=%s)",
            self._config.max_chunk_size,
            sorted(self._extensions),
        )

    @property
    def config(self) -> IngestionConfig:
        """Return the configuration currently in use."""
        return self._config

    def is_supported(self, name: str) -> bool:
        return PurePosixPath(name).suffix.lower() in self._extensions

    def discover(self) -> list[str]:
        """List eligible document names in enumeration order."""
        names = [name for name in self._object_store.list_names() if self.is_supported(name)]
        LOGGER.debug("Discovered %d eligible document(s)", len(names))
        return names

    def ingest(self) -> IngestionResult:
        """Ingest every eligible document in the object store."""
        names = self.discover()
        if not names:
            allowed = ", ".join(sorted(self._extensions))
            message = f"No documents with a supported extension ({allowed}) were found"
            raise EmptyDocumentSetError(message, field="documents")

        result = IngestionResult()
        for name in names:
            try:
                result.documents.append(self._ingest_one(name))
            except Exception as exc:
                reason = exc.message if isinstance(exc, FenecRAGError) else str(exc)
                raise IngestionError(
                    f"Ingestion aborted at '{name}': {reason}",
                    document_name=name,
                    committed=result.documents,
                ) from exc

        LOGGER.info("Indexed %d chunk(s) from %d document(s)", result.chunk_count, len(result.documents))
        return result

    def ingest_document(self, name: str) -> DocumentIngestion:
        """Ingest a single named document regardless of its position in the container."""
        if not self.is_supported(name):
            allowed = ", ".join(sorted(self._extensions))
            message = f"Unsupported document extension for '{name}'. Supported extensions: {allowed}"
            raise ValidationError(message, field="name")
        try:
            return self._ingest_one(name)
        except Exception as exc:
            raise IngestionError(f"Ingestion failed for '{name}': {exc}", document_name=name) from exc

    def _ingest_one(self, name: str) -> DocumentIngestion:
        content = self._object_store.read_text(name)
        chunks = self._chunker.chunk(content, source=name)
        if not chunks:
            LOGGER.warning("Skipping ingestion for empty document %s", name)
            return DocumentIngestion(name=name, chunk_count=0)

        embedded = embed_chunks(self._embeddings, chunks)
        entries = [
            IndexedEntry(content=item.text, content_vector=item.vector, category=self._config.category)
            for item in embedded
        ]
        self._vector_index.upsert(entries)
        LOGGER.info("Indexed %d chunk(s) from %s", len(entries), name)
        return DocumentIngestion(
            name=name,
            chunk_count=len(entries),
            entry_ids=[entry.id for entry in entries],
        )
