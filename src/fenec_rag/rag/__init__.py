"""Retrieval-augmented generation building blocks."""

from .chunking import Chunk, ChunkingConfig, ParagraphChunker, split_paragraphs, split_text_into_chunks
from .embeddings import EmbeddedChunk, EmbeddingConfig, EmbeddingFactory, embed_chunks
from .ingestion import DocumentIngestion, DocumentIngestionPipeline, IngestionConfig, IngestionResult
from .query import (
    Answered,
    Degraded,
    NoContext,
    QueryConfig,
    QueryOutcome,
    QueryPipeline,
    QueryResponse,
)
from .vector_store import (
    ChromaVectorIndex,
    IndexedEntry,
    InMemoryVectorIndex,
    SearchMatch,
    VectorIndex,
    VectorIndexConfig,
    cosine_similarity,
)

__all__ = [
    "Answered",
    "ChromaVectorIndex",
    "Chunk",
    "ChunkingConfig",
    "Degraded",
    "DocumentIngestion",
    "DocumentIngestionPipeline",
    "EmbeddedChunk",
    "EmbeddingConfig",
    "EmbeddingFactory",
    "InMemoryVectorIndex",
    "IndexedEntry",
    "IngestionConfig",
    "IngestionResult",
    "NoContext",
    "ParagraphChunker",
    "QueryConfig",
    "QueryOutcome",
    "QueryPipeline",
    "QueryResponse",
    "SearchMatch",
    "VectorIndex",
    "VectorIndexConfig",
    "cosine_similarity",
    "embed_chunks",
    "split_paragraphs",
    "split_text_into_chunks",
]
