"""Vector index abstractions and local implementations for Fenec RAG."""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol

import chromadb
from chromadb.config import Settings

from fenec_rag.exceptions import VectorStoreError

LOGGER = logging.getLogger(__name__)

IndexProviderLiteral = Literal["chroma", "azure-search", "memory"]
SUPPORTED_INDEX_PROVIDERS: tuple[str, ...] = ("chroma", "azure-search", "memory")
DEFAULT_CATEGORY = "general"


@dataclass(slots=True, frozen=True)
class VectorIndexConfig:
    """Connection settings for the vector index."""

    provider: IndexProviderLiteral = "chroma"
    # chroma
    collection_name: str = "fenec_documents"
    persist_directory: Path = Path("data/chroma")
    # azure ai search
    endpoint: str | None = None
    index_name: str = "fenec-documents"
    api_key_env: str = "AZURE_SEARCH_API_KEY"
    vector_field: str = "contentVector"
    content_field: str = "content"


@dataclass(slots=True, frozen=True)
class IndexedEntry:
    """Unit persisted in the vector index: a chunk's text plus its embedding."""

    content: str
    content_vector: list[float]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    category: str = DEFAULT_CATEGORY


@dataclass(slots=True, frozen=True)
class SearchMatch:
    """A single hit returned by a similarity search."""

    content: str
    score: float = 0.0
    id: str | None = None


class VectorIndex(Protocol):
    """Operations the pipelines need from a vector index."""

    def upsert(self, entries: Sequence[IndexedEntry]) -> None: ...

    def search(self, vector: Sequence[float], *, top_k: int) -> list[SearchMatch]: ...

    def count(self) -> int: ...


def cosine_similarity(v1: Sequence[float], v2: Sequence[float]) -> float:
    """Cosine of the angle between two vectors, 0.0 when either has no magnitude."""
    if len(v1) != len(v2):
        message = f"Cannot compare vectors of different lengths ({len(v1)} vs {len(v2)})"
        raise ValueError(message)
    dot = mag1 = mag2 = 0.0
    for a, b in zip(v1, v2):
        dot += a * b
        mag1 += a * a
        mag2 += b * b
    if mag1 == 0 or mag2 == 0:
        return 0.0
    return dot / (math.sqrt(mag1) * math.sqrt(mag2))


def _validate_top_k(top_k: int) -> None:
    if top_k < 1:
        message = f"top_k must be at least 1, got {top_k}"
        raise ValueError(message)


class InMemoryVectorIndex:
    """Brute-force cosine index kept in process memory.

    Ties keep insertion order. Used for tests and for quick local experiments.
    """

    def __init__(self) -> None:
        self._entries: dict[str, IndexedEntry] = {}
        self._dimension: int | None = None

    def upsert(self, entries: Sequence[IndexedEntry]) -> None:
        dimension = self._dimension
        for entry in entries:
            if dimension is None:
                dimension = len(entry.content_vector)
            elif len(entry.content_vector) != dimension:
                message = "Vector dimension does not match the index"
                raise VectorStoreError(
                    message,
                    operation="upsert",
                    details={"expected": dimension, "actual": len(entry.content_vector)},
                )
        # the dimension is fixed only once a whole batch is accepted
        self._dimension = dimension
        for entry in entries:
            self._entries[entry.id] = entry

    def search(self, vector: Sequence[float], *, top_k: int) -> list[SearchMatch]:
        _validate_top_k(top_k)
        if not self._entries:
            return []
        if len(vector) != self._dimension:
            message = "Query vector dimension does not match the index"
            raise VectorStoreError(
                message,
                operation="search",
                details={"expected": self._dimension, "actual": len(vector)},
            )
        scored = [
            SearchMatch(content=entry.content, score=cosine_similarity(vector, entry.content_vector), id=entry.id)
            for entry in self._entries.values()
        ]
        scored.sort(key=lambda match: match.score, reverse=True)
        return scored[:top_k]

    def count(self) -> int:
        return len(self._entries)

    def entries(self) -> list[IndexedEntry]:
        return list(self._entries.values())


class ChromaVectorIndex:
    """Vector index backed by a persistent Chroma collection.

    Vectors are computed by the caller; the collection never embeds text itself.
    """

    def __init__(self, config: VectorIndexConfig | None = None, *, client: chromadb.ClientAPI | None = None) -> None:
        self._config = config or VectorIndexConfig()
        if client is None:
            self._config.persist_directory.mkdir(parents=True, exist_ok=True)
            client = chromadb.PersistentClient(
                path=str(self._config.persist_directory),
                settings=Settings(anonymized_telemetry=False, allow_reset=True),
            )
        self._client = client
        self._collection = self._client.get_or_create_collection(
            name=self._config.collection_name,
            metadata={"hnsw:space": "cosine"},
        )
        LOGGER.debug(
            "Initialized Chroma vector index(collection=%s, persist_dir=%s)",
            self._config.collection_name,
            self._config.persist_directory,
        )

    @property
    def collection_name(self) -> str:
        return self._config.collection_name

    def upsert(self, entries: Sequence[IndexedEntry]) -> None:
        if not entries:
            return
        try:
            self._collection.upsert(
                ids=[entry.id for entry in entries],
                embeddings=[list(entry.content_vector) for entry in entries],
                documents=[entry.content for entry in entries],
                metadatas=[{"category": entry.category} for entry in entries],
            )
        except Exception as exc:
            message = f"Failed to upsert vectors into Chroma collection '{self._config.collection_name}'"
            raise VectorStoreError(message, operation="upsert", details={"vector_count": len(entries)}) from exc
        LOGGER.info("Upserted %d entries into Chroma collection '%s'", len(entries), self._config.collection_name)

    def search(self, vector: Sequence[float], *, top_k: int) -> list[SearchMatch]:
        _validate_top_k(top_k)
        try:
            available = self._collection.count()
            if available == 0:
                return []
            response = self._collection.query(
                query_embeddings=[list(vector)],
                n_results=min(top_k, available),
                include=["documents", "distances"],
            )
        except Exception as exc:
            message = f"Failed to query Chroma collection '{self._config.collection_name}'"
            raise VectorStoreError(message, operation="search", details={"top_k": top_k}) from exc
        return self._decode_matches(response)

    def count(self) -> int:
        try:
            return int(self._collection.count())
        except Exception as exc:
            message = f"Failed to count Chroma collection '{self._config.collection_name}'"
            raise VectorStoreError(message, operation="count") from exc

    @staticmethod
    def _decode_matches(response: dict) -> list[SearchMatch]:
        ids = (response.get("ids") or [[]])[0]
        documents = (response.get("documents") or [[]])[0] or []
        distances = (response.get("distances") or [[]])[0] or []
        matches: list[SearchMatch] = []
        for position, entry_id in enumerate(ids):
            content = documents[position] if position < len(documents) else None
            distance = distances[position] if position < len(distances) else None
            matches.append(
                SearchMatch(
                    content=content or "",
                    score=1.0 - float(distance) if distance is not None else 0.0,
                    id=str(entry_id),
                )
            )
        return matches
