"""Azure AI Search adapter for the vector index."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from azure.core.credentials import AzureKeyCredential
from azure.core.exceptions import AzureError
from azure.search.documents import SearchClient
from azure.search.documents.models import VectorizedQuery

from fenec_rag.env import read_secret
from fenec_rag.exceptions import ConfigurationError, VectorStoreError
from fenec_rag.rag.vector_store import IndexedEntry, SearchMatch, VectorIndexConfig

LOGGER = logging.getLogger(__name__)


class AzureSearchVectorIndex:
    """Stores entries in an Azure AI Search index with a vector field.

    The index schema is managed outside this package; it must expose ``id`` (key),
    ``category``, the configured content field and the configured vector field.
    """

    def __init__(
        self,
        client: SearchClient,
        *,
        vector_field: str = "contentVector",
        content_field: str = "content",
    ) -> None:
        self._client = client
        self._vector_field = vector_field
        self._content_field = content_field

    @classmethod
    def from_config(cls, config: VectorIndexConfig) -> AzureSearchVectorIndex:
        if not config.endpoint:
            message = "Azure AI Search requires an 'endpoint'"
            raise ConfigurationError(message, details={"provider": "azure-search"})
        credential = AzureKeyCredential(read_secret(config.api_key_env, purpose="Azure AI Search"))
        client = SearchClient(endpoint=config.endpoint, index_name=config.index_name, credential=credential)
        LOGGER.info("Connected to Azure AI Search index '%s' at %s", config.index_name, config.endpoint)
        return cls(client, vector_field=config.vector_field, content_field=config.content_field)

    def upsert(self, entries: Sequence[IndexedEntry]) -> None:
        if not entries:
            return
        documents = [self._to_document(entry) for entry in entries]
        try:
            results = self._client.upload_documents(documents=documents)
        except AzureError as exc:
            message = "Failed to upload documents to Azure AI Search"
            raise VectorStoreError(message, operation="upsert", details={"vector_count": len(entries)}) from exc

        failed = [result.key for result in results if not result.succeeded]
        if failed:
            message = f"Azure AI Search rejected {len(failed)} of {len(entries)} documents"
            raise VectorStoreError(message, operation="upsert", details={"failed_keys": failed})
        LOGGER.info("Uploaded %d entries to Azure AI Search", len(entries))

    def search(self, vector: Sequence[float], *, top_k: int) -> list[SearchMatch]:
        if top_k < 1:
            message = f"top_k must be at least 1, got {top_k}"
            raise ValueError(message)
        query = VectorizedQuery(vector=list(vector), k_nearest_neighbors=top_k, fields=self._vector_field)
        try:
            results = self._client.search(
                search_text=None,
                vector_queries=[query],
                select=[self._content_field],
                top=top_k,
            )
            # results page lazily, so decoding has to stay inside the try block
            return [self._to_match(result) for result in results]
        except AzureError as exc:
            message = "Vector search against Azure AI Search failed"
            raise VectorStoreError(message, operation="search", details={"top_k": top_k}) from exc

    def count(self) -> int:
        try:
            return int(self._client.get_document_count())
        except AzureError as exc:
            message = "Failed to count documents in Azure AI Search"
            raise VectorStoreError(message, operation="count") from exc

    def _to_document(self, entry: IndexedEntry) -> dict[str, Any]:
        return {
            "id": entry.id,
            self._content_field: entry.content,
            "category": entry.category,
            self._vector_field: list(entry.content_vector),
        }

    def _to_match(self, result: Mapping[str, Any]) -> SearchMatch:
        content = result.get(self._content_field)
        entry_id = result.get("id")
        return SearchMatch(
            content=str(content) if content is not None else "",
            score=float(result.get("@search.score") or 0.0),
            id=str(entry_id) if entry_id is not None else None,
        )
