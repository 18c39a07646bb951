"""Exception hierarchy shared by the Fenec RAG components."""

from __future__ import annotations

from typing import Any


class FenecRAGError(Exception):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(FenecRAGError):
    """Raised when the runtime configuration is incomplete or inconsistent."""


class ValidationError(FenecRAGError):
    """Raised when caller input is rejected before any collaborator is contacted."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class QueryValidationError(ValidationError):
    """Raised for blank questions or a non-positive top-k."""


class EmptyDocumentSetError(ValidationError):
    """Raised when the object store holds no document eligible for ingestion."""


class StorageError(FenecRAGError):
    """Raised when an object store operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class VectorStoreError(FenecRAGError):
    """Raised when a vector index operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class DocumentProcessingError(FenecRAGError):
    """Base class for failures tied to a single source document."""

    def __init__(
        self,
        message: str,
        document_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if document_name:
            details["document"] = document_name
        self.document_name = document_name
        super().__init__(message, details)


class EmbeddingError(DocumentProcessingError):
    """Raised when the embedding provider returns an unusable batch."""


class IngestionError(DocumentProcessingError):
    """Raised when an ingestion run aborts.

    ``committed`` lists the documents that were fully indexed before the failure;
    they stay in the index since ingestion has no cross-document rollback.
    """

    def __init__(
        self,
        message: str,
        document_name: str | None = None,
        committed: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.committed = list(committed or [])
        details = details or {}
        details["committed_documents"] = len(self.committed)
        super().__init__(message, document_name, details)
