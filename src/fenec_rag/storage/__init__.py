"""Object storage for Fenec RAG source documents."""

from .object_store import (
    SUPPORTED_STORAGE_PROVIDERS,
    LocalDirectoryObjectStore,
    ObjectStore,
    StorageConfig,
    UploadResult,
)

__all__ = [
    "SUPPORTED_STORAGE_PROVIDERS",
    "LocalDirectoryObjectStore",
    "ObjectStore",
    "StorageConfig",
    "UploadResult",
]
