"""Object store abstractions holding the raw source documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from fenec_rag.exceptions import StorageError

LOGGER = logging.getLogger(__name__)

StorageProviderLiteral = Literal["local", "azure-blob"]
SUPPORTED_STORAGE_PROVIDERS: tuple[str, ...] = ("local", "azure-blob")


@dataclass(slots=True, frozen=True)
class StorageConfig:
    """Where source documents live."""

    provider: StorageProviderLiteral = "local"
    root: Path = Path("data/documents")
    container: str = "documents"
    connection_string_env: str = "AZURE_STORAGE_CONNECTION_STRING"
    create_container: bool = True


@dataclass(slots=True, frozen=True)
class UploadResult:
    """Outcome of storing a document."""

    name: str
    uri: str
    message: str = "File uploaded successfully."


class ObjectStore(Protocol):
    """Container of named text documents."""

    def list_names(self) -> list[str]: ...

    def read_text(self, name: str) -> str: ...

    def upload(self, name: str, data: bytes, *, overwrite: bool = True) -> UploadResult: ...


class LocalDirectoryObjectStore:
    """Treats a directory tree as a container; names are POSIX paths relative to the root."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def list_names(self) -> list[str]:
        return sorted(path.relative_to(self._root).as_posix() for path in self._root.rglob("*") if path.is_file())

    def read_text(self, name: str) -> str:
        path = self._resolve(name)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            message = f"Failed to read document '{name}'"
            raise StorageError(message, operation="read", details={"path": str(path)}) from exc

    def upload(self, name: str, data: bytes, *, overwrite: bool = True) -> UploadResult:
        path = self._resolve(name)
        if path.exists() and not overwrite:
            message = f"Document '{name}' already exists"
            raise StorageError(message, operation="upload", details={"path": str(path)})
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            path.write_bytes(data)
        except OSError as exc:
            message = f"Failed to write document '{name}'"
            raise StorageError(message, operation="upload", details={"path": str(path)}) from exc
        LOGGER.info("Stored %s (%d bytes) under %s", name, len(data), self._root)
        return UploadResult(name=name, uri=path.resolve().as_uri())

    def _resolve(self, name: str) -> Path:
        root = self._root.resolve()
        path = (root / name).resolve()
        if path != root and root not in path.parents:
            message = f"Document name '{name}' escapes the storage root"
            raise StorageError(message, operation="resolve")
        return path
