"""Azure Blob Storage adapter for the object store."""

from __future__ import annotations

import logging

from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob import ContainerClient

from fenec_rag.env import read_secret
from fenec_rag.exceptions import StorageError
from fenec_rag.storage.object_store import StorageConfig, UploadResult

LOGGER = logging.getLogger(__name__)


class AzureBlobObjectStore:
    """Reads and writes documents in a single blob container."""

    def __init__(self, container_client: ContainerClient) -> None:
        self._container = container_client

    @classmethod
    def from_config(cls, config: StorageConfig) -> AzureBlobObjectStore:
        connection_string = read_secret(config.connection_string_env, purpose="Azure Blob Storage")
        container = ContainerClient.from_connection_string(connection_string, container_name=config.container)
        store = cls(container)
        if config.create_container:
            store.ensure_container()
        return store

    @property
    def container_name(self) -> str:
        return self._container.container_name

    def ensure_container(self) -> None:
        """Create the container when it does not exist yet."""
        try:
            self._container.create_container()
            LOGGER.info("Created blob container '%s'", self.container_name)
        except ResourceExistsError:
            LOGGER.debug("Blob container '%s' already exists", self.container_name)
        except AzureError as exc:
            message = f"Failed to create blob container '{self.container_name}'"
            raise StorageError(message, operation="create_container") from exc

    def list_names(self) -> list[str]:
        try:
            return [blob.name for blob in self._container.list_blobs()]
        except AzureError as exc:
            message = f"Failed to list blobs in container '{self.container_name}'"
            raise StorageError(message, operation="list") from exc

    def read_text(self, name: str) -> str:
        try:
            return self._container.download_blob(name, encoding="utf-8").readall()
        except AzureError as exc:
            message = f"Failed to download blob '{name}'"
            raise StorageError(message, operation="read", details={"container": self.container_name}) from exc

    def upload(self, name: str, data: bytes, *, overwrite: bool = True) -> UploadResult:
        try:
            blob_client = self._container.upload_blob(name=name, data=data, overwrite=overwrite)
        except ResourceExistsError as exc:
            message = f"Blob '{name}' already exists"
            raise StorageError(message, operation="upload", details={"container": self.container_name}) from exc
        except AzureError as exc:
            message = f"Failed to upload blob '{name}'"
            raise StorageError(message, operation="upload", details={"container": self.container_name}) from exc
        LOGGER.info("Uploaded %s (%d bytes) to container '%s'", name, len(data), self.container_name)
        return UploadResult(name=name, uri=blob_client.url)
