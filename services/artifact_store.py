# services/artifact_store.py
"""
Artifact Store - durable storage for sealed lease documents.

Two backends share the put/get interface:
- LocalArtifactStore: files under a directory, served at a URL prefix
- AzureBlobArtifactStore: blobs in an Azure Storage container

Sealed artifacts are never overwritten; every finalize attempt writes a
version- and timestamp-qualified name.
"""
import logging
import os
from typing import Optional
from urllib.parse import urlparse

import config

logger = logging.getLogger(__name__)


class ArtifactStoreError(Exception):
     """Raised when an artifact cannot be written or read."""


class ArtifactStore:
     def put(self, data: bytes, name: str) -> str:
          """Persist `data` under `name` and return its URL."""
          raise NotImplementedError

     def get(self, url: str) -> bytes:
          """Return the bytes previously stored at `url`."""
          raise NotImplementedError


class LocalArtifactStore(ArtifactStore):
     def __init__(self, root_dir: str, public_prefix: str = "/leases"):
          self.root_dir = root_dir
          self.public_prefix = public_prefix.rstrip("/")

     def _path_for(self, name: str) -> str:
          if not name or os.path.basename(name) != name:
               raise ArtifactStoreError(f"Invalid artifact name: {name!r}")
          return os.path.join(self.root_dir, name)

     def put(self, data: bytes, name: str) -> str:
          os.makedirs(self.root_dir, exist_ok=True)
          path = self._path_for(name)
          try:
               # "xb" refuses to replace an existing artifact
               with open(path, "xb") as buffer:
                    buffer.write(data)
          except OSError as exc:
               raise ArtifactStoreError(f"Could not write artifact {name}: {exc}") from exc
          logger.info("Stored artifact %s (%d bytes)", name, len(data))
          return f"{self.public_prefix}/{name}"

     def get(self, url: str) -> bytes:
          prefix = f"{self.public_prefix}/"
          if not url.startswith(prefix):
               raise ArtifactStoreError(f"Unsupported artifact URL: {url}")
          path = self._path_for(url[len(prefix):])
          try:
               with open(path, "rb") as buffer:
                    return buffer.read()
          except OSError as exc:
               raise ArtifactStoreError(f"Could not read artifact {url}: {exc}") from exc


class AzureBlobArtifactStore(ArtifactStore):
     def __init__(self, account: str, key: str, container: str):
          from azure.storage.blob import BlobServiceClient

          self.account = account
          self.container = container
          self.blob_service = BlobServiceClient.from_connection_string(
               f"DefaultEndpointsProtocol=https;"
               f"AccountName={account};"
               f"AccountKey={key};"
               f"EndpointSuffix=core.windows.net"
          )

     def put(self, data: bytes, name: str) -> str:
          from azure.core.exceptions import AzureError
          from azure.storage.blob import ContentSettings

          blob_client = self.blob_service.get_blob_client(container=self.container, blob=name)
          try:
               blob_client.upload_blob(
                    data,
                    overwrite=False,
                    content_settings=ContentSettings(content_type="application/pdf"),
               )
          except AzureError as exc:
               raise ArtifactStoreError(f"Could not upload blob {name}: {exc}") from exc
          return f"https://{self.account}.blob.core.windows.net/{self.container}/{name}"

     def get(self, url: str) -> bytes:
          from azure.core.exceptions import AzureError

          parts = urlparse(url).path.lstrip("/").split("/", 1)
          if len(parts) != 2 or parts[0] != self.container:
               raise ArtifactStoreError(f"Unsupported artifact URL: {url}")
          blob_client = self.blob_service.get_blob_client(container=parts[0], blob=parts[1])
          try:
               return blob_client.download_blob().readall()
          except AzureError as exc:
               raise ArtifactStoreError(f"Could not download blob {url}: {exc}") from exc


_store: Optional[ArtifactStore] = None


def get_artifact_store() -> ArtifactStore:
     """FastAPI dependency returning the configured store (built once)."""
     global _store
     if _store is None:
          if config.ARTIFACT_STORE == "azure":
               _store = AzureBlobArtifactStore(
                    config.AZURE_STORAGE_ACCOUNT,
                    config.AZURE_STORAGE_KEY,
                    config.AZURE_LEASE_CONTAINER,
               )
          else:
               _store = LocalArtifactStore(config.ARTIFACT_LOCAL_DIR, config.ARTIFACT_PUBLIC_PREFIX)
     return _store
