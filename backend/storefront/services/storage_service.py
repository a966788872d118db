"""
Storefront Backend: Object Storage
=====================================

What:  The object-storage collaborator used for product images.
Why:   Uploads and product deletion only need two operations, upload a local
       file and delete by public id, so they depend on this narrow interface
       instead of on a particular storage provider.
How:   ObjectStorage is the abstract contract; LocalObjectStorage keeps files
       on the storage volume and serves them through GET /api/files/{path}.

Layout (LocalObjectStorage):
    storage/
    └── products/
        └── 2024/
            └── 01/
                └── 15/
                    └── a1b2c3d4-5678.jpg   ← public_id "products/2024/01/15/a1b2c3d4-5678"
"""

import glob
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

import aiofiles

from storefront.config import settings
from storefront.exceptions import NotFoundError, ObjectStorageError, ValidationError

logger = logging.getLogger(__name__)

# Copy in 1MB chunks so large uploads never sit fully in memory twice
CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful upload."""

    url: str
    public_id: str


class ObjectStorage(ABC):
    """
    Contract for image storage providers.

    Implementations:
        - LocalObjectStorage: files on the local storage volume (default)
    """

    @abstractmethod
    async def upload(self, local_path: str) -> StoredObject:
        """Copy the file at `local_path` into storage and return its URL and id."""
        ...

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """Remove the object identified by `public_id`; unknown ids are ignored."""
        ...

    def config_summary(self) -> Dict[str, str]:
        """Which provider settings are configured (logged when an upload fails)."""
        return {}


class LocalObjectStorage(ObjectStorage):
    """
    Stores objects under STORAGE_ROOT in date-organized folders.

    Args:
        storage_root: Override the default storage path (used in tests).
        public_base_url: Origin prefixed to generated URLs.
        folder: Top-level folder for this storage's objects.
    """

    def __init__(
        self,
        storage_root: Optional[str] = None,
        public_base_url: Optional[str] = None,
        folder: str = "products",
    ):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self.folder = folder
        logger.info("LocalObjectStorage initialized with storage_root=%s", self.storage_root)

    def config_summary(self) -> Dict[str, str]:
        return {
            "storage_root": "Set" if self.storage_root.is_dir() else "Missing",
            "public_base_url": "Set" if self.public_base_url else "Not set",
        }

    def _generate_public_id(self) -> str:
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"{self.folder}/{date_dir}/{uuid.uuid4()}"

    def _within_root(self, relative: str) -> Path:
        """Resolve `relative` against the root; reject anything that escapes it."""
        candidate = (self.storage_root / relative).resolve()
        if candidate != self.storage_root and self.storage_root not in candidate.parents:
            raise ValidationError(message="Invalid storage path", context={"path": relative})
        return candidate

    def url_for(self, relative_path: str) -> str:
        return f"{self.public_base_url}/api/files/{relative_path}"

    def resolve_file(self, relative_path: str) -> Path:
        """
        Absolute path of a stored file, for serving.

        Raises:
            ValidationError: path escapes the storage root
            NotFoundError: no such file
        """
        path = self._within_root(relative_path)
        if not path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return path

    async def upload(self, local_path: str) -> StoredObject:
        source = Path(local_path)
        public_id = self._generate_public_id()
        relative_path = f"{public_id}{source.suffix.lower()}"
        destination = self.storage_root / relative_path

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(source, "rb") as src, aiofiles.open(destination, "wb") as dst:
                while True:
                    chunk = await src.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    await dst.write(chunk)
        except OSError as e:
            logger.error("Failed to store %s at %s: %s", source.name, destination, str(e))
            raise ObjectStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(destination), "os_error": str(e)},
            ) from e

        logger.info("Stored object %s", relative_path)
        return StoredObject(url=self.url_for(relative_path), public_id=public_id)

    async def delete(self, public_id: str) -> None:
        target = self._within_root(public_id)
        try:
            matches = list(target.parent.glob(f"{glob.escape(target.name)}.*")) if target.parent.is_dir() else []
            for path in matches:
                path.unlink()
                logger.info("Deleted object %s", path.relative_to(self.storage_root))
        except OSError as e:
            logger.error("Failed to delete object %s: %s", public_id, str(e))
            raise ObjectStorageError(
                message="Failed to delete file",
                context={"public_id": public_id, "os_error": str(e)},
            ) from e

        if not matches:
            logger.debug("Delete: no object stored under %s", public_id)


# ── Singleton Instance ────────────────────────────────────────────────────
object_storage = LocalObjectStorage()
