"""
Storefront Backend: Upload Service
=====================================

What:  Validates product image uploads and hands them to object storage.
Why:   Keeps the upload route thin and guarantees the temporary file is
       removed on both the success and the failure path.
How:   validate → write temp file → storage.upload(temp) → remove temp file.

Security Model:
    1. Extension check:   fast rejection before reading content
    2. Size check:        Content-Length first, then actual size
    3. MIME type check:   libmagic inspects the header bytes
    4. UUID filenames:    no user input ever reaches a filesystem path
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from storefront.config import settings
from storefront.exceptions import ObjectStorageError, StorefrontError, ValidationError
from storefront.services.storage_service import ObjectStorage, StoredObject, object_storage

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}


class UploadService:
    """
    Upload lifecycle for product images.

    Args:
        storage: Object storage override (tests); defaults to the shared instance.
        temp_dir: Scratch directory override; defaults to settings.upload_temp_dir.
    """

    def __init__(
        self,
        storage: Optional[ObjectStorage] = None,
        temp_dir: Optional[str] = None,
    ):
        self.storage = storage or object_storage
        self.temp_dir = Path(temp_dir or settings.upload_temp_dir).resolve()
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized extension (lowercase with dot).

        Raises:
            ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty files and files above settings.max_file_size.

        Content-Length is checked first so oversized requests fail before the
        body is inspected; the actual size catches clients that lie.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large. Maximum size is {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=(
                    f"File is too large ({actual_size / (1024 * 1024):.1f}MB). "
                    f"Maximum size is {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes, filename: str) -> str:
        """
        Check the real content type from the file's magic bytes.

        Returns:
            Detected MIME type string (e.g., "image/jpeg")
        """
        try:
            import magic
            mime_type = magic.from_buffer(file_content, mime=True)
        except ImportError:
            # python-magic not installed (e.g., in CI without libmagic)
            logger.warning(
                "python-magic not available, falling back to extension-based type detection. "
                "Install libmagic for production security."
            )
            ext = Path(filename).suffix.lower()
            mime_map = {
                ".png": "image/png",
                ".jpg": "image/jpeg",
                ".jpeg": "image/jpeg",
                ".webp": "image/webp",
            }
            mime_type = mime_map.get(ext, "application/octet-stream")
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise ObjectStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            ) from e

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid image (PNG, JPEG or WebP)."
                ),
                field="file",
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES)},
            )

        return mime_type

    async def write_temp_file(self, content: bytes, extension: str) -> str:
        """Write the upload to the scratch directory and return its absolute path."""
        path = self.temp_dir / f"{uuid.uuid4()}{extension}"
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to write temporary upload %s: %s", path, str(e))
            raise ObjectStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e
        return str(path)

    async def cleanup_temp_file(self, file_path: str) -> None:
        """
        Remove a temporary upload.

        Best-effort: a missing file is fine and any other failure is only
        logged, never raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.debug("Removed temporary upload: %s", path.name)
        except OSError as e:
            logger.error("Error deleting temporary file %s: %s", file_path, str(e))

    async def upload_file(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> StoredObject:
        """
        Validate an image and push it to object storage.

        Returns:
            StoredObject with the public URL and public id.

        Raises:
            ValidationError: bad extension, size or content type
            ObjectStorageError: temp file or storage upload failed
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content, filename)

        temp_path = await self.write_temp_file(content, ext)
        try:
            stored = await self.storage.upload(temp_path)
        except Exception as e:
            await self.cleanup_temp_file(temp_path)
            logger.error("Upload error details: %s", str(e), exc_info=True)
            logger.error("Storage config: %s", self.storage.config_summary())
            if isinstance(e, StorefrontError):
                raise
            raise ObjectStorageError(
                message="Upload failed",
                context={"error_type": type(e).__name__},
            ) from e

        await self.cleanup_temp_file(temp_path)
        logger.info("Uploaded %s as %s", filename, stored.public_id)
        return stored

    async def delete_file(self, public_id: str) -> None:
        """
        Delete a stored object.

        Raises:
            ValidationError: empty public id
            ObjectStorageError: storage backend failure
        """
        if not public_id or not public_id.strip():
            raise ValidationError(message="Public ID is required", field="public_id")

        try:
            await self.storage.delete(public_id)
        except StorefrontError:
            raise
        except Exception as e:
            logger.error("Delete error for %s: %s", public_id, str(e), exc_info=True)
            raise ObjectStorageError(
                message="Failed to delete file",
                context={"public_id": public_id, "error_type": type(e).__name__},
            ) from e


# ── Singleton Instance ────────────────────────────────────────────────────
upload_service = UploadService()
