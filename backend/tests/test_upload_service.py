"""
Storefront Backend: Upload Service Unit Tests
================================================

What:  Tests for image validation and the upload lifecycle.
How:   Real LocalObjectStorage in tmp_path, or a mocked ObjectStorage when a
       failure has to be forced.

Test Strategy:
    ✅ Extension / size / content-type validation
    ✅ Temp file removed after success AND after failure
    ✅ Unknown storage errors surface as "Upload failed"
    ✅ Empty public id rejected on delete
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from storefront.exceptions import ObjectStorageError, ValidationError
from storefront.services.storage_service import LocalObjectStorage, ObjectStorage, StoredObject
from storefront.services.upload_service import UploadService


@pytest.fixture
def temp_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def storage(temp_storage):
    return LocalObjectStorage(storage_root=temp_storage, public_base_url="http://test")


@pytest.fixture
def failing_storage():
    mock = MagicMock(spec=ObjectStorage)
    mock.upload = AsyncMock(side_effect=RuntimeError("provider unavailable"))
    mock.config_summary.return_value = {"storage_root": "Set"}
    return mock


class TestUploadValidation:
    """Tests for validation in UploadService."""

    @pytest.fixture(autouse=True)
    def _service(self, temp_dir, storage):
        self.service = UploadService(storage=storage, temp_dir=str(temp_dir))

    @pytest.mark.parametrize("filename", ["a.png", "a.jpg", "a.jpeg", "a.webp", "a.JPG", "a.Png"])
    def test_allowed_extensions(self, filename):
        assert self.service.validate_extension(filename) == Path(filename).suffix.lower()

    @pytest.mark.parametrize("filename", ["a.gif", "a.pdf", "a.exe", "noextension"])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    def test_size_within_limit(self):
        self.service.validate_size(None, 1000)

    def test_size_empty_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(None, 0)

    def test_size_over_limit_rejected(self):
        with patch("storefront.services.upload_service.settings") as mock_settings:
            mock_settings.max_file_size = 1024
            with pytest.raises(ValidationError, match="too large"):
                self.service.validate_size(None, 2048)

    def test_content_length_over_limit_rejected(self):
        with patch("storefront.services.upload_service.settings") as mock_settings:
            mock_settings.max_file_size = 1024
            with pytest.raises(ValidationError, match="too large"):
                self.service.validate_size(4096, 10)

    def test_mime_text_rejected(self):
        pytest.importorskip("magic")
        with pytest.raises(ValidationError, match="content type"):
            self.service.validate_mime_type(b"just some plain text, not an image", "fake.png")

    def test_mime_jpeg_accepted(self, sample_image_bytes):
        pytest.importorskip("magic")
        assert self.service.validate_mime_type(sample_image_bytes, "photo.jpg") == "image/jpeg"


class TestUploadLifecycle:
    """Tests for upload_file / delete_file."""

    @pytest.mark.asyncio
    async def test_upload_stores_and_removes_temp(self, temp_dir, storage, sample_image_bytes):
        service = UploadService(storage=storage, temp_dir=str(temp_dir))

        with patch.object(service, "validate_mime_type", return_value="image/jpeg"):
            stored = await service.upload_file("shoe.jpg", sample_image_bytes)

        assert stored.public_id.startswith("products/")
        assert stored.url == f"http://test/api/files/{stored.public_id}.jpg"
        assert (storage.storage_root / f"{stored.public_id}.jpg").read_bytes() == sample_image_bytes
        assert list(temp_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_upload_failure_removes_temp(self, temp_dir, failing_storage, sample_image_bytes):
        service = UploadService(storage=failing_storage, temp_dir=str(temp_dir))

        with patch.object(service, "validate_mime_type", return_value="image/jpeg"):
            with pytest.raises(ObjectStorageError) as exc_info:
                await service.upload_file("shoe.jpg", sample_image_bytes)

        assert exc_info.value.message == "Upload failed"
        assert list(temp_dir.iterdir()) == []
        failing_storage.config_summary.assert_called_once()

    @pytest.mark.asyncio
    async def test_storage_error_keeps_its_message(self, temp_dir, failing_storage, sample_image_bytes):
        failing_storage.upload.side_effect = ObjectStorageError(message="Disk full")
        service = UploadService(storage=failing_storage, temp_dir=str(temp_dir))

        with patch.object(service, "validate_mime_type", return_value="image/jpeg"):
            with pytest.raises(ObjectStorageError, match="Disk full"):
                await service.upload_file("shoe.jpg", sample_image_bytes)

        assert list(temp_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_invalid_file_never_reaches_storage(self, temp_dir, failing_storage):
        service = UploadService(storage=failing_storage, temp_dir=str(temp_dir))

        with pytest.raises(ValidationError):
            await service.upload_file("notes.txt", b"hello")

        failing_storage.upload.assert_not_called()
        assert list(temp_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_silent(self, temp_dir, storage):
        service = UploadService(storage=storage, temp_dir=str(temp_dir))
        await service.cleanup_temp_file(str(temp_dir / "never-existed.jpg"))

    @pytest.mark.asyncio
    async def test_delete_requires_public_id(self, temp_dir, storage):
        service = UploadService(storage=storage, temp_dir=str(temp_dir))
        with pytest.raises(ValidationError, match="Public ID is required"):
            await service.delete_file("  ")

    @pytest.mark.asyncio
    async def test_delete_forwards_to_storage(self, temp_dir):
        mock_storage = MagicMock(spec=ObjectStorage)
        mock_storage.delete = AsyncMock()
        service = UploadService(storage=mock_storage, temp_dir=str(temp_dir))

        await service.delete_file("products/2024/01/15/abc")

        mock_storage.delete.assert_awaited_once_with("products/2024/01/15/abc")

    @pytest.mark.asyncio
    async def test_delete_wraps_unknown_errors(self, temp_dir):
        mock_storage = MagicMock(spec=ObjectStorage)
        mock_storage.delete = AsyncMock(side_effect=RuntimeError("boom"))
        service = UploadService(storage=mock_storage, temp_dir=str(temp_dir))

        with pytest.raises(ObjectStorageError, match="Failed to delete file"):
            await service.delete_file("products/x")


def test_stored_object_is_immutable():
    stored = StoredObject(url="http://test/a.jpg", public_id="a")
    with pytest.raises(AttributeError):
        stored.url = "other"
