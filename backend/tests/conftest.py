"""
Storefront Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is pinned BEFORE any storefront import so the settings
       singleton, engine and storage singletons pick up test values.

Fixtures:
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── temp_storage: Temporary directory for file operations
    ├── sample_image_bytes: Minimal JPEG for upload tests
    ├── sample_product_data: Attribute dict matching the Product model
    ├── email_settings: Settings factory isolated from the host environment
    ├── fake_smtp_client: Stand-in for the aiosmtplib module
    └── test_client: HTTPX AsyncClient bound to the FastAPI app
"""

import os
import tempfile
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="storefront_storage_")
os.environ["UPLOAD_TEMP_DIR"] = tempfile.mkdtemp(prefix="storefront_uploads_")
os.environ["PUBLIC_BASE_URL"] = "http://test"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["LOG_LEVEL"] = "WARNING"
for _name in ("EMAIL_USER", "EMAIL_PASS", "EMAIL_HOST", "EMAIL_PORT", "CLIENT_URL"):
    os.environ.pop(_name, None)

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = product
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_product_data():
    now = datetime.now(timezone.utc)
    return {
        "id": uuid4(),
        "name": "Air Runner 2",
        "description": "Lightweight running shoe",
        "price": Decimal("89.99"),
        "category": "shoes",
        "brand": "Seekon",
        "image_url": "http://test/api/files/products/2024/01/15/abc.jpg",
        "image_public_id": "products/2024/01/15/abc",
        "stock": 12,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def make_product(sample_product_data):
    """Builds Product-like objects (attribute access only) for service tests."""
    def _make(**overrides):
        data = {**sample_product_data, "id": uuid4(), **overrides}
        return SimpleNamespace(**data)
    return _make


@pytest.fixture
def email_settings(monkeypatch):
    """
    Factory for Settings with SMTP credentials, detached from .env and the
    host environment.

    Usage:
        config = email_settings()                       # credentials present
        config = email_settings(email_user=None)        # fallback mode
    """
    from storefront.config import Settings

    for name in ("EMAIL_USER", "EMAIL_PASS", "EMAIL_HOST", "EMAIL_PORT", "CLIENT_URL"):
        monkeypatch.delenv(name, raising=False)

    def _make(**overrides):
        values = {"email_user": "shop@example.com", "email_pass": "app-password"}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def fake_smtp_client():
    """Stands in for the aiosmtplib module: only `send` is needed."""
    return SimpleNamespace(send=AsyncMock(return_value=({}, "250 OK")))


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    The database dependency is overridden with mock_db_session.
    """
    from storefront.database import get_db_session
    from storefront.main import app

    async def _session_override():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _session_override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
