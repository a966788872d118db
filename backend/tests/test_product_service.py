"""
Storefront Backend: Product Service Unit Tests
=================================================

What:  Tests for ProductService CRUD logic.
How:   mock_db_session stands in for AsyncSession; object storage is mocked.
"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from storefront.exceptions import DatabaseError, NotFoundError, ObjectStorageError
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services.product_service import ProductService


@pytest.fixture
def storage():
    mock = MagicMock()
    mock.delete = AsyncMock()
    return mock


@pytest.fixture
def service(storage):
    return ProductService(storage=storage)


def _found(session, product):
    session.execute.return_value.scalar_one_or_none = MagicMock(return_value=product)


class TestProductServiceList:

    @pytest.mark.asyncio
    async def test_list_empty(self, service, mock_db_session):
        rows = MagicMock()
        rows.scalars.return_value.all.return_value = []
        count = MagicMock()
        count.scalar.return_value = 0
        mock_db_session.execute.side_effect = [rows, count]

        result = await service.list_products(mock_db_session)

        assert result.products == []
        assert result.total_count == 0
        assert result.has_more is False

    @pytest.mark.asyncio
    async def test_list_reports_has_more(self, service, mock_db_session, make_product):
        products = [make_product(name=f"Shoe {i}") for i in range(3)]
        rows = MagicMock()
        rows.scalars.return_value.all.return_value = products
        count = MagicMock()
        count.scalar.return_value = 7
        mock_db_session.execute.side_effect = [rows, count]

        result = await service.list_products(mock_db_session, category="shoes", limit=2)

        assert [p.name for p in result.products] == ["Shoe 0", "Shoe 1"]
        assert result.total_count == 7
        assert result.has_more is True

    @pytest.mark.asyncio
    async def test_list_database_failure(self, service, mock_db_session):
        mock_db_session.execute.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError):
            await service.list_products(mock_db_session)


class TestProductServiceGet:

    @pytest.mark.asyncio
    async def test_get_found(self, service, mock_db_session, make_product):
        product = make_product()
        _found(mock_db_session, product)

        result = await service.get_product(mock_db_session, product.id)

        assert result.id == product.id
        assert result.price == Decimal("89.99")

    @pytest.mark.asyncio
    async def test_get_not_found(self, service, mock_db_session):
        _found(mock_db_session, None)

        with pytest.raises(NotFoundError, match="product"):
            await service.get_product(mock_db_session, uuid4())


class TestProductServiceWrite:

    @pytest.mark.asyncio
    async def test_create_adds_and_flushes(self, service, mock_db_session):
        async def _assign_defaults():
            added = mock_db_session.add.call_args.args[0]
            added.id = uuid4()
            added.created_at = added.updated_at = datetime.now(timezone.utc)

        mock_db_session.flush.side_effect = _assign_defaults
        data = ProductCreate(name="  Trail Boot ", price=Decimal("120.00"), category="boots")

        result = await service.create_product(mock_db_session, data)

        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()
        assert result.name == "Trail Boot"
        assert result.stock == 0

    @pytest.mark.asyncio
    async def test_create_database_failure(self, service, mock_db_session):
        mock_db_session.flush.side_effect = RuntimeError("constraint violated")

        with pytest.raises(DatabaseError):
            await service.create_product(
                mock_db_session, ProductCreate(name="Boot", price=Decimal("1.00"))
            )

    @pytest.mark.asyncio
    async def test_update_applies_only_sent_fields(self, service, mock_db_session, make_product):
        product = make_product()
        _found(mock_db_session, product)

        result = await service.update_product(mock_db_session, product.id, ProductUpdate(stock=3))

        assert result.stock == 3
        assert result.name == "Air Runner 2"
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_not_found(self, service, mock_db_session):
        _found(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await service.update_product(mock_db_session, uuid4(), ProductUpdate(stock=1))


class TestProductServiceDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_image(self, service, storage, mock_db_session, make_product):
        product = make_product()
        _found(mock_db_session, product)

        await service.delete_product(mock_db_session, product.id)

        mock_db_session.delete.assert_awaited_once_with(product)
        storage.delete.assert_awaited_once_with("products/2024/01/15/abc")

    @pytest.mark.asyncio
    async def test_delete_without_image(self, service, storage, mock_db_session, make_product):
        _found(mock_db_session, make_product(image_public_id=None))

        await service.delete_product(mock_db_session, uuid4())

        storage.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_image_failure_does_not_undo_delete(
        self, service, storage, mock_db_session, make_product
    ):
        _found(mock_db_session, make_product())
        storage.delete.side_effect = ObjectStorageError(message="Failed to delete file")

        await service.delete_product(mock_db_session, uuid4())

        mock_db_session.delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_not_found(self, service, storage, mock_db_session):
        _found(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await service.delete_product(mock_db_session, uuid4())

        storage.delete.assert_not_awaited()
