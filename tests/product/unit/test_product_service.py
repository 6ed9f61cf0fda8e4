"""
Unit tests for ProductService

Tests cover:
- Creation with tier validation
- Partial updates and whole-table tier replacement
- Ownership rules (seller vs admin)
- Soft and hard delete
- Storefront listing filters
"""

from unittest.mock import patch

import pytest

from enums.user_role import UserRole
from exceptions.pricing import PricingConfigurationException
from exceptions.product import ProductNotFoundException, ProductOwnershipException
from models.price_tier import PriceTierDTO
from models.product import ProductCreateDTO, ProductUpdateDTO
from services.product import ProductService

SELLER_ID = 7


def create_dto(**overrides):
    values = dict(
        name="Rice 25kg",
        category="food",
        stock=20,
        price_tiers=[
            PriceTierDTO(min_quantity=1, max_quantity=9, unit_price=100.0),
            PriceTierDTO(min_quantity=10, unit_price=80.0),
        ],
    )
    values.update(overrides)
    return ProductCreateDTO(**values)


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_keeps_tier_order(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)

        assert product.id is not None
        assert product.seller_id == SELLER_ID
        assert [(t.min_quantity, t.max_quantity, t.unit_price) for t in product.price_tiers] == [
            (1, 9, 100.0),
            (10, None, 80.0),
        ]

    @pytest.mark.asyncio
    async def test_create_rejects_bounded_last_tier(self, test_session):
        with pytest.raises(PricingConfigurationException):
            await ProductService.create_product(
                SELLER_ID, create_dto(price_tiers=[PriceTierDTO(min_quantity=1, max_quantity=5, unit_price=50.0)]),
                test_session
            )

        assert await ProductService.list_by_seller(SELLER_ID, test_session) == []


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)

        updated = await ProductService.update_product(
            product.id, ProductUpdateDTO(stock=3, description="New harvest"), SELLER_ID, UserRole.SELLER, test_session
        )

        assert updated.stock == 3
        assert updated.description == "New harvest"
        assert updated.name == "Rice 25kg"
        assert len(updated.price_tiers) == 2

    @pytest.mark.asyncio
    async def test_explicit_nulls_ignored(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)

        updated = await ProductService.update_product(
            product.id, ProductUpdateDTO(name=None, stock=None, is_active=None, category="grain"),
            SELLER_ID, UserRole.SELLER, test_session
        )

        assert updated.name == "Rice 25kg"
        assert updated.stock == 20
        assert updated.is_active is True
        assert updated.category == "grain"

    @pytest.mark.asyncio
    async def test_tier_table_replaced(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)
        new_tiers = [
            PriceTierDTO(min_quantity=1, max_quantity=4, unit_price=110.0),
            PriceTierDTO(min_quantity=5, max_quantity=19, unit_price=95.0),
            PriceTierDTO(min_quantity=20, unit_price=75.0),
        ]

        updated = await ProductService.update_product(
            product.id, ProductUpdateDTO(price_tiers=new_tiers), SELLER_ID, UserRole.SELLER, test_session
        )

        assert [t.unit_price for t in updated.price_tiers] == [110.0, 95.0, 75.0]

    @pytest.mark.asyncio
    async def test_invalid_tier_update_leaves_table(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)

        with pytest.raises(PricingConfigurationException):
            await ProductService.update_product(
                product.id, ProductUpdateDTO(price_tiers=[]), SELLER_ID, UserRole.SELLER, test_session
            )

        assert len((await ProductService.get_product(product.id, test_session)).price_tiers) == 2

    @pytest.mark.asyncio
    async def test_foreign_seller_rejected(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)

        with pytest.raises(ProductOwnershipException):
            await ProductService.update_product(product.id, ProductUpdateDTO(stock=1), 99, UserRole.SELLER, test_session)

    @pytest.mark.asyncio
    async def test_admin_may_edit(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)

        updated = await ProductService.set_active(product.id, False, 1, UserRole.ADMIN, test_session)

        assert updated.is_active is False


class TestDelete:

    @pytest.mark.asyncio
    async def test_soft_delete(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)

        await ProductService.delete_product(product.id, SELLER_ID, UserRole.SELLER, test_session)

        assert (await ProductService.get_product(product.id, test_session)).is_active is False
        assert await ProductService.list_active(test_session) == []

    @pytest.mark.asyncio
    async def test_hard_delete(self, test_session):
        product = await ProductService.create_product(SELLER_ID, create_dto(), test_session)

        await ProductService.delete_product(product.id, 1, UserRole.ADMIN, test_session, hard=True)

        with pytest.raises(ProductNotFoundException):
            await ProductService.get_product(product.id, test_session)


class TestListing:

    @pytest.mark.asyncio
    async def test_storefront_filters(self, test_session):
        rice = await ProductService.create_product(SELLER_ID, create_dto(), test_session)
        await ProductService.create_product(SELLER_ID, create_dto(name="Soap", category="hygiene"), test_session)
        await ProductService.create_product(SELLER_ID, create_dto(name="Flour", stock=0), test_session)

        food = await ProductService.list_active(test_session, category="food")
        search = await ProductService.list_active(test_session, search="RICE")

        assert [p.id for p in food] == [rice.id]
        assert [p.id for p in search] == [rice.id]
        assert len(await ProductService.list_all(test_session)) == 3

    @pytest.mark.asyncio
    async def test_seller_stats_without_orders(self, test_session):
        await ProductService.create_product(SELLER_ID, create_dto(), test_session)
        await ProductService.create_product(SELLER_ID, create_dto(stock=5, is_active=False), test_session)

        stats = await ProductService.get_seller_stats(SELLER_ID, test_session)

        assert stats == {
            "total_products": 2,
            "active_products": 1,
            "total_stock": 25,
            "total_orders": 0,
            "pending_orders": 0,
            "revenue": 0,
        }

    @pytest.mark.asyncio
    async def test_storefront_pages(self, test_session):
        for index in range(3):
            await ProductService.create_product(SELLER_ID, create_dto(name=f"Product {index}"), test_session)

        with patch('config.PAGE_ENTRIES', 2):
            first_page = await ProductService.list_active(test_session, page=0)
            second_page = await ProductService.list_active(test_session, page=1)

        assert len(first_page) == 2
        assert len(second_page) == 1
        assert {p.id for p in first_page}.isdisjoint(p.id for p in second_page)
