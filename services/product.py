import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_rollback
from enums.order_status import OrderStatus
from enums.user_role import UserRole
from exceptions.product import ProductNotFoundException, ProductOwnershipException
from models.product import ProductDTO, ProductCreateDTO, ProductUpdateDTO
from repositories.order import OrderRepository
from repositories.orderItem import OrderItemRepository
from repositories.price_tier import PriceTierRepository
from repositories.product import ProductRepository
from services.pricing import PricingService

logger = logging.getLogger(__name__)


class ProductService:
    """Seller and admin side of the catalogue."""

    @staticmethod
    async def get_product(product_id: int, session: AsyncSession) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def get_owned_product(product_id: int, actor_id: int, actor_role: UserRole,
                                session: AsyncSession) -> ProductDTO:
        """
        Load a product the actor may modify: sellers only their own, admins any.

        Raises:
            ProductNotFoundException: If the product doesn't exist
            ProductOwnershipException: If a seller doesn't own the product
        """
        product = await ProductService.get_product(product_id, session)
        if actor_role != UserRole.ADMIN and product.seller_id != actor_id:
            raise ProductOwnershipException(product_id, actor_id)
        return product

    @staticmethod
    async def create_product(seller_id: int, product_create: ProductCreateDTO, session: AsyncSession) -> ProductDTO:
        """
        Create a product for a seller.

        Raises:
            PricingConfigurationException: If the tier table is ill-formed
        """
        PricingService.validate_tiers(product_create.price_tiers)
        try:
            product = await ProductRepository.create(
                ProductDTO(seller_id=seller_id, **product_create.model_dump()),
                session
            )
            await session_commit(session)
        except Exception:
            await session_rollback(session)
            raise
        logger.info(f"Product {product.id} created by seller {seller_id} ({len(product.price_tiers)} price tiers)")
        return product

    @staticmethod
    async def update_product(product_id: int, product_update: ProductUpdateDTO, actor_id: int,
                             actor_role: UserRole, session: AsyncSession) -> ProductDTO:
        """
        Apply a partial update. A new tier table replaces the old one whole.

        Placed orders are unaffected: their items carry their own prices.
        """
        await ProductService.get_owned_product(product_id, actor_id, actor_role, session)

        values = product_update.model_dump(exclude_unset=True, exclude_none=True, exclude={'price_tiers'})
        tiers = product_update.price_tiers
        if tiers is not None:
            PricingService.validate_tiers(tiers, product_id)

        try:
            await ProductRepository.update(product_id, values, session)
            if tiers is not None:
                await PriceTierRepository.replace_for_product(product_id, tiers, session)
            await session_commit(session)
        except Exception:
            await session_rollback(session)
            raise

        logger.info(f"Product {product_id} updated by user {actor_id}: {sorted(values) + (['price_tiers'] if tiers is not None else [])}")
        return await ProductService.get_product(product_id, session)

    @staticmethod
    async def set_active(product_id: int, is_active: bool, actor_id: int, actor_role: UserRole,
                         session: AsyncSession) -> ProductDTO:
        return await ProductService.update_product(
            product_id, ProductUpdateDTO(is_active=is_active), actor_id, actor_role, session
        )

    @staticmethod
    async def delete_product(product_id: int, actor_id: int, actor_role: UserRole, session: AsyncSession,
                             hard: bool = False) -> None:
        """
        Remove a product from the storefront.

        Default is a soft delete (deactivation). A hard delete removes the
        row and its tiers; order items keep their own copy of name and price.
        """
        if not hard:
            await ProductService.set_active(product_id, False, actor_id, actor_role, session)
            return

        await ProductService.get_owned_product(product_id, actor_id, actor_role, session)
        try:
            await ProductRepository.delete(product_id, session)
            await session_commit(session)
        except Exception:
            await session_rollback(session)
            raise
        logger.warning(f"Product {product_id} permanently deleted by user {actor_id}")

    @staticmethod
    async def list_active(session: AsyncSession, category: str | None = None,
                          search: str | None = None, page: int | None = None) -> list[ProductDTO]:
        """Storefront listing: active products with stock, newest first. Pages hold config.PAGE_ENTRIES products."""
        return await ProductRepository.get_active(session, category, search, page)

    @staticmethod
    async def list_by_seller(seller_id: int, session: AsyncSession) -> list[ProductDTO]:
        return await ProductRepository.get_by_seller(seller_id, session)

    @staticmethod
    async def list_all(session: AsyncSession) -> list[ProductDTO]:
        return await ProductRepository.get_all(session)

    @staticmethod
    async def get_seller_stats(seller_id: int, session: AsyncSession) -> dict:
        """
        Dashboard figures for one seller.

        Returns:
            dict with keys:
            - total_products, active_products, total_stock: int
            - total_orders: int - non-cancelled orders containing the seller's products
            - pending_orders: int - of those, orders still in PENDING
            - revenue: float - seller's share of delivered orders
        """
        stats = await ProductRepository.get_stats_by_seller(seller_id, session)

        order_ids = await OrderItemRepository.get_order_ids_by_seller(seller_id, session)
        orders = [o for o in await OrderRepository.get_by_ids(order_ids, session) if o.status != OrderStatus.CANCELLED]
        revenue = sum(
            item.total_price
            for order in orders if order.status == OrderStatus.DELIVERED
            for item in order.items if item.seller_id == seller_id
        )

        stats.update({
            "total_orders": len(orders),
            "pending_orders": sum(1 for o in orders if o.status == OrderStatus.PENDING),
            "revenue": round(revenue, 2),
        })
        return stats
