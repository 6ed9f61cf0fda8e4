import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_rollback
from enums.order_status import OrderStatus
from exceptions.cart import EmptyCartException
from exceptions.order import (
    InsufficientStockException,
    OrderNotFoundException,
    OrderOwnershipException,
    OrderValidationException,
)
from exceptions.product import ProductUnavailableException
from models.cart import CartLineDTO, CartSnapshotDTO
from models.order import OrderDTO, CheckoutDTO
from models.orderItem import OrderItemDTO
from repositories.order import OrderRepository
from repositories.product import ProductRepository
from services.cart import CartStore
from services.pricing import PricingService

logger = logging.getLogger(__name__)


class OrderService:

    @staticmethod
    def merge_lines(lines: list[CartLineDTO]) -> list[CartLineDTO]:
        """
        Collapse lines repeating a product into one, summing quantities.

        CartStore never repeats a product, but a posted cart may. The first
        line of each product keeps its position and snapshot.
        """
        merged: dict[int, CartLineDTO] = {}
        for line in lines:
            existing = merged.get(line.product_id)
            if existing is None:
                merged[line.product_id] = line
                continue
            merged[line.product_id] = existing.model_copy(
                update={'quantity_selected': existing.quantity_selected + line.quantity_selected}
            )
        if len(merged) != len(lines):
            logger.info(f"Checkout: merged {len(lines) - len(merged)} repeated cart lines")
        return list(merged.values())

    @staticmethod
    async def build_order_items(snapshot: CartSnapshotDTO, session: AsyncSession) -> list[OrderItemDTO]:
        """
        Re-validate every cart line against authoritative product data.

        The cart may be arbitrarily stale: another buyer may have bought the
        last units, or the seller may have changed prices. Quantities come
        from the cart; availability, stock and unit prices come from the
        current product rows and tier tables.

        Lines repeating a product are merged first, so stock is checked
        against the combined quantity.

        Returns:
            One OrderItemDTO per product, priced at the current tier table

        Raises:
            ProductUnavailableException: Single line whose product is gone or inactive
            InsufficientStockException: Single line exceeding current stock
            OrderValidationException: Several lines failed; carries each error
        """
        lines = OrderService.merge_lines(snapshot.lines)
        products = await ProductRepository.get_by_ids([line.product_id for line in lines], session)

        errors = []
        order_items = []
        for line in lines:
            product = products.get(line.product_id)
            if product is None or not product.is_active:
                errors.append(ProductUnavailableException(line.product_id, line.product_snapshot.name))
                continue
            if product.stock < line.quantity_selected:
                errors.append(InsufficientStockException(
                    product_id=product.id,
                    requested=line.quantity_selected,
                    available=product.stock
                ))
                continue

            pricing = PricingService.calculate(product.price_tiers, line.quantity_selected)
            if pricing.unit_price != line.unit_price_at_selection:
                logger.info(
                    f"Checkout: price of product {product.id} changed since selection "
                    f"({line.unit_price_at_selection:.2f} -> {pricing.unit_price:.2f})"
                )
            order_items.append(OrderItemDTO(
                product_id=product.id,
                seller_id=product.seller_id,
                product_name=product.name,
                quantity=line.quantity_selected,
                unit_price=pricing.unit_price,
                total_price=pricing.total,
            ))

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise OrderValidationException(errors)
        return order_items

    @staticmethod
    async def create_order(
        snapshot: CartSnapshotDTO,
        checkout: CheckoutDTO,
        user_id: int,
        session: AsyncSession
    ) -> OrderDTO:
        """
        Turn a cart snapshot into a persisted order.

        Order insert, item inserts and stock decrements share one
        transaction: either everything is committed or nothing is.

        Args:
            snapshot: Cart lines at checkout time
            checkout: Shipping address, phone and optional notes
            user_id: Authenticated buyer
            session: Database session (transaction is committed here)

        Returns:
            The persisted OrderDTO with status PENDING

        Raises:
            EmptyCartException: If the snapshot has no lines
            ProductUnavailableException, InsufficientStockException,
            OrderValidationException: If re-validation fails
        """
        if not snapshot.lines:
            raise EmptyCartException(user_id=user_id)

        try:
            order_items = await OrderService.build_order_items(snapshot, session)

            order_dto = OrderDTO(
                user_id=user_id,
                status=OrderStatus.PENDING,
                total_amount=round(sum(item.total_price for item in order_items), 2),
                shipping_address=checkout.shipping_address,
                phone=checkout.phone,
                notes=checkout.notes,
                created_at=datetime.now(),
                items=order_items,
            )
            order = await OrderRepository.create(order_dto, session)

            # Conditional decrement: a concurrent checkout may have taken the stock
            # after build_order_items() read it
            for item in order_items:
                decremented = await ProductRepository.decrement_stock(item.product_id, item.quantity, session)
                if not decremented:
                    raise InsufficientStockException(product_id=item.product_id, requested=item.quantity)

            await session_commit(session)
        except Exception:
            await session_rollback(session)
            raise

        logger.info(
            f"Order {order.id} created for user {user_id}: {len(order.items)} items, "
            f"total {order.total_amount:.2f}"
        )
        return order

    @staticmethod
    async def place_order(
        cart_store: CartStore,
        checkout: CheckoutDTO,
        user_id: int,
        session: AsyncSession
    ) -> OrderDTO:
        """
        Checkout the buyer's cart.

        The cart is cleared only after the order was committed. On any
        failure the exception propagates and the cart keeps its lines, so
        the buyer can fix the offending product and retry.
        """
        order = await OrderService.create_order(cart_store.snapshot(), checkout, user_id, session)
        cart_store.clear()
        return order

    @staticmethod
    async def get_order(order_id: int, session: AsyncSession, user_id: int | None = None) -> OrderDTO:
        """
        Get an order, optionally checking that `user_id` placed it.

        Raises:
            OrderNotFoundException: If the order doesn't exist
            OrderOwnershipException: If user_id is given and doesn't own the order
        """
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if user_id is not None and order.user_id != user_id:
            raise OrderOwnershipException(order_id, user_id)
        return order

    @staticmethod
    async def list_user_orders(user_id: int, session: AsyncSession) -> list[OrderDTO]:
        """Orders placed by a buyer, newest first."""
        return await OrderRepository.get_by_user_id(user_id, session)
