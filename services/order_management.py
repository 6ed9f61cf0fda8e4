"""
Order Management Service

Admin/seller side of the order lifecycle: status changes, listings and
statistics. Status rules live in utils.order_state_machine; this service
applies them to stored orders.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_rollback
from enums.order_filter import OrderFilterType
from enums.order_status import OrderStatus
from exceptions.order import InvalidStatusTransitionException, OrderNotFoundException, OrderOwnershipException
from models.order import OrderDTO
from repositories.order import OrderRepository
from utils.order_filters import get_status_filter_for_filter_type
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class OrderManagementService:

    @staticmethod
    async def update_status(
        order_id: int,
        new_status: str | OrderStatus,
        session: AsyncSession,
        actor_id: int | None = None,
        seller_id: int | None = None,
        now: datetime | None = None
    ) -> OrderDTO:
        """
        Move an order to a new status.

        Entering DELIVERED stamps delivered_at once. Re-sending the current
        status is a no-op that returns the unchanged order.

        Args:
            order_id: Order to update
            new_status: Target status (enum or its literal string value)
            session: Database session
            actor_id: Admin/seller performing the change, for the audit log
            seller_id: When set, the order must contain a product of this seller
            now: Clock override for delivered_at

        Returns:
            Updated OrderDTO

        Raises:
            OrderNotFoundException: If the order doesn't exist
            OrderOwnershipException: If seller_id has no product in the order
            InvalidStatusTransitionException: If the status is unknown, the move is not allowed,
                or another update changed the status first
        """
        target = OrderStateMachine.parse_status(new_status)

        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if seller_id is not None and all(item.seller_id != seller_id for item in order.items):
            raise OrderOwnershipException(order_id, seller_id)

        target = OrderStateMachine.validate_and_log_transition(order_id, order.status, target, actor_id)
        if target == order.status:
            return order

        delivered_at = OrderStateMachine.delivered_at_for(target, order.delivered_at, now)
        try:
            updated = await OrderRepository.update_status(
                order_id,
                target,
                session,
                delivered_at=delivered_at if delivered_at != order.delivered_at else None,
                expected_status=order.status
            )
            if updated is None:
                # Status changed since it was read
                current = await OrderRepository.get_by_id(order_id, session)
                if current is None:
                    raise OrderNotFoundException(order_id)
                logger.warning(
                    f"Order {order_id} moved to {current.status.value} concurrently, "
                    f"dropping {order.status.value} -> {target.value}"
                )
                raise InvalidStatusTransitionException(
                    current_status=current.status.value,
                    requested_status=target.value,
                    order_id=order_id
                )
            await session_commit(session)
        except Exception:
            await session_rollback(session)
            raise
        return updated

    @staticmethod
    async def list_orders(
        session: AsyncSession,
        filter_type: OrderFilterType | int | None = None
    ) -> list[OrderDTO]:
        """All orders matching an admin filter, newest first."""
        statuses = get_status_filter_for_filter_type(filter_type)
        return await OrderRepository.get_all(session, statuses)

    @staticmethod
    async def get_statistics(session: AsyncSession) -> dict:
        """
        Order counts per status and delivered revenue.

        Returns:
            dict with keys:
            - total_orders: int
            - by_status: dict[str, int] with every status present (0 if none)
            - revenue: float - sum of delivered orders (cash collected)
            - pending_revenue: float - sum of orders still in progress
        """
        counts = await OrderRepository.count_by_status(session)
        by_status = {status.value: counts.get(status, 0) for status in OrderStatus}
        in_progress = [s for s in OrderStatus if not OrderStateMachine.is_final_status(s)]
        return {
            "total_orders": sum(by_status.values()),
            "by_status": by_status,
            "revenue": await OrderRepository.get_revenue(session, [OrderStatus.DELIVERED]),
            "pending_revenue": await OrderRepository.get_revenue(session, in_progress),
        }
