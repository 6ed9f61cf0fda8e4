from datetime import datetime

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from models.order import Order, OrderDTO
from models.orderItem import OrderItem


class OrderRepository:
    @staticmethod
    async def create(order_dto: OrderDTO, session: AsyncSession) -> OrderDTO:
        """
        Insert an order together with its items.

        Only flushes; the caller owns the transaction so that the order,
        its items and the stock decrements commit or roll back together.
        """
        order = Order(**order_dto.model_dump(exclude={'id', 'items', 'updated_at'}))
        order.items = [
            OrderItem(**item.model_dump(exclude={'id', 'order_id'}))
            for item in order_dto.items
        ]
        session.add(order)
        await session_flush(session)
        return await OrderRepository.get_by_id(order.id, session)

    @staticmethod
    async def get_by_id(order_id: int, session: AsyncSession) -> OrderDTO | None:
        stmt = (select(Order)
                .where(Order.id == order_id)
                .execution_options(populate_existing=True))
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> list[OrderDTO]:
        stmt = (select(Order)
                .where(Order.user_id == user_id)
                .order_by(Order.created_at.desc(), Order.id.desc()))
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def get_by_ids(order_ids: list[int], session: AsyncSession) -> list[OrderDTO]:
        if not order_ids:
            return []
        stmt = (select(Order)
                .where(Order.id.in_(order_ids))
                .order_by(Order.created_at.desc(), Order.id.desc()))
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def get_all(session: AsyncSession, statuses: list[OrderStatus] | None = None) -> list[OrderDTO]:
        stmt = select(Order)
        if statuses is not None:
            stmt = stmt.where(Order.status.in_(statuses))
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc())
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def update_status(order_id: int, status: OrderStatus, session: AsyncSession,
                            delivered_at: datetime | None = None,
                            expected_status: OrderStatus | None = None) -> OrderDTO | None:
        """
        Set the status of an order.

        With expected_status the row is only updated while it still holds
        that status. Returns None when no row was updated.
        """
        values = {"status": status, "updated_at": datetime.now()}
        if delivered_at is not None:
            values["delivered_at"] = delivered_at
        stmt = (update(Order)
                .where(Order.id == order_id)
                .values(**values)
                .execution_options(synchronize_session=False))
        if expected_status is not None:
            stmt = stmt.where(Order.status == expected_status)
        result = await session_execute(stmt, session)
        if result.rowcount == 0:
            return None
        return await OrderRepository.get_by_id(order_id, session)

    @staticmethod
    async def count_by_status(session: AsyncSession) -> dict[OrderStatus, int]:
        stmt = select(Order.status, func.count(Order.id)).group_by(Order.status)
        result = await session_execute(stmt, session)
        return {status: count for status, count in result.all()}

    @staticmethod
    async def get_revenue(session: AsyncSession, statuses: list[OrderStatus]) -> float:
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(Order.status.in_(statuses))
        result = await session_execute(stmt, session)
        return round(float(result.scalar()), 2)
