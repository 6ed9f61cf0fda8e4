from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute
from models.orderItem import OrderItem


class OrderItemRepository:
    @staticmethod
    async def get_order_ids_by_seller(seller_id: int, session: AsyncSession) -> list[int]:
        stmt = select(OrderItem.order_id).where(OrderItem.seller_id == seller_id).distinct()
        result = await session_execute(stmt, session)
        return list(result.scalars().all())
