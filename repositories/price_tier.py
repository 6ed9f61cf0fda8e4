from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.price_tier import PriceTier, PriceTierDTO


class PriceTierRepository:
    """Repository for price tier operations."""

    @staticmethod
    async def replace_for_product(
        product_id: int,
        tiers: list[PriceTierDTO],
        session: AsyncSession
    ) -> None:
        """
        Replace the whole tier table of a product.

        Tiers are only ever edited as a table, partial edits would let a
        seller create gaps or overlaps between two requests.

        Args:
            product_id: ID of the product
            tiers: New tier table, already validated
            session: Database session
        """
        await PriceTierRepository.delete_by_product_id(product_id, session)
        for position, tier in enumerate(tiers):
            session.add(PriceTier(
                product_id=product_id,
                position=position,
                min_quantity=tier.min_quantity,
                max_quantity=tier.max_quantity,
                unit_price=tier.unit_price,
            ))
        await session_flush(session)

    @staticmethod
    async def delete_by_product_id(
        product_id: int,
        session: AsyncSession
    ) -> int:
        """
        Delete all price tiers for a product.

        Returns:
            Number of tiers deleted
        """
        stmt = delete(PriceTier).where(PriceTier.product_id == product_id)
        result = await session_execute(stmt, session)
        return result.rowcount
