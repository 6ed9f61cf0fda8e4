from sqlalchemy import select, update, func, case
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_execute, session_flush
from models.product import Product, ProductDTO
from models.price_tier import PriceTier


class ProductRepository:

    @staticmethod
    async def create(product_dto: ProductDTO, session: AsyncSession) -> ProductDTO:
        product = Product(**product_dto.model_dump(exclude={'id', 'price_tiers', 'created_at', 'updated_at'}))
        product.price_tiers = [
            PriceTier(
                position=position,
                min_quantity=tier.min_quantity,
                max_quantity=tier.max_quantity,
                unit_price=tier.unit_price,
            )
            for position, tier in enumerate(product_dto.price_tiers)
        ]
        session.add(product)
        await session_flush(session)
        return await ProductRepository.get_by_id(product.id, session)

    @staticmethod
    async def get_by_id(product_id: int, session: AsyncSession) -> ProductDTO | None:
        # populate_existing: stock may have been changed by a bulk UPDATE in this session
        stmt = (select(Product)
                .where(Product.id == product_id)
                .execution_options(populate_existing=True))
        result = await session_execute(stmt, session)
        product = result.scalar()
        if product is None:
            return None
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def get_by_ids(product_ids: list[int], session: AsyncSession) -> dict[int, ProductDTO]:
        """
        Batch load products for multiple ids (eliminates N+1 queries).

        Args:
            product_ids: List of product IDs
            session: Database session

        Returns:
            Dict mapping product_id -> ProductDTO; missing ids are absent
        """
        if not product_ids:
            return {}

        stmt = (select(Product)
                .where(Product.id.in_(product_ids))
                .execution_options(populate_existing=True))
        result = await session_execute(stmt, session)
        products = result.scalars().all()
        return {product.id: ProductDTO.model_validate(product, from_attributes=True) for product in products}

    @staticmethod
    async def get_active(session: AsyncSession, category: str | None = None,
                         search: str | None = None, page: int | None = None) -> list[ProductDTO]:
        stmt = select(Product).where(Product.is_active == True, Product.stock > 0)
        if category:
            stmt = stmt.where(Product.category == category)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(func.lower(Product.name).like(pattern) | func.lower(Product.description).like(pattern))
        stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc())
        if page is not None:
            stmt = stmt.limit(config.PAGE_ENTRIES).offset(page * config.PAGE_ENTRIES)
        result = await session_execute(stmt, session)
        return [ProductDTO.model_validate(product, from_attributes=True) for product in result.scalars().all()]

    @staticmethod
    async def get_by_seller(seller_id: int, session: AsyncSession) -> list[ProductDTO]:
        stmt = (select(Product)
                .where(Product.seller_id == seller_id)
                .order_by(Product.created_at.desc(), Product.id.desc()))
        result = await session_execute(stmt, session)
        return [ProductDTO.model_validate(product, from_attributes=True) for product in result.scalars().all()]

    @staticmethod
    async def get_all(session: AsyncSession) -> list[ProductDTO]:
        stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        result = await session_execute(stmt, session)
        return [ProductDTO.model_validate(product, from_attributes=True) for product in result.scalars().all()]

    @staticmethod
    async def update(product_id: int, values: dict, session: AsyncSession) -> None:
        if not values:
            return
        stmt = update(Product).where(Product.id == product_id).values(**values)
        await session_execute(stmt, session)

    @staticmethod
    async def decrement_stock(product_id: int, quantity: int, session: AsyncSession) -> bool:
        """
        Conditionally decrement stock in a single statement.

        The WHERE clause makes the check-and-decrement atomic at the storage
        layer: when two buyers race for the last units, only one UPDATE
        matches the row.

        Args:
            product_id: ID of the product
            quantity: Units to remove from stock
            session: Database session

        Returns:
            True if stock was decremented, False if the product is missing,
            inactive, or has fewer than `quantity` units left
        """
        stmt = (update(Product)
                .where(Product.id == product_id,
                       Product.is_active == True,
                       Product.stock >= quantity)
                .values(stock=Product.stock - quantity)
                .execution_options(synchronize_session=False))
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def delete(product_id: int, session: AsyncSession) -> None:
        stmt = select(Product).where(Product.id == product_id)
        result = await session_execute(stmt, session)
        product = result.scalar()
        if product is not None:
            await session.delete(product)

    @staticmethod
    async def get_stats_by_seller(seller_id: int, session: AsyncSession) -> dict:
        stmt = (select(func.count(Product.id),
                       func.coalesce(func.sum(case((Product.is_active == True, 1), else_=0)), 0),
                       func.coalesce(func.sum(Product.stock), 0))
                .where(Product.seller_id == seller_id))
        result = await session_execute(stmt, session)
        total, active, stock = result.one()
        return {"total_products": total, "active_products": int(active), "total_stock": int(stock)}
