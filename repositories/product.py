from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.category import CategoryLineage
from models.product import Product, ProductDTO, InstallationOverrideDTO


class ProductRepository:

    @staticmethod
    async def get_by_id(product_id: int, session: Session | AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
        result = await session_execute(stmt, session)
        product = result.scalar()
        if product is None:
            return None
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def get_all(session: Session | AsyncSession) -> list[ProductDTO]:
        stmt = select(Product).order_by(Product.id)
        result = await session_execute(stmt, session)
        return [ProductDTO.model_validate(p, from_attributes=True) for p in result.scalars().all()]

    @staticmethod
    async def create(product_dto: ProductDTO, session: Session | AsyncSession) -> int:
        data = product_dto.model_dump(
            mode="json",
            exclude_none=True,
            exclude={'id', 'created_at', 'updated_at'}
        )
        product = Product(**data)
        session.add(product)
        await session_flush(session)
        return product.id

    @staticmethod
    async def update_prices(
        product_id: int,
        price: float,
        discount_price: float | None,
        session: Session | AsyncSession
    ) -> None:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(price=price, discount_price=discount_price)
        )
        await session_execute(stmt, session)

    @staticmethod
    async def update_installation_override(
        product_id: int,
        override: InstallationOverrideDTO | None,
        session: Session | AsyncSession
    ) -> None:
        """
        Replace a product's installation override.

        Passing None removes the override so the product defers to category rules.
        """
        value = override.model_dump(mode="json") if override is not None else None
        stmt = update(Product).where(Product.id == product_id).values(installation_override=value)
        await session_execute(stmt, session)

    @staticmethod
    async def update_lineage(
        product_id: int,
        lineage: CategoryLineage,
        session: Session | AsyncSession
    ) -> None:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(
                category=lineage.category,
                sub_category=lineage.sub_category,
                sub_sub_category=lineage.sub_sub_category
            )
        )
        await session_execute(stmt, session)

    @staticmethod
    async def decrement_stock(product_id: int, quantity: int, session: Session | AsyncSession) -> bool:
        """
        Atomically take `quantity` units out of stock.

        Single conditional UPDATE (stock = stock - qty WHERE stock >= qty), so two
        concurrent checkouts can never both consume the last unit.

        Returns:
            True if stock was decremented, False if not enough stock (or no such product)
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session="fetch")
        )
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def get_by_category_slugs(
        slugs: set[str],
        session: Session | AsyncSession,
        min_price: float | None = None,
        max_price: float | None = None
    ) -> list[ProductDTO]:
        """
        Products classified under any of the given slugs at any category level.

        Args:
            slugs: Category slugs (usually from get_all_child_slugs)
            min_price: Optional lower bound on list price
            max_price: Optional upper bound on list price
        """
        if not slugs:
            return []

        stmt = select(Product).where(
            or_(
                Product.category.in_(slugs),
                Product.sub_category.in_(slugs),
                Product.sub_sub_category.in_(slugs)
            )
        )
        if min_price is not None:
            stmt = stmt.where(Product.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)
        stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc())

        result = await session_execute(stmt, session)
        return [ProductDTO.model_validate(p, from_attributes=True) for p in result.scalars().all()]
