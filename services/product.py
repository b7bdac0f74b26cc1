import asyncio
import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import session_commit
from exceptions.catalog import CatalogUnavailableException
from exceptions.product import ProductNotFoundException
from models.product import ProductDTO
from repositories.product import ProductRepository
from utils.category_tree import get_all_child_slugs, get_category_lineage

logger = logging.getLogger(__name__)


class ProductService:

    @staticmethod
    async def get_product(product_id: int, session: Session | AsyncSession) -> ProductDTO:
        """
        Fetch the current catalog state of a product.

        The lookup is bounded by CATALOG_TIMEOUT_SECONDS.

        Raises:
            ProductNotFoundException: If the product doesn't exist
            CatalogUnavailableException: If the catalog store fails, times out or
                holds a record that cannot be read
        """
        try:
            product = await asyncio.wait_for(
                ProductRepository.get_by_id(product_id, session),
                timeout=config.CATALOG_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            raise CatalogUnavailableException(
                "product lookup",
                f"timed out after {config.CATALOG_TIMEOUT_SECONDS}s"
            )
        except (SQLAlchemyError, ValidationError) as e:
            raise CatalogUnavailableException("product lookup", str(e)) from e

        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    def get_unit_price(product: ProductDTO) -> float:
        """Discount price if set and strictly below list price, else list price."""
        if product.discount_price is not None and product.discount_price < product.price:
            return product.discount_price
        return product.price

    @staticmethod
    async def get_by_category(
        category_slug: str,
        session: Session | AsyncSession,
        min_price: float | None = None,
        max_price: float | None = None
    ) -> list[ProductDTO]:
        """
        Shop filter: products in a category or anywhere below it.

        A product matches if any of its three category levels is the slug or
        one of its descendants. Unknown slugs match nothing.
        """
        slugs = get_all_child_slugs(category_slug)
        if not slugs:
            logger.debug(f"Unknown category slug '{category_slug}', no products matched")
            return []
        return await ProductRepository.get_by_category_slugs(slugs, session, min_price, max_price)

    @staticmethod
    async def migrate_product_categories(session: Session | AsyncSession) -> int:
        """
        Backfill full category lineage on legacy products.

        Older records stored a single flat slug in `category` (which may be a
        sub or sub-sub category slug). For each such product whose slug is found
        in the category tree, rewrite category / sub_category / sub_sub_category
        to the full path. Unknown slugs and records that already carry lower
        levels are left untouched.

        Returns:
            Number of products updated
        """
        products = await ProductRepository.get_all(session)
        updated_count = 0

        for product in products:
            # Already normalised records keep their lower levels
            if product.sub_category is not None or product.sub_sub_category is not None:
                continue
            lineage = get_category_lineage(product.category)
            if lineage is None:
                continue
            if (lineage.category, lineage.sub_category, lineage.sub_sub_category) == \
                    (product.category, product.sub_category, product.sub_sub_category):
                continue
            await ProductRepository.update_lineage(product.id, lineage, session)
            updated_count += 1

        await session_commit(session)
        logger.info(f"Category migration finished: {updated_count} of {len(products)} products updated")
        return updated_count
