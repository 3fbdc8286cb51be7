"""Read-only access to the storefront catalog."""

from collections.abc import Collection

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_recommender.infrastructure.database.models import Product

# Catalog default order, used wherever a result has no score of its own
CATALOG_ORDER = (Product.created_at, Product.id)


class CatalogStore:
    """Queries products and categories. Never writes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, product_id: str) -> Product | None:
        return await self.session.scalar(select(Product).where(Product.id == product_id))

    async def find_by_ids(self, product_ids: Collection[str]) -> dict[str, Product]:
        """Fetch products by id. Ids missing from the catalog are simply absent."""
        if not product_ids:
            return {}
        result = await self.session.scalars(
            select(Product).where(Product.id.in_(list(product_ids)))
        )
        return {product.id: product for product in result}

    async def exists(self, product_id: str) -> bool:
        return bool(
            await self.session.scalar(select(exists().where(Product.id == product_id)))
        )

    async def find_by_category(
        self,
        category_id: str,
        exclude_id: str | None = None,
        limit: int = 8,
    ) -> list[Product]:
        """Products of one category in catalog order, optionally skipping one id."""
        query = select(Product).where(Product.category_id == category_id)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        result = await self.session.scalars(query.order_by(*CATALOG_ORDER).limit(limit))
        return list(result)

    async def find_in_categories(
        self,
        category_ids: Collection[str],
        exclude_ids: Collection[str] = (),
        limit: int = 8,
    ) -> list[Product]:
        """Products of any of the given categories, minus ``exclude_ids``."""
        if not category_ids:
            return []
        query = select(Product).where(Product.category_id.in_(list(category_ids)))
        if exclude_ids:
            query = query.where(Product.id.not_in(list(exclude_ids)))
        result = await self.session.scalars(query.order_by(*CATALOG_ORDER).limit(limit))
        return list(result)

    async def categories_of(self, product_ids: Collection[str]) -> set[str]:
        """Distinct category ids of the given products that still exist."""
        if not product_ids:
            return set()
        result = await self.session.scalars(
            select(Product.category_id).where(Product.id.in_(list(product_ids))).distinct()
        )
        return set(result)
