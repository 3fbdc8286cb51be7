"""Join ranked product ids back to catalog records."""

from collections.abc import Sequence

import structlog

from storefront_recommender.infrastructure.database.models import Product
from storefront_recommender.services.catalog import CatalogStore

logger = structlog.get_logger()


async def hydrate(catalog: CatalogStore, ranked_ids: Sequence[str]) -> list[Product]:
    """Resolve ``ranked_ids`` to products, keeping rank order.

    Ids that no longer exist in the catalog are dropped without replacement,
    so the result can be shorter than the input. Repeated ids keep their
    first position.
    """
    by_id = await catalog.find_by_ids(set(ranked_ids))

    products: list[Product] = []
    seen: set[str] = set()
    for product_id in ranked_ids:
        if product_id in seen:
            continue
        seen.add(product_id)
        product = by_id.get(product_id)
        if product is not None:
            products.append(product)

    dropped = len(seen) - len(products)
    if dropped:
        logger.debug("hydration_dropped", dropped=dropped, requested=len(seen))
    return products
