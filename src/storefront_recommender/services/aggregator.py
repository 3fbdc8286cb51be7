"""Activity aggregation into ranked product lists.

Every ranking is computed from the raw event log on each call; nothing is
rolled up or cached between calls.

Ties in event counts have no natural order in the store, so rankings break
them by product id ascending to keep repeated reads identical.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import NamedTuple

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_recommender.exceptions import ProductNotFoundError
from storefront_recommender.infrastructure.database.models import (
    ActivityEvent,
    ActivityType,
    Product,
    utc_now,
)
from storefront_recommender.services.catalog import CatalogStore
from storefront_recommender.services.hydration import hydrate

logger = structlog.get_logger()


class ScoredProduct(NamedTuple):
    """A ranked product id with the event count behind its rank."""

    product_id: str
    score: int


class ActivityAggregator:
    """Computes popular, personalized, co-purchased and related rankings."""

    def __init__(self, session: AsyncSession, catalog: CatalogStore | None = None):
        self.session = session
        self.catalog = catalog or CatalogStore(session)

    # ==========================================================================
    # Popular
    # ==========================================================================

    async def rank_popular(
        self,
        window_days: int,
        limit: int,
        activity_types: Iterable[ActivityType] = (ActivityType.VIEW,),
        now: datetime | None = None,
    ) -> list[ScoredProduct]:
        """Count matching events per product within ``[now - window_days, now]``."""
        end = now or utc_now()
        start = end - timedelta(days=window_days)

        score = func.count(ActivityEvent.id).label("score")
        query = (
            select(ActivityEvent.external_product_id, score)
            .where(
                ActivityEvent.activity_type.in_(list(activity_types)),
                ActivityEvent.timestamp >= start,
                ActivityEvent.timestamp <= end,
            )
            .group_by(ActivityEvent.external_product_id)
            .order_by(score.desc(), ActivityEvent.external_product_id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [ScoredProduct(row.external_product_id, row.score) for row in result]

    async def popular(
        self,
        window_days: int,
        limit: int,
        activity_types: Iterable[ActivityType] = (ActivityType.VIEW,),
        now: datetime | None = None,
    ) -> list[Product]:
        """
        Most active products over a recent window.

        Args:
            window_days: Size of the window ending at ``now``
            limit: Maximum number of products
            activity_types: Event kinds that count towards the score
            now: End of the window, defaults to the current time

        Returns:
            Products in descending score order. Products deleted from the
            catalog are dropped, so the list may be shorter than ``limit``.
        """
        ranked = await self.rank_popular(window_days, limit, activity_types, now)
        products = await hydrate(self.catalog, [r.product_id for r in ranked])
        logger.debug(
            "popular_computed",
            window_days=window_days,
            ranked=len(ranked),
            returned=len(products),
        )
        return products

    # ==========================================================================
    # Personalized (history based)
    # ==========================================================================

    async def recommend_for(
        self,
        user_id: str,
        limit: int,
        recency_window: int = 10,
    ) -> list[Product]:
        """
        Products from the categories a user browsed recently.

        Categories come from the user's ``recency_window`` most recent views.
        Anything the user has ever viewed or purchased is excluded. Results
        follow catalog order; this is a filter, not a scored ranking.
        """
        recent_views = await self.session.scalars(
            select(ActivityEvent.external_product_id)
            .where(
                ActivityEvent.external_user_id == user_id,
                ActivityEvent.activity_type == ActivityType.VIEW,
            )
            .order_by(ActivityEvent.timestamp.desc(), ActivityEvent.id.desc())
            .limit(recency_window)
        )
        recently_viewed = set(recent_views)
        if not recently_viewed:
            return []

        categories = await self.catalog.categories_of(recently_viewed)
        if not categories:
            return []

        seen = await self.session.scalars(
            select(ActivityEvent.external_product_id)
            .where(
                ActivityEvent.external_user_id == user_id,
                ActivityEvent.activity_type.in_([ActivityType.VIEW, ActivityType.PURCHASE]),
            )
            .distinct()
        )
        excluded = recently_viewed | set(seen)

        products = await self.catalog.find_in_categories(categories, excluded, limit)
        logger.debug(
            "history_recommendations_computed",
            user_id=user_id,
            categories=len(categories),
            excluded=len(excluded),
            returned=len(products),
        )
        return products

    # ==========================================================================
    # Frequently bought together
    # ==========================================================================

    async def rank_co_purchased(self, anchor_product_id: str, limit: int) -> list[ScoredProduct]:
        """Count purchases of other products by everyone who bought the anchor."""
        buyers = select(ActivityEvent.external_user_id).where(
            ActivityEvent.external_product_id == anchor_product_id,
            ActivityEvent.activity_type == ActivityType.PURCHASE,
        )

        frequency = func.count(ActivityEvent.id).label("frequency")
        query = (
            select(ActivityEvent.external_product_id, frequency)
            .where(
                ActivityEvent.activity_type == ActivityType.PURCHASE,
                ActivityEvent.external_user_id.in_(buyers),
                ActivityEvent.external_product_id != anchor_product_id,
            )
            .group_by(ActivityEvent.external_product_id)
            .order_by(frequency.desc(), ActivityEvent.external_product_id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [ScoredProduct(row.external_product_id, row.frequency) for row in result]

    async def co_purchased(self, anchor_product_id: str, limit: int) -> list[Product]:
        """
        Products most often bought by the anchor's buyers.

        Raises:
            ProductNotFoundError: the anchor is not in the catalog
        """
        if not await self.catalog.exists(anchor_product_id):
            raise ProductNotFoundError(anchor_product_id)

        ranked = await self.rank_co_purchased(anchor_product_id, limit)
        return await hydrate(self.catalog, [r.product_id for r in ranked])

    # ==========================================================================
    # Related by category
    # ==========================================================================

    async def related_to(self, product_id: str, limit: int) -> list[Product]:
        """
        Other products of the same category, in catalog order.

        Raises:
            ProductNotFoundError: ``product_id`` is not in the catalog
        """
        product = await self.catalog.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return await self.catalog.find_by_category(
            product.category_id, exclude_id=product.id, limit=limit
        )
