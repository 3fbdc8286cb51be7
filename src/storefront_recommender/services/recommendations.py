"""Recommendation service: parameter handling and the response envelope.

This is the boundary the HTTP handlers call. It resolves defaults, clamps
oversized limits, rejects non-positive ones, and wraps aggregator output in
a ``RankedProductsResponse``.
"""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from shared.constants import (
    CONTEXT_FREQUENTLY_BOUGHT_TOGETHER,
    CONTEXT_HISTORY,
    CONTEXT_POPULAR,
    CONTEXT_RELATED,
    POPULAR_ENGAGEMENT_SIGNALS,
    POPULAR_VIEW_SIGNALS,
)
from storefront_recommender.config import Settings
from storefront_recommender.exceptions import UnauthorizedError, ValidationError
from storefront_recommender.infrastructure.database.models import ActivityType, Product
from storefront_recommender.schemas import ProductSummary, RankedProductsResponse
from storefront_recommender.services.aggregator import ActivityAggregator
from storefront_recommender.services.catalog import CatalogStore


def clamp_positive(value: int | None, field: str, default: int, maximum: int) -> int:
    """Resolve an optional positive integer parameter.

    ``None`` gives ``default``, values above ``maximum`` are clamped, and
    zero or negative values raise ValidationError naming ``field``.
    """
    if value is None:
        return default
    if value <= 0:
        raise ValidationError.for_field(field, f"{field} must be a positive integer")
    return min(value, maximum)


class RecommendationService:
    """Exposes the four recommendation queries to callers."""

    def __init__(self, session: AsyncSession, settings: Settings):
        self.settings = settings
        catalog = CatalogStore(session)
        self.aggregator = ActivityAggregator(session, catalog=catalog)

    async def get_popular(
        self,
        window_days: int | None = None,
        limit: int | None = None,
        include_purchases: bool = False,
    ) -> RankedProductsResponse:
        """Popular products by views, or by views and purchases for discovery."""
        window = clamp_positive(
            window_days,
            "days",
            self.settings.default_popular_window_days,
            self.settings.max_window_days,
        )
        limit = self._limit(limit, self.settings.default_popular_limit)
        signals = POPULAR_ENGAGEMENT_SIGNALS if include_purchases else POPULAR_VIEW_SIGNALS

        products = await self.aggregator.popular(
            window_days=window,
            limit=limit,
            activity_types=[ActivityType(s) for s in signals],
        )
        return self._envelope(CONTEXT_POPULAR, products)

    async def get_recommendations_for_user(
        self, user_id: str | None, limit: int | None = None
    ) -> RankedProductsResponse:
        if not user_id:
            raise UnauthorizedError("Not authorized")
        limit = self._limit(limit, self.settings.default_history_limit)
        products = await self.aggregator.recommend_for(
            user_id, limit, recency_window=self.settings.history_recency_window
        )
        return self._envelope(CONTEXT_HISTORY, products)

    async def get_frequently_bought_together(
        self, product_id: str, limit: int | None = None
    ) -> RankedProductsResponse:
        limit = self._limit(limit, self.settings.default_copurchase_limit)
        products = await self.aggregator.co_purchased(product_id, limit)
        return self._envelope(CONTEXT_FREQUENTLY_BOUGHT_TOGETHER, products)

    async def get_related(self, product_id: str, limit: int | None = None) -> RankedProductsResponse:
        limit = self._limit(limit, self.settings.default_related_limit)
        products = await self.aggregator.related_to(product_id, limit)
        return self._envelope(CONTEXT_RELATED, products)

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    def _limit(self, value: int | None, default: int) -> int:
        return clamp_positive(value, "limit", default, self.settings.max_recommendation_limit)

    @staticmethod
    def _envelope(context: str, products: list[Product]) -> RankedProductsResponse:
        return RankedProductsResponse(
            success=True,
            context=context,
            count=len(products),
            products=[ProductSummary.from_product(p) for p in products],
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
