"""Product discovery endpoints backed by activity data."""

from fastapi import APIRouter, Depends

from storefront_recommender.api.deps import get_recommendation_service
from storefront_recommender.api.v1.recommendations import DaysQuery, LimitQuery
from storefront_recommender.schemas import RankedProductsResponse
from storefront_recommender.services.recommendations import RecommendationService

router = APIRouter()


@router.get("/popular", response_model=RankedProductsResponse)
async def get_popular_products(
    days: DaysQuery = None,
    limit: LimitQuery = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """
    Get popular products from recent views and purchases.

    Unlike ``/recommendations/popular``, purchases count towards the score
    here. Used for general discovery listings.
    """
    return await service.get_popular(window_days=days, limit=limit, include_purchases=True)


@router.get("/{product_id}/related", response_model=RankedProductsResponse)
async def get_related_products(
    product_id: str,
    limit: LimitQuery = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """Get other products from the same category as ``product_id``."""
    return await service.get_related(product_id, limit=limit)
