"""Recommendation API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from storefront_recommender.api.deps import get_current_user_id, get_recommendation_service
from storefront_recommender.schemas import RankedProductsResponse
from storefront_recommender.services.recommendations import RecommendationService

router = APIRouter()

LimitQuery = Annotated[int | None, Query(description="Maximum number of products")]
DaysQuery = Annotated[int | None, Query(description="Size of the popularity window in days")]


@router.get("/popular", response_model=RankedProductsResponse)
async def get_popular_products(
    days: DaysQuery = None,
    limit: LimitQuery = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """
    Get the most viewed products of the last ``days`` days.

    **Algorithm:**
    1. Count view events per product inside the window
    2. Order by count, highest first
    3. Join back to the catalog, dropping deleted products

    **Usage in UI:**
    - Homepage "Popular now" carousel
    """
    return await service.get_popular(window_days=days, limit=limit)


@router.get("/history", response_model=RankedProductsResponse)
async def get_history_recommendations(
    limit: LimitQuery = None,
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """
    Get recommendations from the caller's browsing history.

    **Algorithm:**
    1. Take the categories of the caller's 10 most recent views
    2. List products of those categories
    3. Exclude everything the caller has viewed or purchased

    **Usage in UI:**
    - "Recommended for you" section for signed-in users
    """
    return await service.get_recommendations_for_user(user_id, limit=limit)


@router.get("/related/{product_id}", response_model=RankedProductsResponse)
async def get_related_products(
    product_id: str,
    limit: LimitQuery = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """Get other products from the same category as ``product_id``."""
    return await service.get_related(product_id, limit=limit)


@router.get(
    "/frequently-bought-together/{product_id}",
    response_model=RankedProductsResponse,
)
async def get_frequently_bought_together(
    product_id: str,
    limit: LimitQuery = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """
    Get products frequently bought together with ``product_id``.

    **Algorithm:**
    1. Find every user who purchased the product
    2. Count their purchases of other products
    3. Return the most frequent, highest count first

    **Usage in UI:**
    - Product page "Frequently Bought Together" section
    """
    return await service.get_frequently_bought_together(product_id, limit=limit)
