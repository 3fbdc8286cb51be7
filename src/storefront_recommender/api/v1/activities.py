"""User activity tracking API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from shared.constants import DEFAULT_HISTORY_PAGE_SIZE, MAX_HISTORY_PAGE_SIZE
from storefront_recommender.api.deps import (
    get_current_user_id,
    get_event_store,
    get_recommendation_service,
)
from storefront_recommender.api.rate_limit import activity_rate_limit, limiter
from storefront_recommender.api.v1 import recommendations
from storefront_recommender.infrastructure.database.models import ActivityType
from storefront_recommender.schemas import (
    ActivityHistoryResponse,
    ActivityLogRequest,
    ActivityLogResponse,
    ActivityRecord,
    RankedProductsResponse,
)
from storefront_recommender.services.event_store import ActivityEventStore
from storefront_recommender.services.recommendations import RecommendationService

router = APIRouter()


@router.post(
    "",
    response_model=ActivityLogResponse,
    status_code=201,
)
@limiter.limit(activity_rate_limit)
async def log_activity(
    request: Request,
    activity: ActivityLogRequest,
    user_id: str = Depends(get_current_user_id),
    store: ActivityEventStore = Depends(get_event_store),
) -> ActivityLogResponse:
    """
    Log a view, cart or wishlist activity for the caller.

    **Activity Types:**
    - `view`: User viewed a product page
    - `cart`: User added product to cart
    - `wishlist`: User added product to wishlist

    Purchases are logged by the order service through the internal
    endpoint and are rejected here.

    Limited to `rate_limit_per_minute` requests per user.
    """
    activity_id = await store.record(user_id, activity.product_id, activity.activity_type)
    return ActivityLogResponse(
        success=True,
        message="Activity logged successfully",
        activity_id=activity_id,
    )


@router.get("/me", response_model=ActivityHistoryResponse)
async def get_my_activity(
    activity_type: Annotated[ActivityType | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_HISTORY_PAGE_SIZE)] = DEFAULT_HISTORY_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
    user_id: str = Depends(get_current_user_id),
    store: ActivityEventStore = Depends(get_event_store),
) -> ActivityHistoryResponse:
    """Get the caller's own activity, newest first."""
    events = await store.history(user_id, activity_type=activity_type, limit=limit, offset=offset)
    return ActivityHistoryResponse(
        activities=[ActivityRecord.from_event(e) for e in events],
        limit=limit,
        offset=offset,
    )


@router.get("/popular", response_model=RankedProductsResponse)
async def get_popular_products(
    days: recommendations.DaysQuery = None,
    limit: recommendations.LimitQuery = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """Get the most viewed products of the last ``days`` days."""
    return await service.get_popular(window_days=days, limit=limit)


@router.get("/recommended", response_model=RankedProductsResponse)
async def get_recommended_products(
    limit: recommendations.LimitQuery = None,
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """Get recommendations from the caller's browsing history."""
    return await service.get_recommendations_for_user(user_id, limit=limit)


@router.get(
    "/frequently-bought-together/{product_id}",
    response_model=RankedProductsResponse,
)
async def get_frequently_bought_together(
    product_id: str,
    limit: recommendations.LimitQuery = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RankedProductsResponse:
    """Get products frequently bought together with ``product_id``."""
    return await service.get_frequently_bought_together(product_id, limit=limit)
