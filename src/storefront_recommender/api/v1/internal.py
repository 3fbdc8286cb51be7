"""Activity logging for other storefront services.

The order service logs one ``purchase`` per order line item here; the cart
and wishlist flows may log their own events too. Callers authenticate with
the shared internal API key.
"""

from fastapi import APIRouter, Depends

from storefront_recommender.api.deps import get_event_store, require_internal_caller
from storefront_recommender.schemas import (
    ActivityLogResponse,
    BatchActivityLogResponse,
    BatchActivityRequest,
    InternalActivityRequest,
)
from storefront_recommender.services.event_store import ActivityEventStore, NewActivity

router = APIRouter(dependencies=[Depends(require_internal_caller)])


@router.post("/activities", response_model=ActivityLogResponse, status_code=201)
async def record_activity(
    activity: InternalActivityRequest,
    store: ActivityEventStore = Depends(get_event_store),
) -> ActivityLogResponse:
    """Record one activity of any type, including purchases."""
    activity_id = await store.record(
        activity.user_id,
        activity.product_id,
        activity.activity_type,
        timestamp=activity.timestamp,
    )
    return ActivityLogResponse(
        success=True,
        message="Activity logged successfully",
        activity_id=activity_id,
    )


@router.post("/activities/batch", response_model=BatchActivityLogResponse, status_code=201)
async def record_activities_batch(
    request: BatchActivityRequest,
    store: ActivityEventStore = Depends(get_event_store),
) -> BatchActivityLogResponse:
    """
    Record several activities at once.

    **Limits:**
    - Maximum 100 activities per request
    - All or nothing: an unknown product rejects the whole batch
    """
    activity_ids = await store.record_many(
        NewActivity(a.user_id, a.product_id, a.activity_type, a.timestamp)
        for a in request.activities
    )
    return BatchActivityLogResponse(
        success=True,
        recorded_count=len(activity_ids),
        activity_ids=activity_ids,
    )
