"""Request and response models shared by the services and the API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from shared.constants import INTERACTION_BATCH_SIZE
from storefront_recommender.infrastructure.database.models import ActivityEvent, Product


class CategorySummary(BaseModel):
    """Category reference embedded in a product summary."""

    id: str
    name: str
    slug: str


class ProductSummary(BaseModel):
    """Catalog fields returned with every recommendation."""

    id: str
    name: str
    slug: str
    price: float
    images: list[str] = Field(default_factory=list)
    stock: int
    category: CategorySummary | None = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductSummary":
        category = None
        if product.category is not None:
            category = CategorySummary(
                id=product.category.id,
                name=product.category.name,
                slug=product.category.slug,
            )
        return cls(
            id=product.id,
            name=product.name,
            slug=product.slug,
            price=(product.price_cents or 0) / 100,
            images=list(product.images or []),
            stock=product.stock or 0,
            category=category,
        )


class RankedProductsResponse(BaseModel):
    """Uniform envelope for every recommendation query."""

    success: bool = True
    context: str
    count: int
    products: list[ProductSummary]
    generated_at: str


# =============================================================================
# Activity logging
# =============================================================================


class ActivityLogRequest(BaseModel):
    """Activity sent by a storefront client. Purchases are not accepted here."""

    product_id: str = Field(..., min_length=1, description="Product identifier")
    activity_type: Literal["view", "cart", "wishlist"] = Field(
        ..., description="Activity type must be view, cart, or wishlist"
    )


class InternalActivityRequest(BaseModel):
    """Activity logged by the order or cart service on a user's behalf."""

    user_id: str = Field(..., min_length=1, description="User the activity belongs to")
    product_id: str = Field(..., min_length=1, description="Product identifier")
    activity_type: Literal["view", "cart", "wishlist", "purchase"]
    timestamp: datetime | None = Field(None, description="Event time, defaults to now")


class BatchActivityRequest(BaseModel):
    """Several activities, e.g. one purchase per order line item."""

    activities: list[InternalActivityRequest] = Field(
        ...,
        min_length=1,
        max_length=INTERACTION_BATCH_SIZE,
        description=f"Activities to record (max {INTERACTION_BATCH_SIZE})",
    )


class ActivityLogResponse(BaseModel):
    """Response after recording an activity."""

    success: bool
    message: str
    activity_id: int


class BatchActivityLogResponse(BaseModel):
    """Response after recording a batch of activities."""

    success: bool
    recorded_count: int
    activity_ids: list[int]


class ActivityRecord(BaseModel):
    """One entry of a user's activity history."""

    id: int
    product_id: str
    activity_type: str
    timestamp: datetime

    @classmethod
    def from_event(cls, event: ActivityEvent) -> "ActivityRecord":
        return cls(
            id=event.id,
            product_id=event.external_product_id,
            activity_type=event.activity_type.value,
            timestamp=event.timestamp,
        )


class ActivityHistoryResponse(BaseModel):
    """Page of the caller's activity history."""

    success: bool = True
    activities: list[ActivityRecord]
    limit: int
    offset: int
