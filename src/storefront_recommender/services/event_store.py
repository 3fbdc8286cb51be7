"""Append-only store of user activity events."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_recommender.exceptions import (
    ProductNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from storefront_recommender.infrastructure.database.models import ActivityEvent, ActivityType
from storefront_recommender.services.catalog import CatalogStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class NewActivity:
    """An activity waiting to be recorded."""

    user_id: str
    product_id: str
    activity_type: ActivityType | str
    timestamp: datetime | None = None


def to_naive_utc(value: datetime) -> datetime:
    """Columns store naive UTC; convert aware datetimes accordingly."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_activity_type(value: ActivityType | str) -> ActivityType:
    """Coerce ``value`` to an ActivityType or raise a field-level ValidationError."""
    if isinstance(value, ActivityType):
        return value
    try:
        return ActivityType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in ActivityType)
        raise ValidationError.for_field(
            "activity_type", f"Activity type must be one of: {allowed}"
        ) from None


class ActivityEventStore:
    """Records activity events and reads a user's own history.

    Events are immutable: there is no update or delete. Recording the same
    activity twice appends two events, since repeat views are a popularity
    signal.
    """

    def __init__(self, session: AsyncSession, catalog: CatalogStore | None = None):
        self.session = session
        self.catalog = catalog or CatalogStore(session)

    async def record(
        self,
        user_id: str,
        product_id: str,
        activity_type: ActivityType | str,
        timestamp: datetime | None = None,
    ) -> int:
        """
        Append one activity event.

        Args:
            user_id: Authenticated caller id
            product_id: Product the user interacted with
            activity_type: One of view, cart, wishlist, purchase
            timestamp: Event time, defaults to now (naive UTC)

        Returns:
            The new event id

        Raises:
            UnauthorizedError: ``user_id`` is empty
            ValidationError: unknown ``activity_type``
            ProductNotFoundError: ``product_id`` is not in the catalog
        """
        event = await self._build_event(
            NewActivity(user_id, product_id, activity_type, timestamp)
        )
        self.session.add(event)
        await self.session.flush()

        logger.info(
            "activity_recorded",
            event_id=event.id,
            user_id=user_id,
            product_id=product_id,
            activity_type=event.activity_type.value,
        )
        return event.id

    async def record_many(self, activities: Iterable[NewActivity]) -> list[int]:
        """Append several events in one flush. Nothing is written if any item is invalid."""
        events = [await self._build_event(activity) for activity in activities]
        self.session.add_all(events)
        await self.session.flush()

        logger.info("activities_recorded", count=len(events))
        return [event.id for event in events]

    async def history(
        self,
        user_id: str,
        activity_type: ActivityType | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ActivityEvent]:
        """A user's events, newest first."""
        query = select(ActivityEvent).where(ActivityEvent.external_user_id == user_id)
        if activity_type is not None:
            query = query.where(ActivityEvent.activity_type == activity_type)
        query = (
            query.order_by(ActivityEvent.timestamp.desc(), ActivityEvent.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(await self.session.scalars(query))

    async def _build_event(self, activity: NewActivity) -> ActivityEvent:
        if not activity.user_id:
            raise UnauthorizedError("Not authorized")
        activity_type = parse_activity_type(activity.activity_type)
        if not await self.catalog.exists(activity.product_id):
            raise ProductNotFoundError(activity.product_id)

        event = ActivityEvent(
            external_user_id=activity.user_id,
            external_product_id=activity.product_id,
            activity_type=activity_type,
        )
        if activity.timestamp is not None:
            event.timestamp = to_naive_utc(activity.timestamp)
        return event
