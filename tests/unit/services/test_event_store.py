"""Unit tests for the activity event store."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_recommender.exceptions import NotFoundError, UnauthorizedError, ValidationError
from storefront_recommender.infrastructure.database.models import ActivityEvent, ActivityType
from storefront_recommender.services.event_store import (
    ActivityEventStore,
    NewActivity,
    parse_activity_type,
)

from tests.conftest import NOW


@pytest.fixture
def store(session: AsyncSession) -> ActivityEventStore:
    return ActivityEventStore(session)


async def count_events(session: AsyncSession) -> int:
    return await session.scalar(select(func.count(ActivityEvent.id)))


class TestParseActivityType:
    def test_accepts_enum(self) -> None:
        assert parse_activity_type(ActivityType.CART) is ActivityType.CART

    def test_accepts_value(self) -> None:
        assert parse_activity_type("wishlist") is ActivityType.WISHLIST

    def test_rejects_unknown_type_with_field(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_activity_type("review")
        assert "activity_type" in exc_info.value.errors


class TestRecord:
    """Tests for the write path."""

    @pytest.mark.asyncio
    async def test_record_appends_event(self, store, session, catalog) -> None:
        event_id = await store.record("u1", "p1", "view")

        event = await session.get(ActivityEvent, event_id)
        assert event.external_user_id == "u1"
        assert event.external_product_id == "p1"
        assert event.activity_type is ActivityType.VIEW
        assert event.timestamp is not None

    @pytest.mark.asyncio
    async def test_identical_calls_create_distinct_events(self, store, session, catalog) -> None:
        first = await store.record("u1", "p1", ActivityType.VIEW)
        second = await store.record("u1", "p1", ActivityType.VIEW)

        assert first != second
        assert await count_events(session) == 2

    @pytest.mark.asyncio
    async def test_explicit_timestamp_is_kept(self, store, session, catalog) -> None:
        when = NOW - timedelta(days=3)
        event_id = await store.record("u1", "p1", ActivityType.PURCHASE, timestamp=when)

        event = await session.get(ActivityEvent, event_id)
        assert event.timestamp == when

    @pytest.mark.asyncio
    async def test_aware_timestamp_is_stored_as_utc(self, store, session, catalog) -> None:
        when = datetime(2026, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        event_id = await store.record("u1", "p1", ActivityType.VIEW, timestamp=when)

        event = await session.get(ActivityEvent, event_id)
        assert event.timestamp == datetime(2026, 6, 1, 12, 0)

    @pytest.mark.asyncio
    async def test_unknown_product_raises_not_found(self, store, session, catalog) -> None:
        with pytest.raises(NotFoundError):
            await store.record("u1", "missing", ActivityType.VIEW)
        assert await count_events(session) == 0

    @pytest.mark.asyncio
    async def test_unknown_type_raises_validation_error(self, store, catalog) -> None:
        with pytest.raises(ValidationError):
            await store.record("u1", "p1", "like")

    @pytest.mark.asyncio
    async def test_missing_user_raises_unauthorized(self, store, catalog) -> None:
        with pytest.raises(UnauthorizedError):
            await store.record("", "p1", ActivityType.VIEW)


class TestRecordMany:
    @pytest.mark.asyncio
    async def test_records_all(self, store, session, catalog) -> None:
        ids = await store.record_many(
            [
                NewActivity("u1", "p1", ActivityType.PURCHASE),
                NewActivity("u1", "p2", ActivityType.PURCHASE),
            ]
        )

        assert len(ids) == 2
        assert await count_events(session) == 2

    @pytest.mark.asyncio
    async def test_one_unknown_product_rejects_batch(self, store, session, catalog) -> None:
        with pytest.raises(NotFoundError):
            await store.record_many(
                [
                    NewActivity("u1", "p1", ActivityType.PURCHASE),
                    NewActivity("u1", "missing", ActivityType.PURCHASE),
                ]
            )
        assert await count_events(session) == 0


class TestHistory:
    @pytest.mark.asyncio
    async def test_newest_first_for_one_user(self, store, catalog, add_event) -> None:
        await add_event("u1", "p1", ActivityType.VIEW, NOW - timedelta(days=2))
        await add_event("u1", "p2", ActivityType.CART, NOW - timedelta(days=1))
        await add_event("u2", "p3", ActivityType.VIEW, NOW)

        events = await store.history("u1")

        assert [e.external_product_id for e in events] == ["p2", "p1"]

    @pytest.mark.asyncio
    async def test_filters_by_type_and_pages(self, store, catalog, add_event) -> None:
        for days in range(4):
            await add_event("u1", f"p{days + 1}", ActivityType.VIEW, NOW - timedelta(days=days))
        await add_event("u1", "p5", ActivityType.WISHLIST)

        events = await store.history("u1", activity_type=ActivityType.VIEW, limit=2, offset=1)

        assert [e.external_product_id for e in events] == ["p2", "p3"]
