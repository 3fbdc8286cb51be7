"""API tests for service-to-service activity logging."""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from storefront_recommender.infrastructure.database.models import ActivityEvent, ActivityType

from tests.conftest import NOW


async def count_events(session) -> int:
    return await session.scalar(select(func.count(ActivityEvent.id)))


class TestInternalAuth:
    @pytest.mark.asyncio
    async def test_missing_key(self, async_client: AsyncClient, catalog) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities",
            json={"user_id": "u1", "product_id": "p1", "activity_type": "purchase"},
        )

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_wrong_key(self, async_client: AsyncClient, catalog) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities",
            json={"user_id": "u1", "product_id": "p1", "activity_type": "purchase"},
            headers={"X-API-Key": "not-the-key"},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_user_header_is_not_enough(
        self, async_client: AsyncClient, user_headers, catalog
    ) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities",
            json={"user_id": "u1", "product_id": "p1", "activity_type": "purchase"},
            headers=user_headers,
        )

        assert response.status_code == 401


class TestInternalActivity:
    @pytest.mark.asyncio
    async def test_records_purchase(
        self, async_client: AsyncClient, internal_headers, session, catalog
    ) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities",
            json={
                "user_id": "u1",
                "product_id": "p2",
                "activity_type": "purchase",
                "timestamp": (NOW - timedelta(days=1)).isoformat(),
            },
            headers=internal_headers,
        )

        assert response.status_code == 201
        event = await session.get(ActivityEvent, response.json()["activity_id"])
        assert event.activity_type is ActivityType.PURCHASE
        assert event.timestamp == NOW - timedelta(days=1)

    @pytest.mark.asyncio
    async def test_unknown_type(self, async_client: AsyncClient, internal_headers, catalog) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities",
            json={"user_id": "u1", "product_id": "p2", "activity_type": "refund"},
            headers=internal_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_product(
        self, async_client: AsyncClient, internal_headers, catalog
    ) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities",
            json={"user_id": "u1", "product_id": "missing", "activity_type": "purchase"},
            headers=internal_headers,
        )

        assert response.status_code == 404


class TestInternalBatch:
    @pytest.mark.asyncio
    async def test_order_line_items(
        self, async_client: AsyncClient, internal_headers, session, catalog
    ) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities/batch",
            json={
                "activities": [
                    {"user_id": "u1", "product_id": "p1", "activity_type": "purchase"},
                    {"user_id": "u1", "product_id": "p4", "activity_type": "purchase"},
                ]
            },
            headers=internal_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["recorded_count"] == 2
        assert len(data["activity_ids"]) == 2
        assert await count_events(session) == 2

        related = await async_client.get("/api/v1/recommendations/frequently-bought-together/p1")
        assert [p["id"] for p in related.json()["products"]] == ["p4"]

    @pytest.mark.asyncio
    async def test_unknown_product_rejects_whole_batch(
        self, async_client: AsyncClient, internal_headers, session, catalog
    ) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities/batch",
            json={
                "activities": [
                    {"user_id": "u1", "product_id": "p1", "activity_type": "purchase"},
                    {"user_id": "u1", "product_id": "missing", "activity_type": "purchase"},
                ]
            },
            headers=internal_headers,
        )

        assert response.status_code == 404
        assert await count_events(session) == 0

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, async_client: AsyncClient, internal_headers) -> None:
        response = await async_client.post(
            "/api/v1/internal/activities/batch",
            json={"activities": []},
            headers=internal_headers,
        )

        assert response.status_code == 422
        assert "body.activities" in response.json()["errors"]
