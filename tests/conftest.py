"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Rate limit counters must not need a Redis server; set before the limiter is built
os.environ.setdefault("RATE_LIMIT_STORAGE_URI", "memory://")

from storefront_recommender.api.rate_limit import limiter  # noqa: E402
from storefront_recommender.config import Settings, get_settings  # noqa: E402
from storefront_recommender.infrastructure.database.connection import get_session  # noqa: E402
from storefront_recommender.infrastructure.database.models import (  # noqa: E402
    CATALOG_SCHEMA,
    SCHEMA,
    ActivityEvent,
    ActivityType,
    Base,
    Category,
    Product,
)
from storefront_recommender.infrastructure.redis import get_redis_client  # noqa: E402
from storefront_recommender.main import create_app  # noqa: E402

INTERNAL_API_KEY = "test-internal-key"

# Fixed clock so window arithmetic in tests is exact
NOW = datetime(2026, 6, 1, 12, 0, 0)


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=True,
        internal_api_key=INTERNAL_API_KEY,
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the Postgres schemas mapped away."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        execution_options={"schema_translate_map": {SCHEMA: None, CATALOG_SCHEMA: None}},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(test_settings: Settings, session_factory: async_sessionmaker[AsyncSession]) -> Any:
    """Create test application bound to the SQLite engine."""

    def get_test_settings() -> Settings:
        return test_settings

    async def get_test_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def no_redis() -> None:
        return None

    app = create_app()
    app.dependency_overrides[get_settings] = get_test_settings
    app.dependency_overrides[get_session] = get_test_session
    app.dependency_overrides[get_redis_client] = no_redis
    limiter.reset()
    return app


@pytest_asyncio.fixture
async def async_client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create asynchronous test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sample_user_id() -> str:
    """Sample user ID for tests."""
    return "test-user-123"


@pytest.fixture
def user_headers(sample_user_id: str) -> dict[str, str]:
    """Headers the auth gateway adds for an authenticated user."""
    return {"X-User-ID": sample_user_id}


@pytest.fixture
def internal_headers() -> dict[str, str]:
    return {"X-API-Key": INTERNAL_API_KEY}


# =============================================================================
# Catalog and event builders
# =============================================================================


@pytest.fixture
def add_category(session: AsyncSession) -> Callable[..., Awaitable[Category]]:
    async def _add(category_id: str) -> Category:
        category = Category(id=category_id, name=category_id.title(), slug=category_id)
        session.add(category)
        await session.commit()
        return category

    return _add


@pytest.fixture
def add_product(session: AsyncSession) -> Callable[..., Awaitable[Product]]:
    """Insert a product. Catalog order follows insertion order."""
    counter = {"n": 0}

    async def _add(product_id: str, category_id: str, price_cents: int = 1000) -> Product:
        counter["n"] += 1
        product = Product(
            id=product_id,
            category_id=category_id,
            name=f"Product {product_id}",
            slug=f"product-{product_id}",
            price_cents=price_cents,
            images=[f"https://example.com/{product_id}.jpg"],
            stock=10,
            created_at=NOW - timedelta(days=365) + timedelta(minutes=counter["n"]),
        )
        session.add(product)
        await session.commit()
        return product

    return _add


@pytest.fixture
def add_event(session: AsyncSession) -> Callable[..., Awaitable[ActivityEvent]]:
    """Insert an event directly, bypassing the catalog check."""

    async def _add(
        user_id: str,
        product_id: str,
        activity_type: ActivityType,
        timestamp: datetime = NOW,
    ) -> ActivityEvent:
        event = ActivityEvent(
            external_user_id=user_id,
            external_product_id=product_id,
            activity_type=activity_type,
            timestamp=timestamp,
        )
        session.add(event)
        await session.commit()
        return event

    return _add


@pytest_asyncio.fixture
async def catalog(add_category, add_product) -> dict[str, Product]:
    """Two categories: c1 holds p1..p3, c2 holds p4 and p5."""
    await add_category("c1")
    await add_category("c2")
    products = {}
    for product_id, category_id in [
        ("p1", "c1"),
        ("p2", "c1"),
        ("p3", "c1"),
        ("p4", "c2"),
        ("p5", "c2"),
    ]:
        products[product_id] = await add_product(product_id, category_id)
    return products

