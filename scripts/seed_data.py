#!/usr/bin/env python3
"""
Seed database with test data for development.

Creates the schemas and tables if needed, then inserts a small catalog and
an activity stream that exercises every recommendation query.

Usage:
    python scripts/seed_data.py
"""

import asyncio
import os
import sys
from datetime import timedelta

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from storefront_recommender.infrastructure.database.connection import (  # noqa: E402
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from storefront_recommender.infrastructure.database.models import (  # noqa: E402
    ActivityType,
    Category,
    Product,
    utc_now,
)
from storefront_recommender.services.event_store import ActivityEventStore, NewActivity  # noqa: E402

CATEGORIES = [
    {"id": "cat-electronics", "name": "Electronics", "slug": "electronics"},
    {"id": "cat-furniture", "name": "Furniture", "slug": "furniture"},
    {"id": "cat-accessories", "name": "Accessories", "slug": "accessories"},
]

PRODUCTS = [
    ("prod-001", "Wireless Noise-Canceling Headphones", "cat-electronics", 29999, 50),
    ("prod-002", "Mechanical Gaming Keyboard", "cat-electronics", 14999, 100),
    ("prod-003", "Ergonomic Office Chair", "cat-furniture", 39999, 25),
    ("prod-004", "4K Ultra HD Monitor", "cat-electronics", 44999, 30),
    ("prod-005", "Standing Desk Converter", "cat-furniture", 19999, 40),
    ("prod-006", "Wireless Mouse", "cat-electronics", 7999, 150),
    ("prod-007", "USB-C Hub", "cat-electronics", 4999, 200),
    ("prod-008", "Desk Lamp", "cat-furniture", 5999, 75),
    ("prod-009", "Webcam HD 1080p", "cat-electronics", 8999, 60),
    ("prod-010", "Laptop Stand", "cat-accessories", 3999, 120),
]


def build_products() -> list[Product]:
    now = utc_now()
    products = []
    for i, (product_id, name, category_id, price_cents, stock) in enumerate(PRODUCTS):
        slug = name.lower().replace(" ", "-")
        products.append(
            Product(
                id=product_id,
                category_id=category_id,
                name=name,
                slug=slug,
                price_cents=price_cents,
                images=[f"https://example.com/images/{slug}.jpg"],
                stock=stock,
                created_at=now - timedelta(days=len(PRODUCTS) - i),
            )
        )
    return products


def build_activities() -> list[NewActivity]:
    now = utc_now()
    activities = []

    # Alice: browses electronics, buys headphones and a hub
    for i, product_id in enumerate(["prod-001", "prod-002", "prod-004", "prod-001"]):
        activities.append(
            NewActivity("user-001", product_id, ActivityType.VIEW, now - timedelta(days=i, hours=i * 2))
        )
    activities.append(NewActivity("user-001", "prod-001", ActivityType.CART, now - timedelta(days=1)))
    for product_id in ["prod-001", "prod-007"]:
        activities.append(
            NewActivity("user-001", product_id, ActivityType.PURCHASE, now - timedelta(hours=12))
        )

    # Bob: browses furniture, wishlists the chair, buys headphones and a mouse
    for product_id in ["prod-003", "prod-005", "prod-008"]:
        activities.append(NewActivity("user-002", product_id, ActivityType.VIEW, now - timedelta(hours=3)))
    activities.append(NewActivity("user-002", "prod-003", ActivityType.WISHLIST, now - timedelta(hours=2)))
    for product_id in ["prod-001", "prod-006"]:
        activities.append(
            NewActivity("user-002", product_id, ActivityType.PURCHASE, now - timedelta(days=2))
        )

    # Charlie: a view outside the default 30 day popularity window
    activities.append(NewActivity("user-003", "prod-010", ActivityType.VIEW, now - timedelta(days=45)))
    activities.append(NewActivity("user-003", "prod-004", ActivityType.VIEW, now - timedelta(days=3)))

    return activities


async def main():
    """Run seeding."""
    print("Seeding database with test data...")
    print("=" * 50)

    engine = get_async_engine()
    await create_tables(engine)
    factory = get_async_session_factory(engine)

    async with factory() as session:
        session.add_all([Category(**c) for c in CATEGORIES])
        session.add_all(build_products())
        await session.flush()
        print(f"Created {len(CATEGORIES)} categories and {len(PRODUCTS)} products")

        ids = await ActivityEventStore(session).record_many(build_activities())
        print(f"Created {len(ids)} activity events")

        await session.commit()

    await engine.dispose()

    print("=" * 50)
    print("Seeding complete!")


if __name__ == "__main__":
    asyncio.run(main())
