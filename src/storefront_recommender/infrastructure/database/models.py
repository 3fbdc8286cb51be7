"""SQLAlchemy models for the recommendation system.

Activity events live in the 'recommender' schema. The catalog tables belong
to the storefront and are only read here; they sit in the 'storefront'
schema of the same database so rankings can be joined back to products.
"""

from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Schema for event tables
SCHEMA = "recommender"
# Schema for the storefront catalog tables
CATALOG_SCHEMA = "storefront"


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""


# =============================================================================
# Enums
# =============================================================================


class ActivityType(str, PyEnum):
    """Kinds of user activity recorded against a product."""

    VIEW = "view"
    CART = "cart"
    WISHLIST = "wishlist"
    PURCHASE = "purchase"


# =============================================================================
# Catalog (read-only)
# =============================================================================


class Category(Base):
    """Product category."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    __table_args__ = ({"schema": CATALOG_SCHEMA},)


class Product(Base):
    """Storefront product.

    A product belongs to exactly one category. Rows may disappear at any
    time; events keep pointing at the old id.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    category_id: Mapped[str] = mapped_column(
        String(64), ForeignKey(f"{CATALOG_SCHEMA}.categories.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(500), unique=True, nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, default=0)
    images: Mapped[list] = mapped_column(JSON, default=list)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    category: Mapped[Category] = relationship(lazy="joined")

    __table_args__ = (
        Index("ix_products_category_created", "category_id", "created_at"),
        {"schema": CATALOG_SCHEMA},
    )


# =============================================================================
# Activity Events
# =============================================================================


class ActivityEvent(Base):
    """One user interaction with a product.

    Append-only. No foreign key to products: the catalog may delete a
    product that events still reference.
    """

    __tablename__ = "activity_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    external_product_id: Mapped[str] = mapped_column(String(255), nullable=False)
    activity_type: Mapped[ActivityType] = mapped_column(Enum(ActivityType), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False, index=True
    )

    __table_args__ = (
        Index(
            "ix_activity_events_user_product_type",
            "external_user_id",
            "external_product_id",
            "activity_type",
        ),
        Index("ix_activity_events_user_timestamp", "external_user_id", "timestamp"),
        Index("ix_activity_events_product_type", "external_product_id", "activity_type"),
        {"schema": SCHEMA},
    )

    def __repr__(self) -> str:
        return (
            f"ActivityEvent(id={self.id!r}, user={self.external_user_id!r}, "
            f"product={self.external_product_id!r}, type={self.activity_type!r})"
        )
