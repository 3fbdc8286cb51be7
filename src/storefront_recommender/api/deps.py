"""Shared FastAPI dependencies: caller identity, service auth, services."""

import secrets

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_recommender.config import Settings, get_settings
from storefront_recommender.exceptions import ForbiddenError, UnauthorizedError
from storefront_recommender.infrastructure.database.connection import get_session
from storefront_recommender.services.event_store import ActivityEventStore
from storefront_recommender.services.recommendations import RecommendationService


def get_optional_user_id(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> str | None:
    """User id forwarded by the auth gateway, if any."""
    user_id = request.headers.get(settings.user_id_header, "").strip()
    return user_id or None


def get_current_user_id(user_id: str | None = Depends(get_optional_user_id)) -> str:
    """Authenticated user id. Raises 401 when the gateway sent none."""
    if not user_id:
        raise UnauthorizedError("Not authorized, no user identity")
    return user_id


def require_internal_caller(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Allow only storefront services holding the shared API key."""
    provided = request.headers.get(settings.api_key_header)
    if not provided:
        raise UnauthorizedError("Not authorized, no API key")
    if not settings.internal_api_key or not secrets.compare_digest(
        provided.encode(), settings.internal_api_key.encode()
    ):
        raise ForbiddenError("Not authorized to access this resource")


def get_recommendation_service(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> RecommendationService:
    return RecommendationService(session, settings)


def get_event_store(session: AsyncSession = Depends(get_session)) -> ActivityEventStore:
    return ActivityEventStore(session)
