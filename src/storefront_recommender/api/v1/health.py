"""Health check endpoints."""

from datetime import datetime, timezone

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_recommender import __version__
from storefront_recommender.config import Settings, get_settings
from storefront_recommender.infrastructure.database.connection import get_session
from storefront_recommender.infrastructure.redis import get_redis_client

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    timestamp: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns the service status and version information.
    This endpoint is used by load balancers and orchestrators
    to determine if the service is running.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    session: AsyncSession = Depends(get_session),
    redis_client: aioredis.Redis | None = Depends(get_redis_client),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Ready means the database answers. Redis is reported but optional,
    since only rate limiting depends on it.
    """
    checks: dict[str, bool] = {}

    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = True
    except SQLAlchemyError as e:
        logger.warning("Database readiness check failed", error=str(e))
        checks["database"] = False

    if redis_client is None:
        checks["redis"] = False
    else:
        try:
            checks["redis"] = bool(await redis_client.ping())
        except Exception:
            checks["redis"] = False

    return ReadinessResponse(ready=checks["database"], checks=checks)


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.

    Simple endpoint that returns 200 if the service is running.
    This endpoint is used by Kubernetes liveness checks.
    """
    return {"status": "alive"}
