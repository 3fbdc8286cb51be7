"""API v1 router that aggregates all endpoint routers."""

from fastapi import APIRouter

from storefront_recommender.api.v1 import (
    activities,
    health,
    internal,
    products,
    recommendations,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    recommendations.router,
    prefix="/recommendations",
    tags=["Recommendations"],
)

api_router.include_router(
    activities.router,
    prefix="/activities",
    tags=["Activities"],
)

api_router.include_router(
    products.router,
    prefix="/products",
    tags=["Products"],
)

api_router.include_router(
    internal.router,
    prefix="/internal",
    tags=["Internal"],
)
