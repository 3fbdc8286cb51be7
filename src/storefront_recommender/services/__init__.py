"""Business logic services."""

from storefront_recommender.services.aggregator import ActivityAggregator, ScoredProduct
from storefront_recommender.services.catalog import CatalogStore
from storefront_recommender.services.event_store import ActivityEventStore, NewActivity
from storefront_recommender.services.hydration import hydrate
from storefront_recommender.services.recommendations import RecommendationService

__all__ = [
    "ActivityAggregator",
    "ActivityEventStore",
    "CatalogStore",
    "NewActivity",
    "RecommendationService",
    "ScoredProduct",
    "hydrate",
]
