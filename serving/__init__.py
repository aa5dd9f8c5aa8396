"""
Recommendation serving package.

Exposes the RecommendationService facade, the single entry point of the
pipeline, and its configuration.
"""

from .config import CacheConfig, ServingConfig
from .recommendation_service import RecommendationService

__all__ = [
    "CacheConfig",
    "ServingConfig",
    "RecommendationService",
]
