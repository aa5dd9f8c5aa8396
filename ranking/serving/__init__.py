"""
Serving module for the ranking system.

This module provides real-time ranking capabilities:
- RankerService: Scores and sorts a candidate pool under a RankingStrategy
- RankingStrategy: emb / neuralcf / din / default
- InferenceRequestBuilder: Builds NeuralCF and DIN request instances
- TFServingClient: Batched HTTP client for TF-Serving predict endpoints
"""

from .config import InferenceConfig
from .errors import (
    EmbeddingDimensionError,
    FeatureParseError,
    InferenceResponseError,
    RecommendationError,
)
from .feature_builder import InferenceRequestBuilder
from .inference_client import TFServingClient, parse_predictions
from .ranker_service import RankedItem, RankerService
from .similarity import EMB_SENTINEL_SCORE, cosine_similarity
from .strategy import RankingStrategy

__all__ = [
    "InferenceConfig",
    "EmbeddingDimensionError",
    "FeatureParseError",
    "InferenceResponseError",
    "RecommendationError",
    "InferenceRequestBuilder",
    "TFServingClient",
    "parse_predictions",
    "RankedItem",
    "RankerService",
    "EMB_SENTINEL_SCORE",
    "cosine_similarity",
    "RankingStrategy",
]
