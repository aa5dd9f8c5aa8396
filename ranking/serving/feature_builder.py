"""
Inference request builder for remote ranking models.

Turns a user and its candidate movies into the per-candidate instances sent to
TF-Serving. Two schemas are supported:

1. **NeuralCF**: just the (userId, movieId) pair
2. **DIN** (Deep Interest Network): user statistics, the user's recently
   rated movies and preferred genres, plus the candidate's statistics and
   genres

Features arrive as string-typed maps (the way they are stored in the cache).
Numeric DIN features are parsed here; a missing or unparsable value fails the
whole request before anything is sent, so the model never sees partial data.
Genre tags are optional and omitted from the instance when absent.
"""

import logging
import math
from typing import Any, Dict, List, Mapping

from catalog import Movie, User

from .errors import FeatureParseError

logger = logging.getLogger(__name__)

USER_FLOAT_FEATURES = ["userAvgRating", "userRatingStddev"]
USER_INT_FEATURES = ["userRatingCount"] + [f"userRatedMovie{i}" for i in range(1, 6)]
USER_GENRE_FEATURES = [f"userGenre{i}" for i in range(1, 6)]

MOVIE_FLOAT_FEATURES = ["movieAvgRating", "movieRatingStddev"]
MOVIE_INT_FEATURES = ["movieRatingCount", "releaseYear"]
MOVIE_GENRE_FEATURES = [f"movieGenre{i}" for i in range(1, 4)]


def parse_float_feature(features: Mapping[str, str], key: str, entity: str) -> float:
    """Parse a required float feature, raising FeatureParseError if unusable."""
    raw = features.get(key)
    if raw is None:
        raise FeatureParseError(entity, key)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise FeatureParseError(entity, key, raw)
    if not math.isfinite(value):
        raise FeatureParseError(entity, key, raw)
    return value


def parse_int_feature(features: Mapping[str, str], key: str, entity: str) -> int:
    """Parse a required integer feature, raising FeatureParseError if unusable."""
    raw = features.get(key)
    if raw is None:
        raise FeatureParseError(entity, key)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise FeatureParseError(entity, key, raw)


def _optional_tags(features: Mapping[str, str], keys: List[str]) -> Dict[str, str]:
    return {key: features[key] for key in keys if features.get(key) is not None}


class InferenceRequestBuilder:
    """
    Builds TF-Serving instances for one user and multiple candidates.

    Example:
        builder = InferenceRequestBuilder()
        instances = builder.build_din_instances(user, candidates)
        payload = {"instances": instances}
    """

    def build_neural_cf_instances(
        self,
        user: User,
        candidates: List[Movie],
    ) -> List[Dict[str, Any]]:
        """One {userId, movieId} instance per candidate, in candidate order."""
        return [
            {"userId": user.user_id, "movieId": movie.movie_id}
            for movie in candidates
        ]

    def build_din_instances(
        self,
        user: User,
        candidates: List[Movie],
    ) -> List[Dict[str, Any]]:
        """
        One DIN instance per candidate, in candidate order.

        Args:
            user: Hydrated user with DIN features in its feature map
            candidates: Candidate movies with DIN features in their feature maps

        Returns:
            List of instance dicts ready for JSON encoding

        Raises:
            FeatureParseError: If any required numeric feature is missing or
                not a number
        """
        # User features are the same for every instance; parse them once
        user_part = self.user_features(user)
        return [{**user_part, **self.movie_features(movie)} for movie in candidates]

    def user_features(self, user: User) -> Dict[str, Any]:
        entity = f"user {user.user_id}"
        features = user.features

        part: Dict[str, Any] = {"userId": user.user_id}
        for key in USER_FLOAT_FEATURES:
            part[key] = parse_float_feature(features, key, entity)
        for key in USER_INT_FEATURES:
            part[key] = parse_int_feature(features, key, entity)
        part.update(_optional_tags(features, USER_GENRE_FEATURES))
        return part

    def movie_features(self, movie: Movie) -> Dict[str, Any]:
        entity = f"movie {movie.movie_id}"
        features = movie.features

        part: Dict[str, Any] = {"movieId": movie.movie_id}
        for key in MOVIE_FLOAT_FEATURES:
            part[key] = parse_float_feature(features, key, entity)
        for key in MOVIE_INT_FEATURES:
            part[key] = parse_int_feature(features, key, entity)
        part.update(_optional_tags(features, MOVIE_GENRE_FEATURES))
        return part
