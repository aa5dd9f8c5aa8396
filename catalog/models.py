"""
Domain entities shared by candidate generation and ranking.

Users and movies are immutable values. Hydrating a user from the secondary
cache produces a new instance via with_embedding() / with_features(), so a
User looked up for one request is never modified by another.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np


class SortKey(Enum):
    """Catalog sort keys. Both sort descending (best / most recent first)."""

    RATING = "rating"
    RELEASE_YEAR = "releaseYear"


def parse_embedding(text: Optional[str]) -> Optional[np.ndarray]:
    """
    Parse a whitespace-separated float string into an embedding vector.

    Args:
        text: Serialized embedding, e.g. "0.12 -0.5 0.33"

    Returns:
        1-D float array, or None if text is None or blank

    Raises:
        ValueError: If any element is not a finite float
    """
    if text is None:
        return None
    parts = text.split()
    if not parts:
        return None
    embedding = np.array([float(p) for p in parts], dtype=np.float64)
    if not np.isfinite(embedding).all():
        raise ValueError(f"Embedding has non-finite values: {text!r}")
    return embedding


def _as_embedding(value: Any) -> Optional[np.ndarray]:
    if value is None:
        return None
    return np.asarray(value, dtype=np.float64)


@dataclass(frozen=True)
class User:
    """
    A user looked up for a single request.

    Attributes:
        user_id: Unique user identifier
        embedding: Optional user vector in the item embedding space
        features: String-typed feature map (userGenre1..5, userAvgRating, ...)
    """

    user_id: int
    embedding: Optional[np.ndarray] = field(default=None, compare=False)
    features: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "embedding", _as_embedding(self.embedding))
        object.__setattr__(self, "features", dict(self.features))

    def with_embedding(self, embedding: Optional[np.ndarray]) -> "User":
        """Return a copy with the embedding replaced."""
        return replace(self, embedding=embedding)

    def with_features(self, features: Mapping[str, str]) -> "User":
        """Return a copy with the feature map replaced."""
        return replace(self, features=dict(features))

    def __hash__(self) -> int:
        return hash(self.user_id)

    def feature(self, key: str) -> Optional[str]:
        return self.features.get(key)


@dataclass(frozen=True)
class Movie:
    """
    A catalog item.

    The catalog owns Movie instances; the pipeline only reads them and keys
    them by movie_id.

    Attributes:
        movie_id: Unique movie identifier
        title: Display title
        release_year: Year of release (0 if unknown)
        genres: Genre names in catalog order
        average_rating: Mean user rating, used by SortKey.RATING
        rating_count: Number of ratings
        embedding: Optional item vector
        features: String-typed feature map used by remote models
    """

    movie_id: int
    title: str = ""
    release_year: int = 0
    genres: Tuple[str, ...] = ()
    average_rating: float = 0.0
    rating_count: int = 0
    embedding: Optional[np.ndarray] = field(default=None, compare=False)
    features: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "genres", tuple(self.genres))
        object.__setattr__(self, "embedding", _as_embedding(self.embedding))
        object.__setattr__(self, "features", dict(self.features))

    def __hash__(self) -> int:
        return hash(self.movie_id)

    def sort_value(self, sort_key: SortKey) -> float:
        if sort_key is SortKey.RELEASE_YEAR:
            return float(self.release_year)
        return float(self.average_rating)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "movie_id": self.movie_id,
            "title": self.title,
            "release_year": self.release_year,
            "genres": list(self.genres),
            "average_rating": float(self.average_rating),
            "rating_count": self.rating_count,
        }
