"""
Configuration for multi-source candidate retrieval.
"""

from dataclasses import dataclass


@dataclass
class RetrievalConfig:
    """
    Configuration for the candidate retriever.

    The defaults give at most 5 x 20 + 100 + 100 = 300 catalog results per
    request, collapsed by movie id.

    Attributes:
        max_user_genres: How many userGenreN features to read (userGenre1..N)
        genre_limit: Top-rated movies fetched per preferred genre
        top_rated_limit: Top-rated movies fetched across the catalog
        latest_limit: Most recent movies fetched across the catalog
        max_workers: Threads for the per-genre queries (1 = sequential).
            The merged result is identical either way.
    """

    max_user_genres: int = 5
    genre_limit: int = 20
    top_rated_limit: int = 100
    latest_limit: int = 100
    max_workers: int = 1

    def __post_init__(self):
        """Validate configuration."""
        for name in ("max_user_genres", "genre_limit", "top_rated_limit", "latest_limit"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    @property
    def max_pool_size(self) -> int:
        """Upper bound on the candidate pool size."""
        return (
            self.max_user_genres * self.genre_limit
            + self.top_rated_limit
            + self.latest_limit
        )
