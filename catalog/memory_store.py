"""
In-memory catalog and user gateways.

Used for local development and tests. The catalog keeps a per-genre index and
pre-sorted views for each SortKey, so lookups are list slices.
"""

import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .interface import CatalogGateway, UserGateway
from .models import Movie, SortKey, User, parse_embedding

logger = logging.getLogger(__name__)

# DataFrame columns mapped onto Movie attributes; everything else becomes a feature
_MOVIE_COLUMNS = {
    "movieId": "movie_id",
    "movie_id": "movie_id",
    "title": "title",
    "releaseYear": "release_year",
    "release_year": "release_year",
    "genres": "genres",
    "averageRating": "average_rating",
    "average_rating": "average_rating",
    "ratingCount": "rating_count",
    "rating_count": "rating_count",
    "embedding": "embedding",
}


def _sorted(movies: Iterable[Movie], sort_key: SortKey) -> List[Movie]:
    # Descending by sort value, ascending id on ties
    return sorted(movies, key=lambda m: (-m.sort_value(sort_key), m.movie_id))


class InMemoryCatalog(CatalogGateway):
    """
    Catalog gateway backed by a list of Movie objects.

    Example:
        >>> catalog = InMemoryCatalog([Movie(1, genres=("Action",), average_rating=4.2)])
        >>> catalog.get_by_category("Action", limit=20, sort_key=SortKey.RATING)
    """

    def __init__(self, movies: Iterable[Movie]):
        self._movies: Dict[int, Movie] = {}
        for movie in movies:
            self._movies[movie.movie_id] = movie

        genre_index: Dict[str, List[Movie]] = {}
        for movie in self._movies.values():
            for genre in movie.genres:
                genre_index.setdefault(genre, []).append(movie)

        self._by_sort_key = {
            key: _sorted(self._movies.values(), key) for key in SortKey
        }
        self._by_genre = {
            genre: {key: _sorted(members, key) for key in SortKey}
            for genre, members in genre_index.items()
        }

        logger.info(
            f"InMemoryCatalog loaded: {len(self._movies)} movies, "
            f"{len(self._by_genre)} genres"
        )

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "InMemoryCatalog":
        """
        Build a catalog from a movies DataFrame.

        The frame needs a movieId (or movie_id) column. genres may be a
        MovieLens-style "Action|Drama" string or a list; embedding may be a
        whitespace-separated string or a sequence of floats. Columns not
        mapped to Movie attributes are copied into the string feature map,
        skipping missing values.
        """
        movies = []
        for record in df.to_dict("records"):
            kwargs = {}
            features = {}
            for column, value in record.items():
                attr = _MOVIE_COLUMNS.get(column)
                if attr is None:
                    if not _is_missing(value):
                        features[column] = str(value)
                    continue
                if _is_missing(value):
                    continue
                kwargs[attr] = value

            if "movie_id" not in kwargs:
                raise ValueError(f"Movie record without an id: {record}")

            genres = kwargs.get("genres", ())
            if isinstance(genres, str):
                genres = [g for g in genres.split("|") if g]
            kwargs["genres"] = tuple(genres)

            embedding = kwargs.get("embedding")
            if isinstance(embedding, str):
                kwargs["embedding"] = parse_embedding(embedding)

            kwargs["movie_id"] = int(kwargs["movie_id"])
            if "release_year" in kwargs:
                kwargs["release_year"] = int(kwargs["release_year"])
            if "rating_count" in kwargs:
                kwargs["rating_count"] = int(kwargs["rating_count"])
            if "average_rating" in kwargs:
                kwargs["average_rating"] = float(kwargs["average_rating"])

            movies.append(Movie(features=features, **kwargs))

        return cls(movies)

    def get_by_id(self, movie_id: int) -> Optional[Movie]:
        return self._movies.get(movie_id)

    def get_by_category(
        self,
        category: str,
        limit: int,
        sort_key: SortKey,
    ) -> List[Movie]:
        views = self._by_genre.get(category)
        if views is None or limit <= 0:
            return []
        return views[sort_key][:limit]

    def get_top(self, limit: int, sort_key: SortKey) -> List[Movie]:
        if limit <= 0:
            return []
        return self._by_sort_key[sort_key][:limit]

    def __len__(self) -> int:
        return len(self._movies)


class InMemoryUserStore(UserGateway):
    """User gateway backed by a dict of User objects."""

    def __init__(self, users: Iterable[User]):
        self._users = {user.user_id: user for user in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def __len__(self) -> int:
        return len(self._users)


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float):
        return pd.isna(value)
    return False
