"""
Multi-source candidate retrieval.

Merges three kinds of catalog queries into one deduplicated candidate pool:
1. Top-rated movies of each genre the user prefers (userGenre1..5)
2. Top-rated movies overall
3. Most recent movies overall
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from catalog import CatalogGateway, Movie, SortKey, User

from .config import RetrievalConfig

logger = logging.getLogger(__name__)

USER_GENRE_KEY = "userGenre{index}"


class CandidatePool:
    """
    Movie candidates keyed by movie id.

    Adding a movie whose id is already present replaces the stored movie but
    keeps its original position, so iteration follows first-seen order.
    """

    def __init__(self):
        self._movies: Dict[int, Movie] = {}

    def add(self, movie: Movie) -> None:
        self._movies[movie.movie_id] = movie

    def add_all(self, movies: Iterable[Movie]) -> int:
        """Add movies and return how many of them were new ids."""
        before = len(self._movies)
        for movie in movies:
            self.add(movie)
        return len(self._movies) - before

    def movies(self) -> List[Movie]:
        return list(self._movies.values())

    def __contains__(self, movie_id: int) -> bool:
        return movie_id in self._movies

    def __len__(self) -> int:
        return len(self._movies)


def preferred_genres(user: User, max_genres: int = 5) -> List[str]:
    """
    Read the user's genre preferences from userGenre1..userGenreN.

    Duplicates collapse in first-seen order; absent or blank tags are skipped.
    """
    genres = []
    for index in range(1, max_genres + 1):
        genre = user.feature(USER_GENRE_KEY.format(index=index))
        if genre is None or not genre.strip():
            continue
        if genre not in genres:
            genres.append(genre)
    return genres


class CandidateRetriever:
    """
    Retrieve a deduplicated candidate pool for a user.

    Example:
        retriever = CandidateRetriever(catalog)
        candidates = retriever.retrieve(user)
    """

    def __init__(
        self,
        catalog: CatalogGateway,
        config: Optional[RetrievalConfig] = None,
    ):
        """
        Initialize the retriever.

        Args:
            catalog: Catalog gateway to query
            config: Source limits and fan-out settings
        """
        self.catalog = catalog
        self.config = config or RetrievalConfig()

    def retrieve(self, user: Optional[User]) -> List[Movie]:
        """
        Retrieve candidate movies for a user.

        Args:
            user: Hydrated user, or None

        Returns:
            Deduplicated movies in first-seen order (genre batches, then
            top-rated, then most recent). Empty list if user is None.
        """
        if user is None:
            return []
        return self.retrieve_pool(user).movies()

    def retrieve_pool(self, user: User) -> CandidatePool:
        """Build the candidate pool for a user."""
        pool = CandidatePool()

        genres = preferred_genres(user, self.config.max_user_genres)
        genre_new = 0
        for batch in self._fetch_genre_batches(genres):
            genre_new += pool.add_all(batch)

        top_rated = self.catalog.get_top(self.config.top_rated_limit, SortKey.RATING)
        top_rated_new = pool.add_all(top_rated)

        latest = self.catalog.get_top(self.config.latest_limit, SortKey.RELEASE_YEAR)
        latest_new = pool.add_all(latest)

        logger.debug(
            f"Candidate pool for user {user.user_id}: {len(pool)} movies "
            f"(genres {genres}: +{genre_new}, top-rated: +{top_rated_new}, "
            f"latest: +{latest_new})"
        )
        return pool

    def _fetch_genre_batches(self, genres: List[str]) -> List[List[Movie]]:
        """Query each genre, returning batches in the order of `genres`."""
        if not genres:
            return []

        def fetch(genre: str) -> List[Movie]:
            return self.catalog.get_by_category(
                genre, self.config.genre_limit, SortKey.RATING
            )

        if self.config.max_workers == 1 or len(genres) == 1:
            return [fetch(genre) for genre in genres]

        workers = min(self.config.max_workers, len(genres))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order regardless of completion order
            return list(executor.map(fetch, genres))
