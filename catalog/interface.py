"""
Gateway interfaces for the user and movie data stores.

The pipeline only reads from these stores. Implementations must be safe for
concurrent use by many simultaneous requests. Errors from the underlying store
(timeouts, connection failures) are raised to the caller, never masked.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import Movie, SortKey, User


class CatalogGateway(ABC):
    """Read-only access to the movie catalog."""

    @abstractmethod
    def get_by_id(self, movie_id: int) -> Optional[Movie]:
        """
        Look up a single movie.

        Returns:
            The Movie, or None if the id is unknown
        """
        pass

    @abstractmethod
    def get_by_category(
        self,
        category: str,
        limit: int,
        sort_key: SortKey,
    ) -> List[Movie]:
        """
        Get the top movies of one genre.

        Args:
            category: Genre name (e.g. "Action")
            limit: Maximum number of movies to return
            sort_key: Descending sort order

        Returns:
            Up to `limit` movies, best first. Unknown genres return [].
        """
        pass

    @abstractmethod
    def get_top(self, limit: int, sort_key: SortKey) -> List[Movie]:
        """
        Get the top movies across the whole catalog.

        Returns:
            Up to `limit` movies, best first
        """
        pass


class UserGateway(ABC):
    """Read-only access to user records."""

    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Look up a user.

        Returns:
            The User, or None if the id is unknown
        """
        pass
