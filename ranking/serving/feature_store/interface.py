"""
User cache interface definition.

The recommendation service can hydrate a user's embedding and feature map from
a key-value cache before ranking. This module defines the abstract interface
every cache backend (Redis, in-memory) implements.

Key layout:
    uEmb:{user_id} → STRING  whitespace-separated embedding floats
    uf:{user_id}   → HASH    feature name → string value

Design Principles:
1. Absence is not an error: missing keys return None
2. Failures are not masked: backend errors (timeouts, connection loss) are
   logged and re-raised so the caller sees them
3. Shared across requests: implementations must be thread-safe
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

USER_EMBEDDING_KEY = "uEmb:{user_id}"
USER_FEATURES_KEY = "uf:{user_id}"


def user_embedding_key(user_id: int) -> str:
    return USER_EMBEDDING_KEY.format(user_id=user_id)


def user_features_key(user_id: int) -> str:
    return USER_FEATURES_KEY.format(user_id=user_id)


class UserCache(ABC):
    """
    Abstract interface for the user hydration cache.

    Example Implementation:
        >>> class MyCache(UserCache):
        ...     def get(self, key: str) -> Optional[str]:
        ...         return self._values.get(key)
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Get a string value.

        Returns:
            The value, or None if the key doesn't exist
        """
        pass

    @abstractmethod
    def hgetall(self, key: str) -> Optional[Dict[str, str]]:
        """
        Get all fields of a hash.

        Returns:
            Field → value mapping, or None if the key doesn't exist
        """
        pass

    @abstractmethod
    def health_check(self) -> Dict[str, Any]:
        """
        Check if the cache is reachable.

        Returns:
            Dictionary with at least these keys:
            - "healthy": bool
            - "latency_ms": float
            - "message": str
        """
        pass

    def close(self) -> None:
        """
        Clean up resources (connections, pools, etc.).

        Default implementation does nothing.
        """
        pass
