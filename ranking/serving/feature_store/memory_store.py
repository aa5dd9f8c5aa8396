"""
In-memory user cache.

Used for local development and tests. No external dependencies, always
available.
"""

import logging
import threading
from typing import Any, Dict, Mapping, Optional

from .interface import UserCache, user_embedding_key, user_features_key

logger = logging.getLogger(__name__)


class InMemoryUserCache(UserCache):
    """
    Dict-backed user cache.

    Example:
        >>> cache = InMemoryUserCache()
        >>> cache.set_user_embedding(1, "0.1 0.2 0.3")
        >>> cache.get("uEmb:1")
        '0.1 0.2 0.3'
    """

    def __init__(
        self,
        values: Optional[Mapping[str, str]] = None,
        hashes: Optional[Mapping[str, Mapping[str, str]]] = None,
    ):
        self._values: Dict[str, str] = dict(values or {})
        self._hashes: Dict[str, Dict[str, str]] = {
            key: dict(fields) for key, fields in (hashes or {}).items()
        }
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def hgetall(self, key: str) -> Optional[Dict[str, str]]:
        with self._lock:
            fields = self._hashes.get(key)
            return dict(fields) if fields else None

    def health_check(self) -> Dict[str, Any]:
        return {
            "healthy": True,
            "latency_ms": 0.0,
            "message": "In-memory cache",
            "keys": len(self._values) + len(self._hashes),
        }

    def set_user_embedding(self, user_id: int, embedding_str: str) -> None:
        with self._lock:
            self._values[user_embedding_key(user_id)] = embedding_str

    def set_user_features(self, user_id: int, features: Mapping[str, str]) -> None:
        with self._lock:
            self._hashes[user_features_key(user_id)] = dict(features)
