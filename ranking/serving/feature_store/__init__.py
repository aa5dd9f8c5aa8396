"""
User Cache Package

Secondary key-value cache the recommendation service hydrates users from.

Components:
- UserCache: Abstract interface for cache backends
- RedisUserCache: Redis-backed implementation with connection pooling
- InMemoryUserCache: Dict-backed implementation for development and tests
"""

from .interface import (
    USER_EMBEDDING_KEY,
    USER_FEATURES_KEY,
    UserCache,
    user_embedding_key,
    user_features_key,
)
from .redis_store import RedisUserCache
from .memory_store import InMemoryUserCache

__all__ = [
    # Interface
    "UserCache",
    "USER_EMBEDDING_KEY",
    "USER_FEATURES_KEY",
    "user_embedding_key",
    "user_features_key",
    # Implementations
    "RedisUserCache",
    "InMemoryUserCache",
]
