"""
Redis-backed user cache.

Keys written by the offline pipeline:
    uEmb:{user_id} → STRING "0.12 -0.53 0.08 ..."
    uf:{user_id}   → HASH   {userGenre1: "Action", userAvgRating: "3.9", ...}

One ConnectionPool is shared by every request thread. Responses are decoded
to str, and read errors are logged and re-raised so a cache outage fails the
request instead of silently serving unhydrated users.
"""

import logging
import time
from typing import Any, Dict, Optional

from redis import ConnectionPool, Redis, RedisError

from .interface import UserCache, user_embedding_key, user_features_key

logger = logging.getLogger(__name__)


class RedisUserCache(UserCache):
    """
    Redis implementation of the user cache.

    Usage:
        >>> cache = RedisUserCache(host="localhost", port=6379)
        >>> cache.get("uEmb:123")
        '0.12 -0.53 0.08'
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
        max_connections: int = 50,
        socket_timeout: float = 0.1,
        socket_connect_timeout: float = 0.5,
        client: Optional[Redis] = None,
    ):
        """
        Args:
            host, port, db, password: Redis server location and credentials
            max_connections: Pool size shared by all request threads
            socket_timeout: Per-command timeout in seconds
            socket_connect_timeout: Connect timeout in seconds
            client: Ready-made client to use instead of building a pool
        """
        self.host = host
        self.port = port
        self.db = db
        self.pool: Optional[ConnectionPool] = None

        if client is None:
            self.pool = ConnectionPool(
                host=host,
                port=port,
                db=db,
                password=password,
                max_connections=max_connections,
                socket_timeout=socket_timeout,
                socket_connect_timeout=socket_connect_timeout,
                decode_responses=True,
            )
            client = Redis(connection_pool=self.pool)
        self.client = client

        logger.info(f"RedisUserCache initialized: {host}:{port}/{db}")

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except RedisError as e:
            logger.error(f"Redis error reading {key}: {e}")
            raise

    def hgetall(self, key: str) -> Optional[Dict[str, str]]:
        try:
            values = self.client.hgetall(key)
        except RedisError as e:
            logger.error(f"Redis error reading hash {key}: {e}")
            raise

        # HGETALL on a missing key returns an empty hash
        if not values:
            return None
        return dict(values)

    def health_check(self) -> Dict[str, Any]:
        """PING the server and report latency."""
        status: Dict[str, Any] = {"host": self.host, "port": self.port, "db": self.db}
        start = time.time()
        try:
            alive = bool(self.client.ping())
            status["message"] = "PONG" if alive else "unexpected PING reply"
        except RedisError as e:
            alive = False
            status["message"] = f"Redis error: {e}"
        status["healthy"] = alive
        status["latency_ms"] = (time.time() - start) * 1000
        return status

    def close(self) -> None:
        if self.pool is None:
            return
        try:
            self.pool.disconnect()
        except RedisError as e:
            logger.warning(f"Error closing Redis pool: {e}")
        else:
            logger.info("RedisUserCache pool closed")

    def set_user_embedding(self, user_id: int, embedding_str: str) -> None:
        """Store a serialized user embedding under uEmb:{user_id}."""
        self.client.set(user_embedding_key(user_id), embedding_str)

    def set_user_features(self, user_id: int, features: Dict[str, str]) -> None:
        """Store a user's feature hash under uf:{user_id}."""
        if features:
            self.client.hset(user_features_key(user_id), mapping=features)
