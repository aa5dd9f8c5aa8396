"""
Recommendation facade over user lookup, candidate retrieval and ranking.

RecommendationService.get_recommendations is the single entry point. It looks up
and hydrates the user, builds the multi-source candidate pool, ranks it under
the requested strategy and truncates the result.

Architecture:
    User Request
        ↓
    RecommendationService.get_recommendations(user_id, size, strategy)
        ↓
    UserGateway.get_by_id(user_id)  ── unknown user → []
        ↓
    hydrate_user(user)  ←  UserCache (uEmb:{id}, uf:{id})
        ↓
    CandidateRetriever.retrieve(user)
        ↓ (genre top-20s + top-100 rated + top-100 latest, deduplicated)
    RankerService.rank(user, candidates, strategy)
        ↓                ↓
        │        TF-Serving (neuralcf / din)
        ↓
    Return top `size` ranked items

Error Handling:
- Unknown users and missing cache entries are not errors
- Malformed inference responses, unparsable DIN features, embedding dimension
  mismatches and store/cache/network failures propagate to the caller
"""

import logging
import time
from typing import Any, Dict, List, Optional, Union

from candidate_gen.retrieval import CandidateRetriever
from catalog import CatalogGateway, User, UserGateway, parse_embedding
from ranking.serving import RankedItem, RankerService, RankingStrategy, TFServingClient
from ranking.serving.feature_store import (
    InMemoryUserCache,
    RedisUserCache,
    UserCache,
    user_embedding_key,
    user_features_key,
)

from .config import ServingConfig

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class RecommendationService:
    """
    Recommendation facade: user id in, size-bounded ranked list out.

    Usage:
        # Initialize once (at service startup)
        service = RecommendationService.from_config(
            ServingConfig.from_env(), user_store=users, catalog=catalog
        )

        # Get recommendations for a user
        recommendations = service.get_recommendations(user_id=123, size=10, strategy="emb")

        for item in recommendations:
            print(f"Rank {item.rank}: Movie {item.movie_id} (score: {item.score:.4f})")

    Thread Safety:
        No per-request state is stored on the service. The gateways, the
        cache and the inference client are shared and must be thread-safe.
    """

    def __init__(
        self,
        user_store: UserGateway,
        catalog: CatalogGateway,
        user_cache: Optional[UserCache] = None,
        retriever: Optional[CandidateRetriever] = None,
        ranker: Optional[RankerService] = None,
        config: Optional[ServingConfig] = None,
    ):
        """
        Args:
            user_store: User gateway
            catalog: Movie catalog gateway
            user_cache: Optional cache to hydrate users from
            retriever: Candidate retriever (built from config if None)
            ranker: Ranking service (built from config if None)
            config: Service configuration (defaults if None)
        """
        self.config = config or ServingConfig()
        self.user_store = user_store
        self.catalog = catalog
        self.user_cache = user_cache
        self.retriever = retriever or CandidateRetriever(catalog, self.config.retrieval)
        self.ranker = ranker or RankerService(config=self.config.inference)
        self.default_strategy = RankingStrategy.from_name(self.config.default_strategy)

        cache_mode = type(user_cache).__name__ if user_cache else "none"
        logger.info(
            f"RecommendationService initialized "
            f"(cache: {cache_mode}, default strategy: {self.default_strategy.value})"
        )

    @classmethod
    def from_config(
        cls,
        config: ServingConfig,
        user_store: UserGateway,
        catalog: CatalogGateway,
    ) -> "RecommendationService":
        """
        Build a service with the cache and inference client the config describes.

        Args:
            config: Service configuration
            user_store: User gateway
            catalog: Movie catalog gateway
        """
        user_cache: Optional[UserCache] = None
        if config.cache.mode == "redis":
            logger.info(
                f"Initializing Redis user cache at {config.cache.host}:{config.cache.port}"
            )
            user_cache = RedisUserCache(
                host=config.cache.host,
                port=config.cache.port,
                db=config.cache.db,
                password=config.cache.password,
            )
        elif config.cache.mode == "memory":
            user_cache = InMemoryUserCache()

        ranker = RankerService(
            inference_client=TFServingClient.from_config(config.inference),
            config=config.inference,
        )
        return cls(
            user_store=user_store,
            catalog=catalog,
            user_cache=user_cache,
            ranker=ranker,
            config=config,
        )

    def get_recommendations(
        self,
        user_id: int,
        size: int = 10,
        strategy: Union[RankingStrategy, str, None] = None,
    ) -> List[RankedItem]:
        """
        Get the top `size` ranked movies for a user.

        Args:
            user_id: The user to generate recommendations for
            size: Maximum number of recommendations to return
            strategy: "emb", "neuralcf", "din" or "default" (unknown names
                use "default"; None uses the configured default strategy)

        Returns:
            List of RankedItem, best first: a prefix of the full ranked list.
            Empty list if size <= 0 or the user is unknown.

        Example:
            >>> recs = service.get_recommendations(user_id=123, size=5, strategy="emb")
            >>> for item in recs:
            ...     print(f"{item.rank}. Movie {item.movie_id}: {item.score:.3f}")
            1. Movie 527: 0.934
            2. Movie 1891: 0.902
            ...
        """
        if size <= 0:
            logger.warning(f"Invalid size={size}, must be > 0")
            return []

        resolved = (
            self.default_strategy if strategy is None
            else RankingStrategy.from_name(strategy)
        )
        start_time = time.time()

        user = self.user_store.get_by_id(user_id)
        if user is None:
            logger.info(f"User {user_id} not found, returning no recommendations")
            return []

        user = self.hydrate_user(user)

        # Stage 1: Candidate Generation
        candidate_start = time.time()
        candidates = self.retriever.retrieve(user)
        candidate_time = time.time() - candidate_start
        logger.debug(f"Retrieved {len(candidates)} candidates in {candidate_time*1000:.1f}ms")

        # Stage 2: Ranking
        ranking_start = time.time()
        ranked_items = self.ranker.rank(user, candidates, resolved)
        ranking_time = time.time() - ranking_start
        logger.debug(f"Ranked {len(ranked_items)} items in {ranking_time*1000:.1f}ms")

        # Stage 3: Truncate
        recommendations = ranked_items[:size]

        total_time = time.time() - start_time
        logger.info(
            f"Generated {len(recommendations)} recommendations for user {user_id} "
            f"with {resolved.value} in {total_time*1000:.1f}ms "
            f"(candidate: {candidate_time*1000:.1f}ms, ranking: {ranking_time*1000:.1f}ms)"
        )

        return recommendations

    def hydrate_user(self, user: User) -> User:
        """
        Overlay cached embedding and features onto a user.

        Missing or empty cache entries leave the corresponding part of the
        user unchanged. Returns a new User; the argument is not modified.
        """
        if self.user_cache is None:
            return user

        hydrated = user

        if self.config.cache.load_user_embedding:
            embedding = parse_embedding(self.user_cache.get(user_embedding_key(user.user_id)))
            if embedding is not None:
                hydrated = hydrated.with_embedding(embedding)

        if self.config.cache.load_user_features:
            features = self.user_cache.hgetall(user_features_key(user.user_id))
            if features:
                hydrated = hydrated.with_features(features)

        return hydrated

    def get_service_info(self) -> Dict[str, Any]:
        """
        Describe the strategies and the effective configuration.
        """
        return {
            'strategies': [s.value for s in RankingStrategy],
            'default_strategy': self.default_strategy.value,
            'user_cache': type(self.user_cache).__name__ if self.user_cache else None,
            'config': self.config.to_dict(),
        }

    def health_check(self) -> Dict[str, Any]:
        """
        Report component health.

        The service is unhealthy when a configured user cache fails its
        check; an unconfigured cache is not a failure.
        """
        checks = {
            'retriever': 'healthy',
            'ranker': 'healthy',
        }

        if self.user_cache is not None:
            cache_health = self.user_cache.health_check()
            if cache_health.get('healthy', False):
                checks['user_cache'] = 'healthy'
            else:
                checks['user_cache'] = f"unhealthy: {cache_health.get('message', 'unknown')}"
        else:
            checks['user_cache'] = 'not configured'

        healthy = all(
            value in ('healthy', 'not configured') for value in checks.values()
        )
        return {
            'status': 'healthy' if healthy else 'unhealthy',
            'checks': checks
        }

    def close(self) -> None:
        """Release pooled connections held by the cache and inference client."""
        if self.user_cache is not None:
            self.user_cache.close()
        self.ranker.inference_client.close()
