"""
Ranking service for candidate scoring.

This module provides the RankerService class that scores a user's candidate
pool under one of four strategies and returns it sorted:

1. EMBEDDING: cosine similarity of user and movie embeddings (in-process)
2. NEURAL_CF: batched call to the NeuralCF model on TF-Serving
3. DIN: batched call to the Deep Interest Network model on TF-Serving
4. DEFAULT: keep the retrieval order (score N - i for the i-th candidate)

Ordering: score descending, ties broken by ascending movie_id. Under EMBEDDING,
candidates without a usable similarity get EMB_SENTINEL_SCORE and always sort
after every candidate that has one.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from catalog import Movie, User

from .config import InferenceConfig
from .feature_builder import InferenceRequestBuilder
from .inference_client import TFServingClient
from .similarity import EMB_SENTINEL_SCORE, cosine_similarity
from .strategy import RankingStrategy

logger = logging.getLogger(__name__)


@dataclass
class RankedItem:
    """A ranked movie with its score and position."""

    movie: Movie
    score: float
    rank: int

    @property
    def movie_id(self) -> int:
        return self.movie.movie_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "movie_id": self.movie_id,
            "score": float(self.score),
            "rank": self.rank,
        }


class RankerService:
    """
    Ranking service for candidate scoring.

    The service is stateless per request; the inference client (and its
    connection pool) is shared across requests.

    Example:
        service = RankerService(inference_client=TFServingClient())
        ranked = service.rank(user, candidates, "neuralcf")
        for item in ranked:
            print(f"Rank {item.rank}: Movie {item.movie_id} ({item.score:.4f})")
    """

    def __init__(
        self,
        inference_client: Optional[TFServingClient] = None,
        config: Optional[InferenceConfig] = None,
    ):
        """
        Initialize the ranking service.

        Args:
            inference_client: Client for the remote strategies. If None, one
                is created from config.
            config: Inference endpoints and client settings
        """
        self.config = config or InferenceConfig()
        self.inference_client = inference_client or TFServingClient.from_config(self.config)
        self.request_builder = InferenceRequestBuilder()

    def rank(
        self,
        user: Optional[User],
        candidates: List[Movie],
        strategy: Union[RankingStrategy, str, None] = RankingStrategy.DEFAULT,
    ) -> List[RankedItem]:
        """
        Score and sort candidate movies for a user.

        Args:
            user: Hydrated user, or None
            candidates: Candidate pool in retrieval order
            strategy: RankingStrategy or its name; unknown names use DEFAULT

        Returns:
            List of RankedItem sorted by score (descending), rank=1 first.
            Empty candidates returns an empty list. No truncation. Without a
            user, emb scores every candidate with the sentinel and the remote
            strategies return an empty list without calling the model.

        Raises:
            FeatureParseError: DIN feature missing or not numeric
            InferenceResponseError: Malformed inference response
            EmbeddingDimensionError: User/movie embedding lengths differ
        """
        if not candidates:
            return []

        strategy = RankingStrategy.from_name(strategy)
        if user is None and strategy.is_remote:
            logger.debug(f"No user for {strategy.value} ranking, skipping inference")
            return []
        start_time = time.time()

        scores = self._score(user, candidates, strategy)

        # (unscored, -score, movie_id): unscored candidates go last
        keyed: List[Tuple[Tuple[bool, float, int], Movie, float]] = []
        for movie, score in zip(candidates, scores):
            value = EMB_SENTINEL_SCORE if score is None else score
            keyed.append(((score is None, -value, movie.movie_id), movie, value))
        keyed.sort(key=lambda entry: entry[0])

        items = [
            RankedItem(movie=movie, score=value, rank=i + 1)
            for i, (_, movie, value) in enumerate(keyed)
        ]

        logger.debug(
            f"Ranked {len(items)} candidates for user {getattr(user, 'user_id', None)} "
            f"with {strategy.value} in {(time.time() - start_time) * 1000:.1f}ms"
        )
        return items

    def score(
        self,
        user: Optional[User],
        candidates: List[Movie],
        strategy: Union[RankingStrategy, str, None] = RankingStrategy.DEFAULT,
    ) -> List[float]:
        """
        Get raw scores for candidates without ranking.

        Returns:
            List of scores in the same order as candidates. Undefined
            embedding similarities are reported as EMB_SENTINEL_SCORE.
        """
        if not candidates:
            return []
        strategy = RankingStrategy.from_name(strategy)
        if user is None and strategy.is_remote:
            return []
        return [
            EMB_SENTINEL_SCORE if s is None else s
            for s in self._score(user, candidates, strategy)
        ]

    def _score(
        self,
        user: Optional[User],
        candidates: List[Movie],
        strategy: RankingStrategy,
    ) -> List[Optional[float]]:
        """One score per candidate, positionally. None = no similarity."""
        if strategy is RankingStrategy.EMBEDDING:
            return self._score_embedding(user, candidates)
        if strategy is RankingStrategy.NEURAL_CF:
            return self._score_neural_cf(user, candidates)
        if strategy is RankingStrategy.DIN:
            return self._score_din(user, candidates)
        return self._score_default(candidates)

    def _score_embedding(
        self, user: Optional[User], candidates: List[Movie]
    ) -> List[Optional[float]]:
        if user is None:
            return [None] * len(candidates)
        return [cosine_similarity(user.embedding, movie.embedding) for movie in candidates]

    def _score_neural_cf(self, user: User, candidates: List[Movie]) -> List[float]:
        instances = self.request_builder.build_neural_cf_instances(user, candidates)
        logger.info(
            f"Sending NeuralCF request for user {user.user_id} "
            f"({len(instances)} candidates)"
        )
        return self.inference_client.predict(self.config.neuralcf_endpoint, instances)

    def _score_din(self, user: User, candidates: List[Movie]) -> List[float]:
        # Building instances parses every feature before the network call
        instances = self.request_builder.build_din_instances(user, candidates)
        logger.info(
            f"Sending DIN request for user {user.user_id} "
            f"({len(instances)} candidates)"
        )
        return self.inference_client.predict(self.config.din_endpoint, instances)

    def _score_default(self, candidates: List[Movie]) -> List[float]:
        n = len(candidates)
        return [float(n - i) for i in range(n)]
