"""
Ranking strategies.
"""

import logging
from enum import Enum
from typing import Union

logger = logging.getLogger(__name__)


class RankingStrategy(Enum):
    """Ranking strategies, keyed by their request name."""

    EMBEDDING = "emb"             # Cosine similarity of user and item embeddings
    NEURAL_CF = "neuralcf"        # Remote NeuralCF model
    DIN = "din"                   # Remote Deep Interest Network model
    DEFAULT = "default"           # Keep retrieval order

    @property
    def is_remote(self) -> bool:
        return self in (RankingStrategy.NEURAL_CF, RankingStrategy.DIN)

    @classmethod
    def from_name(cls, name: Union["RankingStrategy", str, None]) -> "RankingStrategy":
        """
        Resolve a request's strategy name.

        Names match exactly ("din", not "DIN"). Unknown, missing or
        non-string names select DEFAULT; this is not an error.
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            if name is not None:
                logger.debug(f"Non-string ranking strategy {name!r}, using default")
            return cls.DEFAULT
        try:
            return cls(name)
        except ValueError:
            logger.debug(f"Unknown ranking strategy {name!r}, using default")
            return cls.DEFAULT

