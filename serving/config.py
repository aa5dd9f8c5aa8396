"""
Configuration for the recommendation service.

A ServingConfig bundles the per-stage configs and can be loaded from a YAML
file or from environment variables.

Example YAML:
    default_strategy: emb

    retrieval:
      genre_limit: 20
      top_rated_limit: 100
      latest_limit: 100
      max_workers: 4

    inference:
      neuralcf_endpoint: http://tf-serving:8501/v1/models/recmodel:predict
      din_endpoint: http://tf-serving:8501/v1/models/dinmodel:predict
      timeout_seconds: 2.0

    cache:
      mode: redis
      host: redis
      port: 6379
"""

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from candidate_gen.retrieval import RetrievalConfig
from ranking.serving.config import InferenceConfig

CACHE_MODES = ("redis", "memory", "none")


@dataclass
class CacheConfig:
    """
    User hydration cache settings.

    Attributes:
        mode: "redis", "memory" (empty in-process cache) or "none"
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Optional Redis password
        load_user_embedding: Hydrate the user embedding from uEmb:{user_id}
        load_user_features: Hydrate the user feature map from uf:{user_id}
    """

    mode: str = "none"
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    load_user_embedding: bool = True
    load_user_features: bool = True

    def __post_init__(self):
        """Validate configuration."""
        self.mode = self.mode.lower()
        if self.mode not in CACHE_MODES:
            raise ValueError(f"Invalid cache mode: {self.mode}. Valid modes: {CACHE_MODES}")


@dataclass
class ServingConfig:
    """
    Top-level service configuration.

    Attributes:
        default_strategy: Strategy used when a request doesn't name one
        retrieval: Candidate retrieval settings
        inference: Remote model settings
        cache: User hydration cache settings
    """

    default_strategy: str = "default"
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ServingConfig":
        return cls(
            default_strategy=config_dict.get("default_strategy", "default"),
            retrieval=RetrievalConfig(**config_dict.get("retrieval", {})),
            inference=InferenceConfig(**config_dict.get("inference", {})),
            cache=CacheConfig(**config_dict.get("cache", {})),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "ServingConfig":
        """
        Load configuration from a YAML file.

        Missing sections and keys keep their defaults.
        """
        with open(yaml_path) as f:
            config_dict = yaml.safe_load(f) or {}
        return cls.from_dict(config_dict)

    @classmethod
    def from_env(cls) -> "ServingConfig":
        """
        Load configuration from environment variables.

        Environment Variables:
            RANKING_STRATEGY: Default strategy (default: default)
            USER_CACHE_MODE: "redis", "memory" or "none" (default: none)
            REDIS_HOST: Redis host (default: localhost)
            REDIS_PORT: Redis port (default: 6379)
            REDIS_DB: Redis database (default: 0)
            REDIS_PASSWORD: Redis password (default: unset)
            NEURALCF_ENDPOINT: NeuralCF predict URL
            DIN_ENDPOINT: DIN predict URL
            INFERENCE_TIMEOUT_SECONDS: Inference timeout (default: 30)
            RETRIEVAL_MAX_WORKERS: Threads for genre queries (default: 1)
        """
        inference = InferenceConfig()
        return cls(
            default_strategy=os.getenv("RANKING_STRATEGY", "default"),
            retrieval=RetrievalConfig(
                max_workers=int(os.getenv("RETRIEVAL_MAX_WORKERS", "1")),
            ),
            inference=InferenceConfig(
                neuralcf_endpoint=os.getenv("NEURALCF_ENDPOINT", inference.neuralcf_endpoint),
                din_endpoint=os.getenv("DIN_ENDPOINT", inference.din_endpoint),
                timeout_seconds=float(
                    os.getenv("INFERENCE_TIMEOUT_SECONDS", str(inference.timeout_seconds))
                ),
            ),
            cache=CacheConfig(
                mode=os.getenv("USER_CACHE_MODE", "none"),
                host=os.getenv("REDIS_HOST", "localhost"),
                port=int(os.getenv("REDIS_PORT", "6379")),
                db=int(os.getenv("REDIS_DB", "0")),
                password=os.getenv("REDIS_PASSWORD"),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (password redacted)."""
        cache = asdict(self.cache)
        if cache.get("password"):
            cache["password"] = "***"
        return {
            "default_strategy": self.default_strategy,
            "retrieval": asdict(self.retrieval),
            "inference": self.inference.to_dict(),
            "cache": cache,
        }
