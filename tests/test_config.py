import pytest

from ranking.serving.config import DEFAULT_DIN_ENDPOINT
from serving import CacheConfig, ServingConfig

ENV_VARS = [
    "RANKING_STRATEGY",
    "USER_CACHE_MODE",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_DB",
    "REDIS_PASSWORD",
    "NEURALCF_ENDPOINT",
    "DIN_ENDPOINT",
    "INFERENCE_TIMEOUT_SECONDS",
    "RETRIEVAL_MAX_WORKERS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults():
    config = ServingConfig()
    assert config.default_strategy == "default"
    assert config.cache.mode == "none"
    assert config.retrieval.max_pool_size == 300
    assert config.inference.timeout_seconds == 30.0
    assert config.inference.din_endpoint.endswith("/v1/models/dinmodel:predict")


def test_cache_mode_is_validated():
    assert CacheConfig(mode="Redis").mode == "redis"
    with pytest.raises(ValueError):
        CacheConfig(mode="memcached")


def test_from_yaml(tmp_path):
    path = tmp_path / "serving.yaml"
    path.write_text(
        "default_strategy: emb\n"
        "retrieval:\n"
        "  genre_limit: 10\n"
        "  max_workers: 4\n"
        "inference:\n"
        "  neuralcf_endpoint: http://tf:8501/v1/models/recmodel:predict\n"
        "  timeout_seconds: 2.0\n"
        "cache:\n"
        "  mode: memory\n"
    )

    config = ServingConfig.from_yaml(path)

    assert config.default_strategy == "emb"
    assert config.retrieval.genre_limit == 10
    assert config.retrieval.top_rated_limit == 100
    assert config.retrieval.max_workers == 4
    assert config.inference.neuralcf_endpoint == "http://tf:8501/v1/models/recmodel:predict"
    assert config.inference.din_endpoint == DEFAULT_DIN_ENDPOINT
    assert config.inference.timeout_seconds == 2.0
    assert config.cache.mode == "memory"


def test_from_yaml_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert ServingConfig.from_yaml(path).cache.mode == "none"


def test_from_env(clean_env):
    clean_env.setenv("RANKING_STRATEGY", "din")
    clean_env.setenv("USER_CACHE_MODE", "redis")
    clean_env.setenv("REDIS_HOST", "redis")
    clean_env.setenv("REDIS_PORT", "6380")
    clean_env.setenv("REDIS_PASSWORD", "hunter2")
    clean_env.setenv("DIN_ENDPOINT", "http://tf:8501/v1/models/dinmodel:predict")
    clean_env.setenv("INFERENCE_TIMEOUT_SECONDS", "5")
    clean_env.setenv("RETRIEVAL_MAX_WORKERS", "3")

    config = ServingConfig.from_env()

    assert config.default_strategy == "din"
    assert config.cache.mode == "redis"
    assert config.cache.host == "redis"
    assert config.cache.port == 6380
    assert config.cache.password == "hunter2"
    assert config.inference.din_endpoint == "http://tf:8501/v1/models/dinmodel:predict"
    assert config.inference.timeout_seconds == 5.0
    assert config.retrieval.max_workers == 3


def test_from_env_defaults(clean_env):
    config = ServingConfig.from_env()
    assert config.cache.mode == "none"
    assert config.cache.password is None
    assert config.inference.timeout_seconds == 30.0


def test_to_dict_redacts_password():
    config = ServingConfig(cache=CacheConfig(mode="redis", password="hunter2"))
    data = config.to_dict()
    assert data["cache"]["password"] == "***"
    assert data["inference"]["timeout_seconds"] == 30.0
    assert config.cache.password == "hunter2"
