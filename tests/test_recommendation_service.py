import numpy as np
import pytest

from candidate_gen.retrieval import CandidateRetriever
from catalog import InMemoryCatalog, InMemoryUserStore, Movie, User
from ranking.serving import InferenceResponseError, RankerService, TFServingClient
from ranking.serving.feature_store import InMemoryUserCache, RedisUserCache
from serving import CacheConfig, RecommendationService, ServingConfig

from conftest import DIN_USER_FEATURES, DummyResponse, DummySession


def _ids(items):
    return [item.movie_id for item in items]


@pytest.fixture
def cache():
    return InMemoryUserCache()


@pytest.fixture
def service(user_store, catalog, cache, inference_client):
    return RecommendationService(
        user_store=user_store,
        catalog=catalog,
        user_cache=cache,
        ranker=RankerService(inference_client=inference_client),
    )


@pytest.mark.parametrize("strategy", ["emb", "neuralcf", "din", "default", "bogus"])
def test_unknown_user_gets_empty_list(service, session, strategy):
    assert service.get_recommendations(user_id=999, size=10, strategy=strategy) == []
    assert session.calls == []


@pytest.mark.parametrize("size", [0, -3])
def test_non_positive_size_is_empty(service, size):
    assert service.get_recommendations(user_id=7, size=size) == []


def test_default_strategy_follows_retrieval_merge_order(catalog):
    # Likes Action then Drama, no embedding:
    # Action(1, 2), Drama(3, 2, 5), top-rated(3, 1, 2, 6, 4, 5), latest(4, 5, 6, ...)
    store = InMemoryUserStore([User(user_id=7, features=dict(DIN_USER_FEATURES))])
    service = RecommendationService(store, catalog, user_cache=InMemoryUserCache())

    assert store.get_by_id(7).embedding is None
    recs = service.get_recommendations(user_id=7, size=5, strategy="default")
    assert _ids(recs) == [1, 2, 3, 5, 6]


@pytest.mark.parametrize("size", [1, 3, 6, 50])
def test_truncation_is_prefix_of_full_ranking(service, size):
    full = service.get_recommendations(user_id=7, size=1000, strategy="emb")
    recs = service.get_recommendations(user_id=7, size=size, strategy="emb")

    assert len(recs) == min(size, len(full))
    assert _ids(recs) == _ids(full)[:size]


def test_repeated_calls_are_identical(service):
    first = service.get_recommendations(user_id=7, size=10, strategy="default")
    second = service.get_recommendations(user_id=7, size=10, strategy="default")
    assert _ids(first) == _ids(second)


def test_hydration_overlays_cached_embedding_and_features(service, cache):
    cache.set_user_embedding(8, "0 1")
    cache.set_user_features(8, {"userGenre1": "Horror"})

    base = service.user_store.get_by_id(8)
    hydrated = service.hydrate_user(base)

    assert hydrated.embedding.tolist() == [0.0, 1.0]
    assert hydrated.features == {"userGenre1": "Horror"}
    # Original record untouched
    assert base.embedding is None
    assert base.features == {}


def test_hydration_missing_cache_entries_keep_user_state(service, user):
    hydrated = service.hydrate_user(user)
    assert hydrated.embedding.tolist() == user.embedding.tolist()
    assert hydrated.features == user.features


def test_hydration_respects_config_flags(user_store, catalog, cache):
    cache.set_user_embedding(8, "0 1")
    cache.set_user_features(8, {"userGenre1": "Horror"})
    config = ServingConfig(cache=CacheConfig(mode="memory", load_user_embedding=False))
    service = RecommendationService(user_store, catalog, user_cache=cache, config=config)

    hydrated = service.hydrate_user(user_store.get_by_id(8))
    assert hydrated.embedding is None
    assert hydrated.features == {"userGenre1": "Horror"}


def test_cached_embedding_drives_emb_ranking(service, cache):
    cache.set_user_embedding(8, "0 1")

    recs = service.get_recommendations(user_id=8, size=1, strategy="emb")

    # Movie 2 has embedding [0, 1]
    assert _ids(recs) == [2]


def test_neuralcf_failure_propagates(user_store, catalog):
    session = DummySession(lambda url, payload: DummyResponse({"predictions": []}))
    service = RecommendationService(
        user_store,
        catalog,
        ranker=RankerService(inference_client=TFServingClient(session=session)),
    )
    with pytest.raises(InferenceResponseError):
        service.get_recommendations(user_id=7, size=5, strategy="neuralcf")


def test_none_strategy_uses_configured_default(user_store, catalog, inference_client, session):
    service = RecommendationService(
        user_store,
        catalog,
        ranker=RankerService(inference_client=inference_client),
        config=ServingConfig(default_strategy="neuralcf"),
    )
    service.get_recommendations(user_id=7, size=3)
    assert len(session.calls) == 1


def test_custom_retriever_is_used(user_store, catalog):
    class FixedRetriever(CandidateRetriever):
        def retrieve(self, user):
            return [Movie(100), Movie(200)]

    service = RecommendationService(user_store, catalog, retriever=FixedRetriever(catalog))
    assert _ids(service.get_recommendations(user_id=7, size=10)) == [100, 200]


def test_empty_catalog_gives_empty_list(user_store):
    service = RecommendationService(user_store, InMemoryCatalog([]))
    assert service.get_recommendations(user_id=7, size=10, strategy="emb") == []


def test_from_config_wires_cache(user_store, catalog):
    redis_service = RecommendationService.from_config(
        ServingConfig(cache=CacheConfig(mode="redis", port=6399)), user_store, catalog
    )
    assert isinstance(redis_service.user_cache, RedisUserCache)
    redis_service.close()

    memory_service = RecommendationService.from_config(
        ServingConfig(cache=CacheConfig(mode="memory")), user_store, catalog
    )
    assert isinstance(memory_service.user_cache, InMemoryUserCache)

    plain = RecommendationService.from_config(ServingConfig(), user_store, catalog)
    assert plain.user_cache is None


def test_health_check_and_info(service):
    health = service.health_check()
    assert health["status"] == "healthy"
    assert health["checks"]["user_cache"] == "healthy"

    info = service.get_service_info()
    assert info["default_strategy"] == "default"
    assert "din" in info["strategies"]
    assert info["config"]["retrieval"]["genre_limit"] == 20


def test_health_check_reports_unhealthy_cache(user_store, catalog):
    class DownCache(InMemoryUserCache):
        def health_check(self):
            return {"healthy": False, "latency_ms": 0.0, "message": "down"}

    service = RecommendationService(user_store, catalog, user_cache=DownCache())
    health = service.health_check()
    assert health["status"] == "unhealthy"
    assert health["checks"]["user_cache"] == "unhealthy: down"


def test_users_are_not_shared_between_requests(catalog, cache):
    store = InMemoryUserStore([User(user_id=1, embedding=np.array([1.0, 0.0]))])
    cache.set_user_embedding(1, "0 1")
    service = RecommendationService(store, catalog, user_cache=cache)

    service.get_recommendations(user_id=1, size=3, strategy="emb")

    assert store.get_by_id(1).embedding.tolist() == [1.0, 0.0]
