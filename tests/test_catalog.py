import numpy as np
import pandas as pd
import pytest

from catalog import InMemoryCatalog, InMemoryUserStore, Movie, SortKey, User, parse_embedding


def test_parse_embedding_whitespace_separated():
    emb = parse_embedding("0.5 -1.25\t2")
    assert emb.tolist() == [0.5, -1.25, 2.0]


def test_parse_embedding_blank_is_absent():
    assert parse_embedding(None) is None
    assert parse_embedding("   ") is None


def test_parse_embedding_rejects_garbage():
    with pytest.raises(ValueError):
        parse_embedding("0.1 abc")


@pytest.mark.parametrize("text", ["0.1 nan", "inf 0.2", "-inf"])
def test_parse_embedding_rejects_non_finite(text):
    with pytest.raises(ValueError):
        parse_embedding(text)


def test_entities_are_hashable_by_id():
    movies = {Movie(1), Movie(2, genres=("Drama",)), Movie(1)}
    assert {m.movie_id for m in movies} == {1, 2}
    assert len(movies) == 2

    user = User(user_id=3, features={"userGenre1": "Action"})
    seen = {user: "hydrated"}
    assert seen[User(user_id=3, features={"userGenre1": "Action"})] == "hydrated"


def test_user_hydration_returns_new_instance():
    base = User(user_id=1, features={"userGenre1": "Action"})
    hydrated = base.with_embedding(np.array([1.0, 2.0])).with_features({"userGenre1": "Drama"})

    assert base.embedding is None
    assert base.features == {"userGenre1": "Action"}
    assert hydrated.user_id == 1
    assert hydrated.embedding.tolist() == [1.0, 2.0]
    assert hydrated.feature("userGenre1") == "Drama"


def test_get_by_category_sorted_by_rating(catalog):
    drama = catalog.get_by_category("Drama", limit=20, sort_key=SortKey.RATING)
    assert [m.movie_id for m in drama] == [3, 2, 5]

    limited = catalog.get_by_category("Drama", limit=2, sort_key=SortKey.RATING)
    assert [m.movie_id for m in limited] == [3, 2]


def test_get_by_category_unknown_genre(catalog):
    assert catalog.get_by_category("Western", limit=20, sort_key=SortKey.RATING) == []


def test_get_top_by_release_year(catalog):
    latest = catalog.get_top(3, SortKey.RELEASE_YEAR)
    assert [m.movie_id for m in latest] == [4, 5, 6]


def test_get_top_ties_break_on_id():
    catalog = InMemoryCatalog([
        Movie(9, average_rating=4.0),
        Movie(2, average_rating=4.0),
        Movie(5, average_rating=4.5),
    ])
    assert [m.movie_id for m in catalog.get_top(10, SortKey.RATING)] == [5, 2, 9]


def test_from_dataframe_movielens_style():
    df = pd.DataFrame(
        {
            "movieId": [1, 2],
            "title": ["Toy Story (1995)", "Heat (1995)"],
            "genres": ["Adventure|Animation", "Action|Crime"],
            "releaseYear": [1995, 1995],
            "averageRating": [3.9, 3.8],
            "embedding": ["0.1 0.2", None],
            "movieRatingStddev": [0.8, None],
        }
    )
    catalog = InMemoryCatalog.from_dataframe(df)

    toy_story = catalog.get_by_id(1)
    assert toy_story.genres == ("Adventure", "Animation")
    assert toy_story.embedding.tolist() == [0.1, 0.2]
    assert toy_story.features == {"movieRatingStddev": "0.8"}

    heat = catalog.get_by_id(2)
    assert heat.embedding is None
    assert heat.features == {}
    assert [m.movie_id for m in catalog.get_by_category("Crime", 5, SortKey.RATING)] == [2]


def test_from_dataframe_requires_id():
    with pytest.raises(ValueError):
        InMemoryCatalog.from_dataframe(pd.DataFrame({"title": ["No id"]}))


def test_user_store_lookup():
    store = InMemoryUserStore([User(user_id=1)])
    assert store.get_by_id(1).user_id == 1
    assert store.get_by_id(2) is None
