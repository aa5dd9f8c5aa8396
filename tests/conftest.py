import numpy as np
import pytest
import requests

from catalog import InMemoryCatalog, InMemoryUserStore, Movie, User
from ranking.serving import TFServingClient


def din_movie_features(movie_id, genres=("Action",)):
    features = {
        "movieAvgRating": "3.8",
        "movieRatingStddev": "0.9",
        "movieRatingCount": str(100 + movie_id),
        "releaseYear": str(1990 + movie_id),
    }
    for i, genre in enumerate(genres[:3], 1):
        features[f"movieGenre{i}"] = genre
    return features


DIN_USER_FEATURES = {
    "userGenre1": "Action",
    "userGenre2": "Drama",
    "userAvgRating": "3.5",
    "userRatingStddev": "1.1",
    "userRatingCount": "42",
    "userRatedMovie1": "1",
    "userRatedMovie2": "2",
    "userRatedMovie3": "3",
    "userRatedMovie4": "4",
    "userRatedMovie5": "5",
}


@pytest.fixture
def movies():
    # id, genres, rating, year, embedding
    rows = [
        (1, ("Action",), 4.5, 1999, [1.0, 0.0]),
        (2, ("Action", "Drama"), 4.0, 2005, [0.0, 1.0]),
        (3, ("Drama",), 4.8, 1980, [1.0, 1.0]),
        (4, ("Comedy",), 3.0, 2020, None),
        (5, ("Comedy", "Drama"), 2.5, 2019, [-1.0, 0.0]),
        (6, ("Horror",), 3.9, 2010, [0.6, 0.8]),
    ]
    return [
        Movie(
            movie_id=movie_id,
            title=f"Movie {movie_id}",
            genres=genres,
            average_rating=rating,
            release_year=year,
            embedding=emb,
            features=din_movie_features(movie_id, genres),
        )
        for movie_id, genres, rating, year, emb in rows
    ]


@pytest.fixture
def catalog(movies):
    return InMemoryCatalog(movies)


@pytest.fixture
def user():
    return User(
        user_id=7,
        embedding=np.array([1.0, 0.0]),
        features=dict(DIN_USER_FEATURES),
    )


@pytest.fixture
def user_store(user):
    return InMemoryUserStore([user, User(user_id=8)])


class DummyResponse:
    """Stand-in for requests.Response."""

    def __init__(self, body=None, status_code=200, invalid_json=False):
        self._body = body
        self.status_code = status_code
        self._invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


class DummySession:
    """
    Minimal session double recording POSTs.

    By default answers with one prediction per instance, scoring each
    instance by its movieId so results are deterministic.
    """

    def __init__(self, responder=None):
        self.calls = []
        self.closed = False
        self.responder = responder or self.score_by_movie_id

    @staticmethod
    def score_by_movie_id(url, payload):
        return DummyResponse(
            {"predictions": [[float(inst["movieId"]) / 10] for inst in payload["instances"]]}
        )

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        return self.responder(url, json)

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    return DummySession()


@pytest.fixture
def inference_client(session):
    return TFServingClient(timeout_seconds=1.0, session=session)
