from unittest import mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from movie_service.core.config import Settings
from movie_service.db import build_engine, build_session_factory, init_models
from movie_service.main import create_app
from movie_service.repository import MovieRepository, NewMovie
from movie_service.services.movies import MovieService
from movie_service.services.storage import CoverImageStore


class FakeSummaryGenerator:
    def __init__(self, text: str = "A desert planet, a prophecy and a war over spice."):
        self.text = text
        self.calls: list[tuple[str, int, str]] = []

    def generate(self, title: str, release_year: int, genre: str) -> str:
        self.calls.append((title, release_year, genre))
        return self.text


@pytest.fixture(autouse=True)
def reset_env(monkeypatch):
    # Keep ambient configuration from changing status codes or enabling real clients
    for name in ("ERROR_STATUS_MAPPING", "OPENAI_API_KEY", "SECRET_ARN", "DATABASE_URL", "BUCKET_NAME"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    init_models(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def repository(engine):
    return MovieRepository(build_session_factory(engine))


@pytest.fixture
def generator():
    return FakeSummaryGenerator()


@pytest.fixture
def s3_client():
    return mock.MagicMock()


@pytest.fixture
def covers(s3_client):
    return CoverImageStore(s3_client, bucket="movie-covers", region="us-east-1")


@pytest.fixture
def service(repository, generator, covers):
    return MovieService(repository, generator, covers, key_factory=lambda: "abc123")


@pytest.fixture
def settings():
    return Settings(ERROR_STATUS_MAPPING=False)


@pytest.fixture
def client(service, settings):
    return TestClient(create_app(service=service, settings=settings))


@pytest.fixture
def add_movie(repository):
    def _add(title: str, release_year: int = 2021, genre: str = "Sci-Fi", cover_url: str | None = None):
        movie_id = repository.insert(
            NewMovie(title=title, release_year=release_year, genre=genre, cover_url=cover_url)
        )
        return repository.get_by_id(movie_id)

    return _add
