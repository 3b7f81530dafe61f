"""Movie orchestration: lazy summaries, unique titles and cover images."""

from __future__ import annotations

import logging
import os
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Protocol

from movie_service.models import Movie
from movie_service.repository import DUPLICATE_TITLE_MESSAGE, NewMovie, normalize_title
from movie_service.services.errors import Conflict, NotFound, ObjectStoreError, ValidationError

logger = logging.getLogger(__name__)

_MAX_RELEASE_YEAR = 65535


class MovieStore(Protocol):
    def list_all(self) -> list[Movie]: ...
    def list_by_year(self, year: str) -> list[Movie]: ...
    def get_by_id(self, movie_id: str | int) -> Movie: ...
    def get_by_title(self, title: str) -> Movie: ...
    def insert(self, movie: NewMovie) -> int: ...
    def update_by_id(self, movie_id: str | int, movie: NewMovie) -> None: ...
    def update_summary(self, movie_id: str | int, summary: str) -> None: ...
    def delete_by_id(self, movie_id: str | int) -> None: ...


class SummaryProvider(Protocol):
    def generate(self, title: str, release_year: int, genre: str) -> str: ...


class CoverStore(Protocol):
    def upload(self, body: bytes, key: str, content_type: str | None = None) -> str: ...
    def delete(self, key: str) -> None: ...
    def key_from_url(self, url: str) -> str: ...


@dataclass(slots=True)
class CoverImage:
    filename: str
    content: bytes
    content_type: str | None = None


@dataclass(slots=True)
class MovieForm:
    """Raw form fields as submitted by the client."""

    title: str
    release_year: str
    genre: str
    cover: CoverImage | None = None


class _KeyedLocks:
    """One lock per key, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, key: int) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.get(key, (threading.Lock(), 0))
            self._locks[key] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._guard:
                lock, users = self._locks[key]
                if users == 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)


class MovieService:
    def __init__(
        self,
        repository: MovieStore,
        generator: SummaryProvider,
        covers: CoverStore,
        *,
        key_factory: Callable[[], str] | None = None,
    ) -> None:
        self.repository = repository
        self.generator = generator
        self.covers = covers
        self._key_factory = key_factory or (lambda: str(uuid.uuid4()))
        self._summary_locks = _KeyedLocks()

    def list_movies(self, year: str | None = None) -> list[Movie]:
        if year:
            return self.repository.list_by_year(year)
        return self.repository.list_all()

    def get_movie(self, movie_id: str) -> Movie:
        return self.repository.get_by_id(movie_id)

    def get_summary(self, movie_id: str) -> str:
        """Return the cached summary, generating and storing it on first request.

        Concurrent first requests for one movie share a single generation: the
        row is re-read under a per-movie lock, so late arrivals pick up the
        stored text instead of calling the model again.
        """

        movie = self.repository.get_by_id(movie_id)
        if movie.generated_summary:
            return movie.generated_summary

        with self._summary_locks.hold(movie.movie_id):
            movie = self.repository.get_by_id(movie.movie_id)
            if movie.generated_summary:
                return movie.generated_summary

            logger.info("No summary stored for movie %s, generating one", movie.movie_id)
            summary = self.generator.generate(movie.title, movie.release_year, movie.genre)
            self.repository.update_summary(movie.movie_id, summary)
            return summary

    def create_movie(self, form: MovieForm) -> int:
        title, release_year, genre = _validate(form)
        if self._find_by_title(title) is not None:
            logger.info("Rejected duplicate title '%s'", title)
            raise Conflict(DUPLICATE_TITLE_MESSAGE)

        cover_url = self._upload_cover(form.cover)
        return self.repository.insert(
            NewMovie(title=title, release_year=release_year, genre=genre, cover_url=cover_url)
        )

    def update_movie(self, movie_id: str, form: MovieForm) -> None:
        title, release_year, genre = _validate(form)
        current = self.repository.get_by_id(movie_id)

        if normalize_title(current.title) != normalize_title(title):
            existing = self._find_by_title(title)
            if existing is not None and existing.movie_id != current.movie_id:
                logger.info("Rejected duplicate title '%s'", title)
                raise Conflict(DUPLICATE_TITLE_MESSAGE)

        # Without a new cover the stored coverUrl is left untouched.
        cover_url = self._upload_cover(form.cover)
        self.repository.update_by_id(
            current.movie_id,
            NewMovie(title=title, release_year=release_year, genre=genre, cover_url=cover_url),
        )

    def delete_movie(self, movie_id: str) -> None:
        movie = self.repository.get_by_id(movie_id)
        self.repository.delete_by_id(movie.movie_id)

        if movie.cover_url:
            key = self.covers.key_from_url(movie.cover_url)
            try:
                self.covers.delete(key)
            except ObjectStoreError as exc:
                logger.warning("Error while deleting cover object %s: %s", key, exc)

    def _find_by_title(self, title: str) -> Movie | None:
        try:
            return self.repository.get_by_title(title)
        except NotFound:
            return None

    def _upload_cover(self, cover: CoverImage | None) -> str | None:
        if cover is None:
            return None
        extension = os.path.splitext(cover.filename)[1]
        key = f"{self._key_factory()}{extension}"
        logger.info("Uploading cover '%s' as %s", cover.filename, key)
        return self.covers.upload(cover.content, key, cover.content_type)


def _validate(form: MovieForm) -> tuple[str, int, str]:
    title = (form.title or "").strip()
    raw_year = (form.release_year or "").strip()
    genre = (form.genre or "").strip()
    if not title or not raw_year or not genre:
        raise ValidationError("'title' or 'releaseYear' or 'genre' field cannot be empty")
    try:
        release_year = int(raw_year)
    except ValueError as exc:
        raise ValidationError("releaseYear must be a number between 0 and 65535") from exc
    if not 0 <= release_year <= _MAX_RELEASE_YEAR:
        raise ValidationError("releaseYear must be a number between 0 and 65535")
    return title, release_year, genre
