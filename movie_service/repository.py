"""Persistence for movie rows."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from movie_service.db import session_scope
from movie_service.models import Movie
from movie_service.services.errors import Conflict, NotFound, StoreError

logger = logging.getLogger(__name__)

DUPLICATE_TITLE_MESSAGE = "movie with same title already exists"


def normalize_title(title: str) -> str:
    return title.strip().lower()


def _parse_id(raw: str | int) -> int | None:
    """Path and query values arrive as strings; anything non-numeric matches no row."""
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


@dataclass(slots=True)
class NewMovie:
    """Column values for an insert or a full-field update."""

    title: str
    release_year: int
    genre: str
    cover_url: str | None = None

    def values(self) -> dict:
        # An empty cover leaves the column out of the statement entirely.
        values = {
            "title": self.title,
            "title_normalized": normalize_title(self.title),
            "release_year": self.release_year,
            "genre": self.genre,
        }
        if self.cover_url:
            values["cover_url"] = self.cover_url
        return values


class MovieRepository:
    """Data access for the movie_details table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def list_all(self) -> list[Movie]:
        query = select(Movie).order_by(Movie.movie_id)
        with _store_errors("list_all"), session_scope(self._session_factory) as session:
            return list(session.execute(query).scalars())

    def list_by_year(self, year: str) -> list[Movie]:
        parsed = _parse_id(year)
        if parsed is None:
            return []
        query = select(Movie).where(Movie.release_year == parsed).order_by(Movie.movie_id)
        with _store_errors("list_by_year"), session_scope(self._session_factory) as session:
            return list(session.execute(query).scalars())

    def get_by_id(self, movie_id: str | int) -> Movie:
        parsed = _parse_id(movie_id)
        movie = None
        if parsed is not None:
            query = select(Movie).where(Movie.movie_id == parsed)
            with _store_errors("get_by_id"), session_scope(self._session_factory) as session:
                movie = session.execute(query).scalar_one_or_none()
        if movie is None:
            raise NotFound("No movie found with given movieId")
        return movie

    def get_by_title(self, title: str) -> Movie:
        query = select(Movie).where(Movie.title_normalized == normalize_title(title))
        with _store_errors("get_by_title"), session_scope(self._session_factory) as session:
            movie = session.execute(query).scalars().first()
        if movie is None:
            raise NotFound("No movie found with given movie title")
        return movie

    def insert(self, movie: NewMovie) -> int:
        """Insert the row and return its store-assigned movieId."""
        statement = insert(Movie).values(**movie.values()).returning(Movie.movie_id)
        with _store_errors("insert"), session_scope(self._session_factory) as session:
            return session.execute(statement).scalar_one()

    def update_by_id(self, movie_id: str | int, movie: NewMovie) -> None:
        parsed = _parse_id(movie_id)
        if parsed is None:
            return
        statement = (
            update(Movie)
            .where(Movie.movie_id == parsed)
            .values(**movie.values())
            .execution_options(synchronize_session=False)
        )
        with _store_errors("update_by_id"), session_scope(self._session_factory) as session:
            session.execute(statement)

    def update_summary(self, movie_id: str | int, summary: str) -> None:
        parsed = _parse_id(movie_id)
        if parsed is None:
            return
        statement = (
            update(Movie)
            .where(Movie.movie_id == parsed)
            .values(generated_summary=summary)
            .execution_options(synchronize_session=False)
        )
        with _store_errors("update_summary"), session_scope(self._session_factory) as session:
            session.execute(statement)
        logger.info("Stored generated summary for movie %s", parsed)

    def delete_by_id(self, movie_id: str | int) -> None:
        parsed = _parse_id(movie_id)
        if parsed is None:
            return
        statement = (
            delete(Movie)
            .where(Movie.movie_id == parsed)
            .execution_options(synchronize_session=False)
        )
        with _store_errors("delete_by_id"), session_scope(self._session_factory) as session:
            session.execute(statement)


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Turn SQLAlchemy failures into the service's error kinds."""

    try:
        yield
    except IntegrityError as exc:
        logger.info("%s rejected by unique title constraint", operation)
        raise Conflict(DUPLICATE_TITLE_MESSAGE) from exc
    except SQLAlchemyError as exc:
        logger.error("%s failed: %s", operation, exc)
        raise StoreError(f"{operation} error: {exc}") from exc
