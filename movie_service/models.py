"""SQLAlchemy ORM models.

This module defines the "movie_details" table. Column names keep the
camelCase spelling used by the existing schema while the Python attributes
are snake_case.
"""

from __future__ import annotations

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Movie(Base):
    """A catalogued movie with an optional cover image and cached summary."""

    __tablename__ = "movie_details"

    movie_id: Mapped[int] = mapped_column("movieId", Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column("title", String(255))
    # Trimmed, lowercased title computed in Python; SQL lower() is ASCII-only on SQLite.
    title_normalized: Mapped[str] = mapped_column("titleNormalized", String(255), unique=True)
    release_year: Mapped[int] = mapped_column("releaseYear", Integer, index=True)
    genre: Mapped[str] = mapped_column("genre", String(255))
    cover_url: Mapped[str | None] = mapped_column("coverUrl", String(1024), nullable=True)
    generated_summary: Mapped[str | None] = mapped_column("generatedSummary", Text, nullable=True)
