"""Database engine construction and session management."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import URL, Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from movie_service.core.config import Settings
from movie_service.core.secrets import SecretProvider
from movie_service.models import Base

logger = logging.getLogger(__name__)


def resolve_database_url(settings: Settings, secrets: SecretProvider | None = None) -> str | URL:
    """Return the SQLAlchemy URL, pulling the password from Secrets Manager if configured."""

    if not settings.secret_arn:
        return settings.database_url
    if secrets is None:
        raise ValueError("SECRET_ARN is set but no secret provider was supplied")

    password = secrets.get(settings.secret_arn, settings.db_secret_key)
    return URL.create(
        drivername=settings.db_driver,
        username=settings.db_user,
        password=password,
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
    )


def build_engine(url: str | URL, **kwargs) -> Engine:
    """Create the shared engine; SQLite connections may cross worker threads."""

    if str(url).startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, future=True, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def init_models(engine: Engine) -> None:
    """Create tables if they do not exist (handy for local dev)."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Commit on success, roll back on error, always close."""

    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
