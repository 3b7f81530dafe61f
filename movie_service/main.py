"""FastAPI entrypoint wiring the movie repository, summary model and cover storage."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

import boto3
from fastapi import APIRouter, Depends, FastAPI, File, Form, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from movie_service.core.config import Settings, get_settings
from movie_service.core.secrets import SecretProvider
from movie_service.db import build_engine, build_session_factory, init_models, resolve_database_url
from movie_service.models import Movie
from movie_service.repository import MovieRepository
from movie_service.services.errors import (
    Conflict,
    GenerationError,
    MovieServiceError,
    NotFound,
    ObjectStoreError,
    StoreError,
    ValidationError,
)
from movie_service.services.movies import CoverImage, MovieForm, MovieService
from movie_service.services.storage import CoverImageStore
from movie_service.services.summary import SummaryGenerator

logger = logging.getLogger(__name__)

# Used only when ERROR_STATUS_MAPPING is enabled; otherwise every failure is a 400.
_ERROR_STATUS: dict[type[MovieServiceError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
    StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    GenerationError: status.HTTP_502_BAD_GATEWAY,
    ObjectStoreError: status.HTTP_502_BAD_GATEWAY,
}


class MovieResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    movie_id: int
    title: str
    release_year: int
    genre: str
    cover_url: str | None = None
    generated_summary: str | None = None


def envelope(status_code: int, ok: bool, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": ok, "statusCode": status_code, "message": message, "data": data},
    )


def _movie_payload(movie: Movie) -> dict[str, Any]:
    return MovieResponse.model_validate(movie).model_dump(by_alias=True)


def build_movie_service(settings: Settings) -> MovieService:
    """Create the long-lived clients once and hand them to the service."""

    logger.info("Initializing AWS SDK clients (region=%s)", settings.aws_region)
    s3_client = boto3.client("s3", region_name=settings.aws_region)

    secrets = None
    if settings.secret_arn:
        secrets = SecretProvider(boto3.client("secretsmanager", region_name=settings.aws_region))

    engine = build_engine(resolve_database_url(settings, secrets))
    init_models(engine)

    return MovieService(
        repository=MovieRepository(build_session_factory(engine)),
        generator=SummaryGenerator(settings=settings),
        covers=CoverImageStore(
            s3_client,
            bucket=settings.bucket_name,
            region=settings.aws_region,
            wait_seconds=settings.upload_wait_seconds,
        ),
    )


def get_movie_service(request: Request) -> MovieService:
    return request.app.state.movie_service


def _form(title: str, release_year: str, genre: str, cover_image: UploadFile | None) -> MovieForm:
    cover = None
    if cover_image is not None and cover_image.filename:
        logger.info("Movie coverImage file provided, filename: %s", cover_image.filename)
        cover = CoverImage(
            filename=cover_image.filename,
            content=cover_image.file.read(),
            content_type=cover_image.content_type,
        )
    return MovieForm(title=title, release_year=release_year, genre=genre, cover=cover)


router = APIRouter(prefix="/api/movies")


@router.get("")
def list_movies(
    year: str | None = None,
    service: MovieService = Depends(get_movie_service),
) -> JSONResponse:
    movies = service.list_movies(year)
    if not movies:
        return envelope(status.HTTP_404_NOT_FOUND, False, "No movies found")
    return envelope(
        status.HTTP_200_OK,
        True,
        "Movies fetched successfully.",
        [_movie_payload(movie) for movie in movies],
    )


@router.get("/{movie_id}")
def get_movie(movie_id: str, service: MovieService = Depends(get_movie_service)) -> JSONResponse:
    movie = service.get_movie(movie_id)
    return envelope(status.HTTP_200_OK, True, "Movie fetched successfully", _movie_payload(movie))


@router.get("/{movie_id}/summary")
def get_movie_summary(movie_id: str, service: MovieService = Depends(get_movie_service)) -> JSONResponse:
    summary = service.get_summary(movie_id)
    return envelope(status.HTTP_200_OK, True, "Movie summary fetched.", {"summary": summary})


@router.post("")
def add_movie(
    title: str = Form(default=""),
    release_year: str = Form(default="", alias="releaseYear"),
    genre: str = Form(default=""),
    cover_image: UploadFile | None = File(default=None, alias="coverImage"),
    service: MovieService = Depends(get_movie_service),
) -> JSONResponse:
    service.create_movie(_form(title, release_year, genre, cover_image))
    return envelope(status.HTTP_200_OK, True, "Movie added successfully")


@router.put("/{movie_id}")
def update_movie(
    movie_id: str,
    title: str = Form(default=""),
    release_year: str = Form(default="", alias="releaseYear"),
    genre: str = Form(default=""),
    cover_image: UploadFile | None = File(default=None, alias="coverImage"),
    service: MovieService = Depends(get_movie_service),
) -> JSONResponse:
    service.update_movie(movie_id, _form(title, release_year, genre, cover_image))
    return envelope(status.HTTP_200_OK, True, "Movie updated successfully")


@router.delete("/{movie_id}")
def delete_movie(movie_id: str, service: MovieService = Depends(get_movie_service)) -> JSONResponse:
    service.delete_movie(movie_id)
    return envelope(status.HTTP_200_OK, True, "Movie deleted successfully")


def create_app(*, service: MovieService | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the ASGI app; a pre-built service skips client construction at startup."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "movie_service", None) is None:
            app.state.movie_service = build_movie_service(settings)
        yield

    app = FastAPI(title="Movie Catalogue Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.movie_service = service
    app.include_router(router)

    @app.get("/healthcheck")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.exception_handler(MovieServiceError)
    async def handle_service_error(_: Request, exc: MovieServiceError) -> JSONResponse:
        status_code = status.HTTP_400_BAD_REQUEST
        if settings.error_status_mapping:
            status_code = next(
                (code for kind, code in _ERROR_STATUS.items() if isinstance(exc, kind)),
                status.HTTP_400_BAD_REQUEST,
            )
        return envelope(status_code, False, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return envelope(status.HTTP_400_BAD_REQUEST, False, str(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: %s", exc)
        return envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, False, "Internal server error")

    return app


app = create_app()
