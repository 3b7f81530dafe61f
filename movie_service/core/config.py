"""Application configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    summary_max_tokens: int = Field(default=500, alias="SUMMARY_MAX_TOKENS")

    database_url: str = Field(default="sqlite:///./movies.db", alias="DATABASE_URL")
    db_driver: str = Field(default="postgresql+psycopg", alias="DB_DRIVER")
    db_user: str | None = Field(default=None, alias="DB_USER")
    db_host: str = Field(default="127.0.0.1", alias="DB_HOST")
    db_port: int | None = Field(default=None, alias="DB_PORT")
    db_name: str | None = Field(default=None, alias="DB_NAME")
    secret_arn: str | None = Field(default=None, alias="SECRET_ARN")
    db_secret_key: str = Field(default="password", alias="DB_SECRET_KEY")

    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    bucket_name: str | None = Field(default=None, alias="BUCKET_NAME")
    upload_wait_seconds: int = Field(default=60, alias="UPLOAD_WAIT_SECONDS")

    error_status_mapping: bool = Field(default=False, alias="ERROR_STATUS_MAPPING")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
