"""Error kinds raised by the repository, providers and movie service."""

from __future__ import annotations


class MovieServiceError(Exception):
    """Base exception for every failure surfaced to the API layer."""


class ValidationError(MovieServiceError):
    """Raised when a required form field is missing or malformed."""


class Conflict(MovieServiceError):
    """Raised when another movie already holds the normalized title."""


class NotFound(MovieServiceError):
    """Raised when no movie row matches the given id or title."""


class StoreError(MovieServiceError):
    """Raised when the database rejects or fails a statement."""


class GenerationError(MovieServiceError):
    """Raised when the language model fails or returns no usable text."""


class ObjectStoreError(MovieServiceError):
    """Raised when an S3 call for a cover image fails."""


class UploadError(ObjectStoreError):
    """Raised when a cover image cannot be written or never becomes visible."""


class SecretError(MovieServiceError):
    """Raised when a credential cannot be read from Secrets Manager."""
