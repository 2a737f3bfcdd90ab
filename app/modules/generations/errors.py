"""Failure kinds raised by the flashcard generation pipeline.

Every error carries a ``kind`` so callers can branch on the failure kind
(``match exc.kind: ...``) without depending on the class hierarchy. The
``ApiError`` family mirrors how the provider answered; ``NetworkError`` means
the provider was never reached.
"""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    CONFIGURATION = "configuration_error"
    AUTHENTICATION = "authentication_error"
    RATE_LIMIT = "rate_limit_error"
    SERVER = "server_error"
    API = "api_error"
    NETWORK = "network_error"
    SCHEMA_VALIDATION = "schema_validation_error"
    PERSISTENCE = "persistence_error"
    GENERATION_FAILED = "generation_failed"


class GenerationPipelineError(Exception):
    kind: ErrorKind = ErrorKind.GENERATION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(GenerationPipelineError):
    """A required setting (e.g. the provider API key) is missing."""

    kind = ErrorKind.CONFIGURATION


class ApiError(GenerationPipelineError):
    """The provider answered with a non-2xx status."""

    kind = ErrorKind.API

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ApiError):
    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str):
        super().__init__(message, 401)


class RateLimitError(ApiError):
    kind = ErrorKind.RATE_LIMIT

    def __init__(self, message: str):
        super().__init__(message, 429)


class ServerError(ApiError):
    kind = ErrorKind.SERVER


class NetworkError(GenerationPipelineError):
    """Transport failure: DNS, TLS, connection reset, timeout."""

    kind = ErrorKind.NETWORK


class SchemaValidationError(GenerationPipelineError):
    """The provider answered but the content did not match the requested shape."""

    kind = ErrorKind.SCHEMA_VALIDATION


class GenerationFailedError(GenerationPipelineError):
    """Single opaque error surfaced past the generation boundary."""

    kind = ErrorKind.GENERATION_FAILED

    def __init__(
        self,
        message: str = "Failed to generate flashcards due to an AI service error.",
    ):
        super().__init__(message)


def error_kind_of(exc: BaseException) -> ErrorKind:
    """Kind recorded in the error log; non-pipeline errors come from the data store."""
    if isinstance(exc, GenerationPipelineError):
        return exc.kind
    return ErrorKind.PERSISTENCE


__all__ = [
    "ErrorKind",
    "GenerationPipelineError",
    "ConfigurationError",
    "ApiError",
    "AuthenticationError",
    "RateLimitError",
    "ServerError",
    "NetworkError",
    "SchemaValidationError",
    "GenerationFailedError",
    "error_kind_of",
]
