"""Custom exception handlers for the FastAPI application.

Converts domain exceptions and request validation errors into JSON responses of the
form {"detail": ...} with the right status code.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tunebridge.domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ExternalServiceError,
    RateLimitExceededError,
    TransferFailedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# Hey future me - Pydantic's exc.errors() can include the raw request body as bytes in the
# 'input' field, which JSONResponse can't serialize. Walk the structure and decode any bytes.
# Exception objects in 'ctx' (e.g. from validators) get str()'d for the same reason.
def _sanitize_validation_errors(
    errors: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Sanitize validation errors so they are JSON-serializable."""

    def _sanitize_value(value: Any) -> Any:
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError:
                return value.decode("latin-1")
        if isinstance(value, dict):
            return {k: _sanitize_value(v) for k, v in value.items()}
        if isinstance(value, list | tuple):
            return [_sanitize_value(item) for item in value]
        if isinstance(value, Exception):
            return str(value)
        return value

    return [_sanitize_value(error) for error in errors]


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain and validation exceptions.

    Status mapping:
    - RequestValidationError / ValidationError → 400
    - AuthenticationError → 401 (detail names the provider to connect)
    - RateLimitExceededError → 429 (Retry-After forwarded)
    - ExternalServiceError → 502
    - ConfigurationError → 503
    - TransferFailedError → 500

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies with 400 Bad Request."""
        sanitized_errors = _sanitize_validation_errors(list(exc.errors()))
        logger.warning(
            "Request validation error at %s: %s",
            request.url.path,
            sanitized_errors,
            extra={"path": request.url.path, "errors": sanitized_errors},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": sanitized_errors},
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle domain validation errors with 400 Bad Request."""
        logger.warning(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message},
        )

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle missing provider credentials with 401 Unauthorized."""
        logger.info(
            "Authentication required at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": exc.message},
        )

    # Registered before ExternalServiceError's handler, but Starlette picks the most specific
    # class via the MRO anyway.
    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_error_handler(
        request: Request, exc: RateLimitExceededError
    ) -> JSONResponse:
        """Handle exhausted upstream rate limit retries with 429."""
        logger.warning(
            "Upstream rate limit at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "retry_after": exc.retry_after},
        )
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": exc.message},
            headers=headers,
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_error_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        """Handle upstream API failures with 502 Bad Gateway."""
        logger.error(
            "External service error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "upstream_status": exc.status_code},
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": exc.message},
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle configuration errors with 503 Service Unavailable."""
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": exc.message},
        )

    @app.exception_handler(TransferFailedError)
    async def transfer_failed_handler(
        request: Request, exc: TransferFailedError
    ) -> JSONResponse:
        """Handle fetch / playlist-creation faults with 500."""
        logger.error(
            "Transfer failed at %s during %s: %s",
            request.url.path,
            exc.phase,
            exc.message,
            extra={"path": request.url.path, "phase": exc.phase},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message},
        )
