"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so handlers can render it without parsing
    # str(exception). Don't raise this directly - use a specific subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    HTTP Status: 400

    Example:
        raise ValidationError("playlistName must not be empty")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised when required configuration is missing or invalid, e.g. a refresh is
    needed but the provider's client credentials are not set.

    HTTP Status: 503 (Service Unavailable)
    """

    pass


class AuthenticationError(DomainException):
    """A required provider credential is missing from the session.

    HTTP Status: 401

    The message names the provider the user still has to connect, so the UI can
    show "Connect Spotify first" without mapping error codes.
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class TokenRefreshException(DomainException):
    """Raised when a provider rejects a refresh-token grant.

    Hey future me - the credential manager ALWAYS catches this! A failed refresh must never
    abort a request; the stale bundle stays in the session and the next API call decides.
    Common causes: user revoked access, refresh token rotated elsewhere, app credentials changed.
    """

    def __init__(
        self,
        message: str = "Token refresh failed. Please reconnect the account.",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code  # e.g., "invalid_grant"
        self.http_status = http_status  # e.g., 400, 401

    @property
    def requires_reauth(self) -> bool:
        """Check if error requires the user to sign in again."""
        return self.error_code == "invalid_grant" or self.http_status in (400, 401, 403)


class ExternalServiceError(DomainException):
    """External service (Spotify, YouTube) returned an error.

    HTTP Status: 502 (Bad Gateway) when it escapes a route.

    Example:
        raise ExternalServiceError("YouTube API error: 403 quotaExceeded", status_code=403)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceededError(ExternalServiceError):
    """External service kept answering 429 after all retries.

    HTTP Status: 429
    """

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class TransferFailedError(DomainException):
    """A transfer aborted in its fetch or playlist-creation phase.

    HTTP Status: 500

    Per-track failures never raise this; they end up in the result summary.
    """

    def __init__(self, message: str, phase: str) -> None:
        super().__init__(message)
        self.phase = phase


__all__ = [
    "DomainException",
    "ValidationError",
    "ConfigurationError",
    "AuthenticationError",
    "TokenRefreshException",
    "ExternalServiceError",
    "RateLimitExceededError",
    "TransferFailedError",
]
