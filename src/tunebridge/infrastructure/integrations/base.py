"""Shared plumbing for OAuth-protected provider REST clients."""

import logging
from typing import Any, ClassVar, cast

import httpx

from tunebridge.domain.entities import Provider, TokenGrant
from tunebridge.domain.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    RateLimitExceededError,
    TokenRefreshException,
)
from tunebridge.infrastructure.integrations.http_pool import HttpClientPool
from tunebridge.infrastructure.rate_limiter import (
    RateLimiter,
    RateLimiterConfig,
    get_limiter,
)

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


class OAuthApiClient:
    """Base class for Spotify / YouTube clients.

    Hey future me - a client instance carries ONE user's access token and lives for one request.
    The heavy stuff (HTTP connections, rate limiter buckets) is shared: the httpx client comes
    from HttpClientPool unless a test injects one, the limiter from get_limiter(provider).
    """

    PROVIDER: ClassVar[Provider]
    TOKEN_URL: ClassVar[str]
    API_BASE_URL: ClassVar[str]

    def __init__(
        self,
        access_token: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
        rate_limit_config: RateLimiterConfig | None = None,
    ) -> None:
        self.access_token = access_token
        self._client = http_client
        self._rate_limiter = rate_limiter or get_limiter(
            self.PROVIDER.value, rate_limit_config
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get the injected client or borrow the shared pool client."""
        if self._client is None:
            self._client = await HttpClientPool.get_client()
        return self._client

    def _require_token(self) -> str:
        if not self.access_token:
            raise AuthenticationError(
                f"Connect {self.PROVIDER.display_name} first",
                provider=self.PROVIDER.value,
            )
        return self.access_token

    # Hey future me - CENTRALIZED API REQUEST with Rate Limiting!
    # All API calls go through here:
    # - Token Bucket rate limiting (prevents 429s)
    # - Retry with exponential backoff on 429, honoring Retry-After
    # - Max 3 retries to prevent infinite loops
    # - Non-2xx → ExternalServiceError carrying the upstream status
    async def _api_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        max_retries: int = 3,
    ) -> httpx.Response:
        """Make a rate-limited, authenticated API request.

        Args:
            method: HTTP method (GET, POST, ...)
            url: Full URL (a pagination cursor can be passed as-is)
            params: Query parameters
            json: JSON body
            max_retries: Max retries on 429 (default 3)

        Returns:
            The successful httpx.Response

        Raises:
            RateLimitExceededError: Still 429 after all retries
            ExternalServiceError: Any other non-2xx status
        """
        client = await self._get_client()
        headers = {"Authorization": f"Bearer {self._require_token()}"}

        for attempt in range(max_retries + 1):
            async with self._rate_limiter:
                response = await client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json,
                    headers=headers,
                )

            if response.status_code != 429:
                break

            retry_after_str = response.headers.get("Retry-After")
            retry_after = int(retry_after_str) if retry_after_str else None

            if attempt >= max_retries:
                error_msg = (
                    f"{self.PROVIDER.display_name} API rate limited (429) after "
                    f"{max_retries} retries. Retry-After: {retry_after or 'not provided'} seconds."
                )
                logger.error(error_msg)
                raise RateLimitExceededError(error_msg, retry_after=retry_after)

            wait_time = await self._rate_limiter.handle_rate_limit_response(retry_after)
            logger.warning(
                "%s 429 Rate Limit (attempt %d/%d): waited %.1fs, retrying",
                self.PROVIDER.value,
                attempt + 1,
                max_retries,
                wait_time,
            )

        if response.is_error:
            raise ExternalServiceError(
                f"{self.PROVIDER.display_name} API error: {response.status_code} "
                f"{_error_summary(response)}",
                status_code=response.status_code,
            )
        return response

    async def _get_json(
        self, url: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        response = await self._api_request("GET", url, params=params)
        return cast(dict[str, Any], response.json())

    async def _post_json(
        self,
        url: str,
        body: dict[str, Any],
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self._api_request("POST", url, params=params, json=body)
        if not response.content:
            return {}
        return cast(dict[str, Any], response.json())

    # Yo, refresh grants are form-encoded (NOT JSON) and do NOT go through the bearer-token path.
    # Providers answer 400 {"error": "invalid_grant"} when the refresh token is dead - that and
    # 401/403 become TokenRefreshException; anything else non-2xx too, with its status attached.
    async def _post_token_grant(
        self,
        data: dict[str, str],
        headers: dict[str, str] | None = None,
    ) -> TokenGrant:
        client = await self._get_client()
        request_headers = {"Content-Type": "application/x-www-form-urlencoded"}
        if headers:
            request_headers.update(headers)

        response = await client.post(self.TOKEN_URL, data=data, headers=request_headers)

        if response.is_error:
            error_code: str | None = None
            description = response.text[:200]
            try:
                error_data = response.json()
                error_code = error_data.get("error")
                description = error_data.get("error_description", description)
            except ValueError:
                pass
            raise TokenRefreshException(
                message=(
                    f"{self.PROVIDER.display_name} token refresh failed "
                    f"({response.status_code}): {description}"
                ),
                error_code=error_code,
                http_status=response.status_code,
            )

        payload = cast(dict[str, Any], response.json())
        if "access_token" not in payload:
            raise TokenRefreshException(
                message=f"{self.PROVIDER.display_name} token response without access_token",
                http_status=response.status_code,
            )

        return TokenGrant(
            access_token=payload["access_token"],
            expires_in=int(payload.get("expires_in", DEFAULT_TOKEN_LIFETIME_SECONDS)),
            refresh_token=payload.get("refresh_token") or None,
        )


def _error_summary(response: httpx.Response) -> str:
    """Pull a short error message out of a provider error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("message", error))
    if error:
        return str(error)
    return response.text[:200]
