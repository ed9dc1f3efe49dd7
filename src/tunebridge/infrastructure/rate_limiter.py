"""
Centralized Rate Limiter for External API Calls.

Hey future me – this is THE gate every provider API call goes through! Transfers issue one
search + one write per track, strictly in sequence, and this token bucket is what keeps that
sequence inside each provider's per-minute quota. Rates are configurable per provider
(SPOTIFY_REQUESTS_PER_SECOND, GOOGLE_REQUESTS_PER_SECOND, ...).

ALGORITHM: Token Bucket
- Bucket holds max_tokens
- Tokens refill at refill_rate per second
- Every request consumes 1 token
- Empty bucket: wait until a token is available

ADAPTIVE BACKOFF on 429:
- First 429: initial_backoff_seconds
- Every further 429 doubles it (capped at max_backoff_seconds)
- Retry-After header wins when the API sends one
- Backoff resets after a successful request

USAGE:
    limiter = get_limiter("spotify", RateLimiterConfig(max_tokens=10, refill_rate=2.0))

    async with limiter:
        response = await client.get(url)

    # On 429:
    await limiter.handle_rate_limit_response(retry_after)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RateLimiterConfig:
    """Configuration for a rate limiter.

    Defaults are tuned for Spotify (~180 requests/minute); we stay at 2 req/sec
    sustained with a burst of 10.
    """

    max_tokens: int = 10  # Bucket size
    refill_rate: float = 2.0  # Tokens per second
    max_backoff_seconds: float = 600.0  # Spotify can send Retry-After of several minutes
    initial_backoff_seconds: float = 1.0  # First 429 wait
    backoff_multiplier: float = 2.0  # Exponential backoff factor

    @classmethod
    def per_second(cls, requests_per_second: float, burst: int) -> "RateLimiterConfig":
        """Build a config from the two knobs exposed in settings."""
        return cls(max_tokens=max(1, burst), refill_rate=requests_per_second)


@dataclass
class RateLimiter:
    """Token Bucket Rate Limiter with adaptive backoff.

    Use it as an async context manager for automatic token handling.

    Attributes:
        config: Rate limiter configuration
        name: Label used in log lines
        _tokens: Current available tokens
        _last_refill: Last time tokens were refilled
        _current_backoff: Current backoff delay (resets on success)
        _lock: Async lock guarding the bucket
    """

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    name: str = "default"

    # Internal state (not in __init__ signature)
    _tokens: float = field(default=0.0, init=False)
    _last_refill: float = field(default_factory=time.monotonic, init=False)
    _current_backoff: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        """Initialize tokens to max capacity."""
        self._tokens = float(self.config.max_tokens)
        self._current_backoff = self.config.initial_backoff_seconds

    def _refill_tokens(self) -> None:
        """Add the tokens accumulated since the last refill."""
        now = time.monotonic()
        elapsed = now - self._last_refill

        new_tokens = elapsed * self.config.refill_rate
        self._tokens = min(self.config.max_tokens, self._tokens + new_tokens)
        self._last_refill = now

    async def acquire(self) -> None:
        """Acquire one token, waiting if necessary."""
        async with self._lock:
            self._refill_tokens()

            while self._tokens < 1.0:
                wait_time = (1.0 - self._tokens) / self.config.refill_rate
                logger.debug(
                    "RateLimiter[%s]: No tokens available, waiting %.2fs",
                    self.name,
                    wait_time,
                )

                # Release lock while waiting
                self._lock.release()
                try:
                    await asyncio.sleep(wait_time)
                finally:
                    await self._lock.acquire()

                self._refill_tokens()

            self._tokens -= 1.0

    async def handle_rate_limit_response(self, retry_after: int | None = None) -> float:
        """Handle a 429 response with adaptive backoff.

        Args:
            retry_after: Retry-After header from the API response (seconds)

        Returns:
            The actual wait time used
        """
        async with self._lock:
            if retry_after is not None:
                wait_time = float(retry_after)
            else:
                wait_time = self._current_backoff

            wait_time = min(wait_time, self.config.max_backoff_seconds)

            logger.warning(
                "RateLimiter[%s]: 429 Rate Limited! Waiting %.1fs before retry "
                "(backoff level: %.1fs)",
                self.name,
                wait_time,
                self._current_backoff,
            )

            self._current_backoff = min(
                self._current_backoff * self.config.backoff_multiplier,
                self.config.max_backoff_seconds,
            )

            # Clear tokens (force wait)
            self._tokens = 0.0

        # Wait outside lock
        await asyncio.sleep(wait_time)
        return wait_time

    def reset_backoff(self) -> None:
        """Reset backoff after a successful request."""
        self._current_backoff = self.config.initial_backoff_seconds

    async def __aenter__(self) -> "RateLimiter":
        """Enter async context - acquire token."""
        await self.acquire()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        if exc_type is None:
            self.reset_backoff()

    @property
    def available_tokens(self) -> float:
        """Get current available tokens (for debugging)."""
        self._refill_tokens()
        return self._tokens


# Module-level limiters, one per provider, shared across all requests.
# Hey future me – the config only applies on FIRST use of a name! Same as the HTTP pool.
_limiters: dict[str, RateLimiter] = {}


def get_limiter(name: str, config: RateLimiterConfig | None = None) -> RateLimiter:
    """Get (or create) the shared limiter for a provider."""
    limiter = _limiters.get(name)
    if limiter is None:
        limiter = RateLimiter(config=config or RateLimiterConfig(), name=name)
        _limiters[name] = limiter
    return limiter


def reset_limiters() -> None:
    """Drop all shared limiters (tests, settings reload)."""
    _limiters.clear()


__all__ = [
    "RateLimiter",
    "RateLimiterConfig",
    "get_limiter",
    "reset_limiters",
]
