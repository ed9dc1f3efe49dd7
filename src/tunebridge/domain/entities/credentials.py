"""Credential entities: providers, token bundles and the session token state."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


# Hey future me, this is a CLOSED set on purpose! Anything that comes out of a stored session
# blob or an account row with a provider name not listed here is dropped at the boundary.
# Adding a provider means: enum member + refresher + client, nothing else reads raw strings.
class Provider(str, Enum):
    """Linked music platform account types."""

    SPOTIFY = "spotify"
    GOOGLE = "google"  # Google account granting YouTube Data API access

    @property
    def display_name(self) -> str:
        """Human-readable name used in "connect X first" hints."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: Any) -> "Provider | None":
        """Return the matching provider, or None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


_DISPLAY_NAMES = {
    Provider.SPOTIFY: "Spotify",
    Provider.GOOGLE: "Google (YouTube)",
}


def _optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _optional_int(value: Any) -> int | None:
    # bool is an int subclass - a stray True must not become expiry 1ms
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return None


@dataclass
class ProviderTokenBundle:
    """Access token, refresh token and expiry for one linked provider.

    Hey future me - expiry is in MILLISECONDS since epoch (sessions and the refresh math all
    use ms). Account rows store SECONDS; convert at the boundary, never in between.
    Only the CredentialLifecycleManager mutates bundles.
    """

    access_token: str | None = None
    refresh_token: str | None = None
    expires_at_ms: int | None = None

    def is_expiring(self, now_ms: int, skew_ms: int) -> bool:
        """Check whether the bundle is within `skew_ms` of its expiry.

        A bundle without a known expiry is never considered expiring.
        """
        if self.expires_at_ms is None:
            return False
        return now_ms > self.expires_at_ms - skew_ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at_ms": self.expires_at_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderTokenBundle":
        return cls(
            access_token=_optional_str(data.get("access_token")),
            refresh_token=_optional_str(data.get("refresh_token")),
            expires_at_ms=_optional_int(data.get("expires_at_ms")),
        )


@dataclass
class SessionTokenState:
    """Everything the server-side session knows about a signed-in user.

    `sub` is the stable user identifier; `bundles` holds one token bundle per
    linked provider. The state is rebuilt from the session store on every
    authenticated request.
    """

    sub: str | None = None
    bundles: dict[Provider, ProviderTokenBundle] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sub": self.sub,
            "providers": {
                provider.value: bundle.to_dict()
                for provider, bundle in self.bundles.items()
            },
        }

    # Yo, this is THE deserialization boundary for session blobs. Unknown provider keys and
    # malformed bundle values are ignored (logged at debug), never raised - a stale blob written
    # by an older build must not lock the user out.
    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SessionTokenState":
        if not isinstance(data, dict):
            return cls()

        bundles: dict[Provider, ProviderTokenBundle] = {}
        raw_providers = data.get("providers")
        if isinstance(raw_providers, dict):
            for key, raw_bundle in raw_providers.items():
                provider = Provider.parse(key)
                if provider is None:
                    logger.debug("Ignoring unknown provider %r in session", key)
                    continue
                if not isinstance(raw_bundle, dict):
                    logger.debug("Ignoring malformed %s bundle in session", key)
                    continue
                bundles[provider] = ProviderTokenBundle.from_dict(raw_bundle)

        return cls(sub=_optional_str(data.get("sub")), bundles=bundles)

    def access_token(self, provider: Provider) -> str | None:
        bundle = self.bundles.get(provider)
        return bundle.access_token if bundle else None


@dataclass
class SignInData:
    """Provider-account data delivered by the sign-in layer on sign-in or re-link.

    `expires_at` is epoch SECONDS, as OAuth libraries and account rows report it.
    """

    provider: Provider
    provider_account_id: str
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = None
    user_id: str | None = None


@dataclass
class StoredAccount:
    """A persisted linked-account row (expiry in epoch seconds)."""

    provider: str
    provider_account_id: str
    user_id: str
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = None


@dataclass
class TokenGrant:
    """Result of a refresh-token grant."""

    access_token: str
    expires_in: int
    refresh_token: str | None = None
