"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import Protocol

from tunebridge.domain.entities import (
    Provider,
    ProviderTokenBundle,
    SessionTokenState,
    SourceTrack,
    StoredAccount,
    TokenGrant,
)
from tunebridge.domain.value_objects import StepResult


# Hey future me, IAccountStore is a PORT! The persisted account rows are the durable backing
# store behind every session. The SQLAlchemy implementation lives in infrastructure/persistence,
# tests use AsyncMock(spec=IAccountStore). Keep this narrow: key/value lookups only.
class IAccountStore(ABC):
    """Persisted linked accounts: (provider, external id) → user, user → accounts."""

    @abstractmethod
    async def find_user_id(
        self, provider: Provider, provider_account_id: str
    ) -> str | None:
        """Return the owning user id for an external account, if linked."""
        pass

    @abstractmethod
    async def list_accounts(self, user_id: str) -> list[StoredAccount]:
        """Return every linked account row for a user."""
        pass

    @abstractmethod
    async def update_tokens(
        self, user_id: str, provider: Provider, bundle: ProviderTokenBundle
    ) -> None:
        """Write refreshed tokens back to the user's account row for a provider."""
        pass


class ISessionStore(ABC):
    """Server-side session storage keyed by an opaque session id."""

    @abstractmethod
    async def get_session(self, session_id: str) -> SessionTokenState | None:
        """Load and deserialize a session, or None if unknown."""
        pass

    @abstractmethod
    async def save_session(self, session_id: str, state: SessionTokenState) -> None:
        """Persist the given state under an existing or new session id."""
        pass

    @abstractmethod
    async def create_session(self, state: SessionTokenState) -> str:
        """Store a new session and return its freshly generated id."""
        pass


class ITokenRefresher(Protocol):
    """A provider's refresh-token grant."""

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Exchange a refresh token for a new access token."""
        ...


# Yo, the transfer pipeline only talks to these two ports. Each direction plugs in one source
# and one destination adapter (see infrastructure/plugins). The pipeline never sees tokens.
class ITrackSource(ABC):
    """Where tracks are read from."""

    @abstractmethod
    async def fetch_tracks(self, playlist_id: str) -> list[SourceTrack]:
        """Return the ordered track list of a source playlist."""
        pass


class ITrackDestination(ABC):
    """Where matched tracks are written to."""

    # True → matched ids are accumulated and written in chunks; False → one write per item
    supports_bulk_add: bool = False

    @abstractmethod
    async def create_playlist(self, name: str) -> str:
        """Create the destination playlist and return its id."""
        pass

    @abstractmethod
    async def resolve(self, track: SourceTrack) -> StepResult[str]:
        """Search for a track: ok(id), not_found(), or failed(error)."""
        pass

    @abstractmethod
    async def add_item(self, playlist_id: str, item_id: str) -> None:
        """Add a single item (per-item destinations)."""
        pass

    @abstractmethod
    async def add_items(self, playlist_id: str, item_ids: list[str]) -> None:
        """Add one chunk of items in a single call (bulk destinations)."""
        pass


__all__ = [
    "IAccountStore",
    "ISessionStore",
    "ITokenRefresher",
    "ITrackSource",
    "ITrackDestination",
]
