"""Domain entities."""

from tunebridge.domain.entities.credentials import (
    Provider,
    ProviderTokenBundle,
    SessionTokenState,
    SignInData,
    StoredAccount,
    TokenGrant,
)
from tunebridge.domain.entities.transfer import (
    FailedItem,
    PlaylistRef,
    SourceTrack,
    SourceVideo,
    TransferResult,
)

__all__ = [
    "Provider",
    "ProviderTokenBundle",
    "SessionTokenState",
    "SignInData",
    "StoredAccount",
    "TokenGrant",
    "FailedItem",
    "PlaylistRef",
    "SourceTrack",
    "SourceVideo",
    "TransferResult",
]
