"""API request/response schemas."""

from tunebridge.api.schemas.playlists import (
    ClassifiedPlaylistSchema,
    DestinationPlaylistsResponse,
    PlaylistSchema,
    SourcePlaylistsResponse,
)
from tunebridge.api.schemas.transfer import (
    FailedItemSchema,
    ReverseTransferResponse,
    TransferRequest,
    TransferResponse,
)

__all__ = [
    "ClassifiedPlaylistSchema",
    "DestinationPlaylistsResponse",
    "FailedItemSchema",
    "PlaylistSchema",
    "ReverseTransferResponse",
    "SourcePlaylistsResponse",
    "TransferRequest",
    "TransferResponse",
]
