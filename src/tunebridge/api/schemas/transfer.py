"""API schemas for playlist transfers."""

from pydantic import Field

from tunebridge.api.schemas.playlists import CamelModel
from tunebridge.domain.entities import FailedItem, TransferResult


class TransferRequest(CamelModel):
    """Request body for both transfer directions."""

    playlist_id: str = Field(..., min_length=1, description="Source playlist ID")
    playlist_name: str = Field(
        ..., min_length=1, description="Source playlist name (new title is derived from it)"
    )


class FailedItemSchema(CamelModel):
    """A source item that was not matched or not written."""

    title: str
    artists: list[str] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, item: FailedItem) -> "FailedItemSchema":
        return cls(title=item.title, artists=list(item.artists))


class TransferResponse(CamelModel):
    """Response for POST /transfer (Spotify → YouTube)."""

    created_playlist_id: str
    total: int
    success: int
    failed: list[FailedItemSchema]

    @classmethod
    def from_result(cls, result: TransferResult) -> "TransferResponse":
        return cls(
            created_playlist_id=result.created_playlist_id,
            total=result.total_source_items,
            success=result.succeeded_count,
            failed=[FailedItemSchema.from_entity(item) for item in result.failed_items],
        )


class ReverseTransferResponse(CamelModel):
    """Response for POST /transfer-reverse (YouTube → Spotify)."""

    created_playlist_id: str
    total_videos: int
    added: int

    @classmethod
    def from_result(cls, result: TransferResult) -> "ReverseTransferResponse":
        return cls(
            created_playlist_id=result.created_playlist_id,
            total_videos=result.total_source_items,
            added=result.succeeded_count,
        )
