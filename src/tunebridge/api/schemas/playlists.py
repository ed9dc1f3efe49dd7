"""API schemas for playlist listings."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tunebridge.domain.entities import PlaylistRef


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys (what the web client expects)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlaylistSchema(CamelModel):
    """Schema for one playlist in a listing."""

    id: str = Field(..., description="Provider playlist ID")
    name: str = Field(..., description="Playlist name")
    item_count: int = Field(default=0, description="Number of tracks / videos")
    image_url: str | None = Field(default=None, description="Cover / thumbnail URL")

    @classmethod
    def from_entity(cls, playlist: PlaylistRef) -> "PlaylistSchema":
        return cls(
            id=playlist.id,
            name=playlist.name,
            item_count=playlist.item_count,
            image_url=playlist.image_url,
        )


class ClassifiedPlaylistSchema(PlaylistSchema):
    """Destination playlist with its content classification."""

    is_music: bool = Field(..., description="At least half the sampled videos are music")


class SourcePlaylistsResponse(CamelModel):
    """Response for GET /playlists/source."""

    playlists: list[PlaylistSchema]


class DestinationPlaylistsResponse(CamelModel):
    """Response for GET /playlists/destination (music playlists only)."""

    playlists: list[ClassifiedPlaylistSchema]
