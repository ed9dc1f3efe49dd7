"""Playlist listing endpoints."""

import logging

from fastapi import APIRouter, Depends

from tunebridge.api.dependencies import get_playlist_service, require_providers
from tunebridge.api.schemas import (
    ClassifiedPlaylistSchema,
    DestinationPlaylistsResponse,
    PlaylistSchema,
    SourcePlaylistsResponse,
)
from tunebridge.application.services import PlaylistService
from tunebridge.domain.entities import Provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/playlists", tags=["playlists"])


@router.get("/source", response_model=SourcePlaylistsResponse)
async def list_source_playlists(
    tokens: dict[Provider, str] = Depends(require_providers(Provider.SPOTIFY)),
    service: PlaylistService = Depends(get_playlist_service),
) -> SourcePlaylistsResponse:
    """List the signed-in user's Spotify playlists."""
    playlists = await service.list_source_playlists(tokens[Provider.SPOTIFY])
    return SourcePlaylistsResponse(
        playlists=[PlaylistSchema.from_entity(p) for p in playlists]
    )


# Hey future me - this one fans out 2 YouTube calls per playlist for classification. Only
# playlists that look like music are returned, so isMusic is always true in the payload.
@router.get("/destination", response_model=DestinationPlaylistsResponse)
async def list_destination_playlists(
    tokens: dict[Provider, str] = Depends(require_providers(Provider.GOOGLE)),
    service: PlaylistService = Depends(get_playlist_service),
) -> DestinationPlaylistsResponse:
    """List the signed-in user's YouTube playlists classified as music."""
    classified = await service.list_destination_playlists(tokens[Provider.GOOGLE])
    return DestinationPlaylistsResponse(
        playlists=[
            ClassifiedPlaylistSchema(
                **PlaylistSchema.from_entity(entry.playlist).model_dump(),
                is_music=entry.is_music,
            )
            for entry in classified
        ]
    )
