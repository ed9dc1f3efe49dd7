"""
Spotify adapters for the transfer pipeline.

Hey future me – same split as everywhere: SpotifyClient does HTTP and hands back Pages,
these adapters implement the ITrackSource / ITrackDestination ports on top of it. The
pipeline never sees a client or a token.

Spotify as DESTINATION is a BULK destination: matched URIs are collected and written in
chunks of up to 100 (the add-items limit).
"""

import logging

from tunebridge.application.pagination import fetch_all
from tunebridge.domain.entities import SourceTrack
from tunebridge.domain.ports import ITrackDestination, ITrackSource
from tunebridge.domain.value_objects import StepResult, build_field_query
from tunebridge.infrastructure.integrations.spotify_client import (
    MAX_TRACKS_PAGE,
    MAX_TRACKS_PER_ADD,
    SpotifyClient,
)

logger = logging.getLogger(__name__)


class SpotifyTrackSource(ITrackSource):
    """Reads every track of a Spotify playlist, following `next` links."""

    def __init__(self, client: SpotifyClient, page_size: int = MAX_TRACKS_PAGE) -> None:
        self._client = client
        self._page_size = page_size

    async def fetch_tracks(self, playlist_id: str) -> list[SourceTrack]:
        tracks = await fetch_all(
            lambda cursor, size: self._client.get_playlist_tracks_page(
                playlist_id, cursor, size
            ),
            page_size=self._page_size,
        )
        logger.info("Fetched %d tracks from Spotify playlist %s", len(tracks), playlist_id)
        return tracks


class SpotifyDestination(ITrackDestination):
    """Writes matched tracks into a new private Spotify playlist."""

    supports_bulk_add = True

    def __init__(self, client: SpotifyClient, description: str = "") -> None:
        self._client = client
        self._description = description

    async def create_playlist(self, name: str) -> str:
        return await self._client.create_playlist(name, self._description)

    # Yo, field filters ("track:X artist:Y") work much better on Spotify than free text for
    # titles we parsed out of video names.
    async def resolve(self, track: SourceTrack) -> StepResult[str]:
        query = build_field_query(track.title, track.first_artist or None)
        try:
            uri = await self._client.search_track_uri(query)
        except Exception as e:
            logger.warning("Spotify search failed for %r: %s", track.title, e)
            return StepResult.failed(str(e), step="match")
        if uri is None:
            return StepResult.not_found(step="match")
        return StepResult.ok(uri, step="match")

    async def add_item(self, playlist_id: str, item_id: str) -> None:
        await self._client.add_tracks(playlist_id, [item_id])

    async def add_items(self, playlist_id: str, item_ids: list[str]) -> None:
        if len(item_ids) > MAX_TRACKS_PER_ADD:
            raise ValueError(f"chunk larger than {MAX_TRACKS_PER_ADD} items")
        await self._client.add_tracks(playlist_id, item_ids)
