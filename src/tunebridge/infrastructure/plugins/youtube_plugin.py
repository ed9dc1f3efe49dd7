"""
YouTube adapters for the transfer pipeline.

Hey future me – YouTube is the odd one out in both directions:
- as SOURCE it has no track metadata, only video titles. We split "Artist - Title" style
  titles heuristically (see track_matching.parse_artist_title) and cap how many we read.
- as DESTINATION it has no bulk insert. Every matched video is one playlistItems call.
"""

import logging

from tunebridge.application.pagination import fetch_all
from tunebridge.domain.entities import SourceTrack
from tunebridge.domain.ports import ITrackDestination, ITrackSource
from tunebridge.domain.value_objects import (
    StepResult,
    build_search_query,
    parse_artist_title,
    parsed_to_track,
)
from tunebridge.infrastructure.integrations.youtube_client import (
    MAX_RESULTS_PER_PAGE,
    YouTubeClient,
)

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_LIMIT = 100


class YouTubeTrackSource(ITrackSource):
    """Reads up to `limit` videos of a playlist and parses their titles."""

    def __init__(self, client: YouTubeClient, limit: int = DEFAULT_SOURCE_LIMIT) -> None:
        self._client = client
        self._limit = limit

    @property
    def limit(self) -> int:
        return self._limit

    async def fetch_tracks(self, playlist_id: str) -> list[SourceTrack]:
        videos = await fetch_all(
            lambda cursor, size: self._client.get_playlist_videos_page(
                playlist_id, cursor, size
            ),
            page_size=MAX_RESULTS_PER_PAGE,
            max_items=self._limit,
        )
        logger.info(
            "Fetched %d videos from YouTube playlist %s (limit %d)",
            len(videos),
            playlist_id,
            self._limit,
        )
        return [parsed_to_track(parse_artist_title(video.title)) for video in videos]


class YouTubeDestination(ITrackDestination):
    """Writes matched videos into a new unlisted YouTube playlist, one at a time."""

    supports_bulk_add = False

    def __init__(self, client: YouTubeClient, description: str | None = None) -> None:
        self._client = client
        self._description = description

    async def create_playlist(self, name: str) -> str:
        return await self._client.create_playlist(name, self._description)

    async def resolve(self, track: SourceTrack) -> StepResult[str]:
        query = build_search_query(track)
        try:
            video_id = await self._client.search_first_video_id(query)
        except Exception as e:
            logger.warning("YouTube search failed for %r: %s", track.title, e)
            return StepResult.failed(str(e), step="match")
        if video_id is None:
            return StepResult.not_found(step="match")
        return StepResult.ok(video_id, step="match")

    async def add_item(self, playlist_id: str, item_id: str) -> None:
        await self._client.add_video(playlist_id, item_id)

    async def add_items(self, playlist_id: str, item_ids: list[str]) -> None:
        # No bulk endpoint; keep the sequential one-call-per-video behaviour
        for item_id in item_ids:
            await self._client.add_video(playlist_id, item_id)
