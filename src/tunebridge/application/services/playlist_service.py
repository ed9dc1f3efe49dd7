"""Playlist listings for the source and destination platforms.

Hey future me - the destination listing is the ONLY concurrent code path in the app. Each
YouTube playlist gets a content-category check (2 read calls), run as a fan-out bounded by a
semaphore. A failed check degrades that one playlist to "not music"; it never fails the listing.
"""

import asyncio
import logging
import math
from dataclasses import dataclass

from tunebridge.application.pagination import fetch_all
from tunebridge.domain.entities import PlaylistRef
from tunebridge.infrastructure.integrations import (
    MUSIC_CATEGORY_ID,
    ProviderClientFactory,
    YouTubeClient,
)

logger = logging.getLogger(__name__)

PLAYLISTS_PAGE_SIZE = 50
DEFAULT_CLASSIFICATION_CONCURRENCY = 5
DEFAULT_SAMPLE_SIZE = 5


@dataclass(frozen=True)
class ClassifiedPlaylist:
    """A destination playlist with its content classification."""

    playlist: PlaylistRef
    is_music: bool


class PlaylistService:
    """Lists playlists on both platforms."""

    def __init__(
        self,
        clients: ProviderClientFactory,
        *,
        classification_concurrency: int = DEFAULT_CLASSIFICATION_CONCURRENCY,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ) -> None:
        """Initialize playlist service.

        Args:
            clients: Builds token-bound provider clients
            classification_concurrency: Max playlists classified at once
            sample_size: Videos sampled per playlist for classification
        """
        self._clients = clients
        self._concurrency = classification_concurrency
        self._sample_size = sample_size

    async def list_source_playlists(self, spotify_token: str) -> list[PlaylistRef]:
        """All Spotify playlists of the signed-in user."""
        client = self._clients.spotify(spotify_token)
        return await fetch_all(client.get_my_playlists_page, page_size=PLAYLISTS_PAGE_SIZE)

    async def list_destination_playlists(
        self, google_token: str
    ) -> list[ClassifiedPlaylist]:
        """YouTube playlists of the signed-in user classified as music.

        Args:
            google_token: Live Google access token

        Returns:
            Music playlists only, in listing order
        """
        client = self._clients.youtube(google_token)
        playlists = await fetch_all(
            client.get_my_playlists_page, page_size=PLAYLISTS_PAGE_SIZE
        )
        classified = await self.classify_playlists(client, playlists)
        music = [entry for entry in classified if entry.is_music]
        logger.info(
            "Classified %d YouTube playlists, %d look like music",
            len(classified),
            len(music),
        )
        return music

    async def classify_playlists(
        self, client: YouTubeClient, playlists: list[PlaylistRef]
    ) -> list[ClassifiedPlaylist]:
        """Classify playlists concurrently; order follows the input."""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def classify(playlist: PlaylistRef) -> ClassifiedPlaylist:
            async with semaphore:
                try:
                    is_music = await self.is_playlist_music(client, playlist.id)
                except Exception as e:
                    logger.warning(
                        "Classifying playlist %s failed, treating as not music: %s",
                        playlist.id,
                        e,
                    )
                    is_music = False
            return ClassifiedPlaylist(playlist=playlist, is_music=is_music)

        return list(await asyncio.gather(*(classify(p) for p in playlists)))

    # Listen up, the threshold is relative to the videos YouTube actually RETURNED for the sample,
    # not the sample size - deleted/private videos drop out of videos.list. If nothing comes back
    # at all we can't tell, so the playlist is not music.
    async def is_playlist_music(self, client: YouTubeClient, playlist_id: str) -> bool:
        """Check whether at least half of a playlist's sampled videos are music."""
        video_ids = await client.sample_video_ids(playlist_id, self._sample_size)
        if not video_ids:
            return False

        categories = await client.get_video_categories(video_ids)
        if not categories:
            return False

        music_count = sum(1 for c in categories.values() if c == MUSIC_CATEGORY_ID)
        return music_count >= math.ceil(len(categories) / 2)
