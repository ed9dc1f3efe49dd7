"""YouTube Data API v3 client (Google account)."""

import logging
from typing import Any

import httpx

from tunebridge.application.pagination import Page
from tunebridge.config import GoogleSettings
from tunebridge.domain.entities import PlaylistRef, Provider, SourceVideo, TokenGrant
from tunebridge.domain.exceptions import ConfigurationError
from tunebridge.infrastructure.integrations.base import OAuthApiClient
from tunebridge.infrastructure.rate_limiter import RateLimiter, RateLimiterConfig

logger = logging.getLogger(__name__)

MAX_RESULTS_PER_PAGE = 50
DEFAULT_PLAYLIST_DESCRIPTION = "Imported from Spotify"
MUSIC_CATEGORY_ID = "10"


class YouTubeClient(OAuthApiClient):
    """YouTube client for playlists, search and the Google refresh-token grant.

    Hey future me - YouTube quota is MUCH tighter than Spotify's (search costs 100 units, a
    playlist insert 50). That's why the default limiter rate is lower and why the reverse
    direction is capped. Cursors here are nextPageToken values.
    """

    PROVIDER = Provider.GOOGLE
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    API_BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        settings: GoogleSettings,
        access_token: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        super().__init__(
            access_token,
            http_client=http_client,
            rate_limiter=rate_limiter,
            rate_limit_config=RateLimiterConfig.per_second(
                settings.requests_per_second, settings.burst
            ),
        )
        self.settings = settings

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Exchange a Google refresh token for a new access token.

        Unlike Spotify, Google wants the client credentials in the form body.

        Raises:
            ConfigurationError: Client id/secret not configured
            TokenRefreshException: Google rejected the grant
        """
        if not self.settings.client_id or not self.settings.client_secret:
            raise ConfigurationError(
                "Google client credentials are not configured "
                "(GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET)"
            )

        return await self._post_token_grant(
            data={
                "client_id": self.settings.client_id,
                "client_secret": self.settings.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            }
        )

    # =========================================================================
    # PLAYLISTS
    # =========================================================================

    async def get_my_playlists_page(
        self, cursor: str | None, limit: int = MAX_RESULTS_PER_PAGE
    ) -> Page[PlaylistRef]:
        """Get one page of the current user's playlists.

        Args:
            cursor: nextPageToken from the previous page, None for the first
            limit: Page size (max 50)
        """
        params: dict[str, Any] = {
            "part": "snippet,contentDetails",
            "mine": "true",
            "maxResults": min(limit, MAX_RESULTS_PER_PAGE),
        }
        if cursor:
            params["pageToken"] = cursor

        data = await self._get_json(f"{self.API_BASE_URL}/playlists", params=params)
        raw_items = data.get("items") or []
        playlists = [
            _to_playlist_ref(item) for item in raw_items if item and item.get("id")
        ]
        return Page(
            items=playlists,
            next_cursor=data.get("nextPageToken"),
            raw_count=len(raw_items),
        )

    async def get_playlist_videos_page(
        self, playlist_id: str, cursor: str | None, limit: int = MAX_RESULTS_PER_PAGE
    ) -> Page[SourceVideo]:
        """Get one page of a playlist's videos.

        Items without a resourceId.videoId or a title (deleted / private videos)
        are dropped, but still count in raw_count so bounded fetches stay bounded.
        """
        params: dict[str, Any] = {
            "part": "snippet",
            "playlistId": playlist_id,
            "maxResults": min(limit, MAX_RESULTS_PER_PAGE),
        }
        if cursor:
            params["pageToken"] = cursor

        data = await self._get_json(f"{self.API_BASE_URL}/playlistItems", params=params)
        raw_items = data.get("items") or []

        videos: list[SourceVideo] = []
        for item in raw_items:
            snippet = (item or {}).get("snippet") or {}
            video_id = (snippet.get("resourceId") or {}).get("videoId")
            title = snippet.get("title")
            if video_id and title:
                videos.append(SourceVideo(video_id=video_id, title=title))

        return Page(
            items=videos,
            next_cursor=data.get("nextPageToken"),
            raw_count=len(raw_items),
        )

    async def create_playlist(self, title: str, description: str | None = None) -> str:
        """Create an unlisted playlist.

        Args:
            title: Playlist title
            description: Playlist description (defaults to "Imported from Spotify")

        Returns:
            New playlist id
        """
        data = await self._post_json(
            f"{self.API_BASE_URL}/playlists",
            params={"part": "snippet,status"},
            body={
                "snippet": {
                    "title": title,
                    "description": description or DEFAULT_PLAYLIST_DESCRIPTION,
                },
                "status": {"privacyStatus": "unlisted"},
            },
        )
        playlist_id = str(data["id"])
        logger.info("Created YouTube playlist %s", playlist_id)
        return playlist_id

    async def add_video(self, playlist_id: str, video_id: str) -> None:
        """Append one video to a playlist (the API has no bulk insert)."""
        await self._post_json(
            f"{self.API_BASE_URL}/playlistItems",
            params={"part": "snippet"},
            body={
                "snippet": {
                    "playlistId": playlist_id,
                    "resourceId": {"kind": "youtube#video", "videoId": video_id},
                }
            },
        )

    # =========================================================================
    # SEARCH / CLASSIFICATION
    # =========================================================================

    async def search_first_video_id(self, query: str) -> str | None:
        """Search videos and return the id of the first hit, if any."""
        data = await self._get_json(
            f"{self.API_BASE_URL}/search",
            params={"part": "snippet", "type": "video", "maxResults": 1, "q": query},
        )
        items = data.get("items") or []
        if not items:
            return None
        video_id = (items[0].get("id") or {}).get("videoId")
        return str(video_id) if video_id else None

    async def sample_video_ids(self, playlist_id: str, n: int) -> list[str]:
        """Return up to n video ids from the start of a playlist."""
        data = await self._get_json(
            f"{self.API_BASE_URL}/playlistItems",
            params={
                "part": "contentDetails",
                "playlistId": playlist_id,
                "maxResults": min(n, MAX_RESULTS_PER_PAGE),
            },
        )
        return [
            video_id
            for item in data.get("items") or []
            if (video_id := ((item or {}).get("contentDetails") or {}).get("videoId"))
        ]

    async def get_video_categories(self, video_ids: list[str]) -> dict[str, str]:
        """Map video id → snippet.categoryId for the given videos.

        Videos YouTube doesn't return (deleted, private) are simply absent.
        """
        if not video_ids:
            return {}
        data = await self._get_json(
            f"{self.API_BASE_URL}/videos",
            params={"part": "snippet", "id": ",".join(video_ids)},
        )
        categories: dict[str, str] = {}
        for item in data.get("items") or []:
            category = (item.get("snippet") or {}).get("categoryId")
            if item.get("id") and category is not None:
                categories[str(item["id"])] = str(category)
        return categories


def _to_playlist_ref(item: dict[str, Any]) -> PlaylistRef:
    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    image_url = None
    for size in ("medium", "high", "default"):
        if thumbnails.get(size, {}).get("url"):
            image_url = thumbnails[size]["url"]
            break
    return PlaylistRef(
        id=str(item["id"]),
        name=snippet.get("title") or "",
        item_count=int((item.get("contentDetails") or {}).get("itemCount") or 0),
        image_url=image_url,
    )
