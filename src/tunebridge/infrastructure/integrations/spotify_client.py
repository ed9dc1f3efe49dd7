"""Spotify Web API client."""

import base64
import logging
from typing import Any

import httpx

from tunebridge.application.pagination import Page
from tunebridge.config import SpotifySettings
from tunebridge.domain.entities import PlaylistRef, Provider, SourceTrack, TokenGrant
from tunebridge.domain.exceptions import ConfigurationError
from tunebridge.infrastructure.integrations.base import OAuthApiClient
from tunebridge.infrastructure.rate_limiter import RateLimiter, RateLimiterConfig

logger = logging.getLogger(__name__)

# Spotify rejects more than 100 URIs per add-items call
MAX_TRACKS_PER_ADD = 100
MAX_PLAYLISTS_PAGE = 50
MAX_TRACKS_PAGE = 100


class SpotifyClient(OAuthApiClient):
    """Spotify client for playlists, search and the refresh-token grant.

    Hey future me - pagination cursors here are Spotify's FULL "next" URLs (query string
    included). When a cursor is given we request it verbatim without extra params.
    """

    PROVIDER = Provider.SPOTIFY
    TOKEN_URL = "https://accounts.spotify.com/api/token"
    API_BASE_URL = "https://api.spotify.com/v1"

    def __init__(
        self,
        settings: SpotifySettings,
        access_token: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize Spotify client.

        Args:
            settings: Spotify OAuth client + quota settings
            access_token: User access token for API calls (not needed for refresh)
            http_client: Optional injected HTTP client (tests)
            rate_limiter: Optional injected limiter (tests)
        """
        super().__init__(
            access_token,
            http_client=http_client,
            rate_limiter=rate_limiter,
            rate_limit_config=RateLimiterConfig.per_second(
                settings.requests_per_second, settings.burst
            ),
        )
        self.settings = settings

    # =========================================================================
    # AUTH
    # =========================================================================

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Exchange a refresh token for a new access token.

        Args:
            refresh_token: Stored Spotify refresh token

        Returns:
            TokenGrant; refresh_token is set only when Spotify rotated it

        Raises:
            ConfigurationError: Client id/secret not configured
            TokenRefreshException: Spotify rejected the grant
        """
        if not self.settings.client_id or not self.settings.client_secret:
            raise ConfigurationError(
                "Spotify client credentials are not configured "
                "(SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET)"
            )

        auth_str = f"{self.settings.client_id}:{self.settings.client_secret}"
        auth_b64 = base64.b64encode(auth_str.encode()).decode()

        return await self._post_token_grant(
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
            headers={"Authorization": f"Basic {auth_b64}"},
        )

    async def get_current_user_id(self) -> str:
        """Get the Spotify user id owning the access token."""
        data = await self._get_json(f"{self.API_BASE_URL}/me")
        return str(data["id"])

    # =========================================================================
    # PLAYLISTS
    # =========================================================================

    async def get_my_playlists_page(
        self, cursor: str | None, limit: int = MAX_PLAYLISTS_PAGE
    ) -> Page[PlaylistRef]:
        """Get one page of the current user's playlists.

        Args:
            cursor: Spotify "next" URL from the previous page, None for the first
            limit: Page size (max 50)

        Returns:
            Page of PlaylistRef
        """
        if cursor:
            data = await self._get_json(cursor)
        else:
            data = await self._get_json(
                f"{self.API_BASE_URL}/me/playlists",
                params={"limit": min(limit, MAX_PLAYLISTS_PAGE)},
            )

        raw_items = data.get("items") or []
        playlists = [
            _to_playlist_ref(item) for item in raw_items if item and item.get("id")
        ]
        return Page(
            items=playlists, next_cursor=data.get("next"), raw_count=len(raw_items)
        )

    async def get_playlist_tracks_page(
        self, playlist_id: str, cursor: str | None, limit: int = MAX_TRACKS_PAGE
    ) -> Page[SourceTrack]:
        """Get one page of a playlist's tracks.

        Items whose `track` is null (deleted / unavailable tracks) are skipped.

        Args:
            playlist_id: Spotify playlist id
            cursor: Spotify "next" URL from the previous page, None for the first
            limit: Page size (max 100)

        Returns:
            Page of SourceTrack
        """
        if cursor:
            data = await self._get_json(cursor)
        else:
            data = await self._get_json(
                f"{self.API_BASE_URL}/playlists/{playlist_id}/tracks",
                params={"limit": min(limit, MAX_TRACKS_PAGE)},
            )

        raw_items = data.get("items") or []
        tracks: list[SourceTrack] = []
        for item in raw_items:
            track = (item or {}).get("track")
            if not track:
                continue
            tracks.append(_to_source_track(track))

        return Page(items=tracks, next_cursor=data.get("next"), raw_count=len(raw_items))

    async def create_playlist(self, name: str, description: str = "") -> str:
        """Create a private playlist for the current user.

        Args:
            name: Playlist name
            description: Playlist description

        Returns:
            New playlist id
        """
        user_id = await self.get_current_user_id()
        data = await self._post_json(
            f"{self.API_BASE_URL}/users/{user_id}/playlists",
            body={"name": name, "description": description, "public": False},
        )
        playlist_id = str(data["id"])
        logger.info("Created Spotify playlist %s", playlist_id)
        return playlist_id

    async def add_tracks(self, playlist_id: str, uris: list[str]) -> None:
        """Add up to 100 track URIs to a playlist in one call.

        Args:
            playlist_id: Spotify playlist id
            uris: Track URIs (spotify:track:...)

        Raises:
            ValueError: More than 100 URIs passed
        """
        if len(uris) > MAX_TRACKS_PER_ADD:
            raise ValueError(
                f"Spotify accepts at most {MAX_TRACKS_PER_ADD} URIs per call, got {len(uris)}"
            )
        if not uris:
            return
        await self._post_json(
            f"{self.API_BASE_URL}/playlists/{playlist_id}/tracks",
            body={"uris": uris},
        )

    # =========================================================================
    # SEARCH
    # =========================================================================

    async def search_track_uri(self, query: str) -> str | None:
        """Search for a track and return the URI of the best hit.

        Args:
            query: Search query, e.g. "track:Get Lucky artist:Daft Punk"

        Returns:
            Track URI or None when Spotify has no hit
        """
        data = await self._get_json(
            f"{self.API_BASE_URL}/search",
            params={"q": query, "type": "track", "limit": 1},
        )
        items = (data.get("tracks") or {}).get("items") or []
        if not items:
            return None
        uri = items[0].get("uri")
        return str(uri) if uri else None


def _to_playlist_ref(item: dict[str, Any]) -> PlaylistRef:
    images = item.get("images") or []
    return PlaylistRef(
        id=str(item["id"]),
        name=item.get("name") or "",
        item_count=int((item.get("tracks") or {}).get("total") or 0),
        image_url=images[0].get("url") if images else None,
    )


def _to_source_track(track: dict[str, Any]) -> SourceTrack:
    artists = tuple(
        artist["name"] for artist in track.get("artists") or [] if artist.get("name")
    )
    isrc = (track.get("external_ids") or {}).get("isrc")
    return SourceTrack(
        title=track.get("name") or "",
        artists=artists,
        isrc=isrc or None,
    )
