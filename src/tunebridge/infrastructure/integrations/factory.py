"""Builds per-request provider clients from settings and live tokens."""

import httpx

from tunebridge.config import Settings
from tunebridge.domain.entities import Provider
from tunebridge.domain.ports import ITokenRefresher
from tunebridge.infrastructure.integrations.spotify_client import SpotifyClient
from tunebridge.infrastructure.integrations.youtube_client import YouTubeClient


# Hey future me - clients are cheap (token + references to the shared pool/limiter), so we build
# fresh ones per request instead of mutating a shared client's token. Tests pass http_client
# (an httpx.AsyncClient on a MockTransport) to keep everything off the network.
class ProviderClientFactory:
    """Create Spotify / YouTube clients bound to one access token."""

    def __init__(
        self, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> None:
        self.settings = settings
        self._http_client = http_client

    def spotify(self, access_token: str | None = None) -> SpotifyClient:
        return SpotifyClient(
            self.settings.spotify, access_token, http_client=self._http_client
        )

    def youtube(self, access_token: str | None = None) -> YouTubeClient:
        return YouTubeClient(
            self.settings.google, access_token, http_client=self._http_client
        )

    def refreshers(self) -> dict[Provider, ITokenRefresher]:
        """Refresh-token grants for every provider (no access token needed)."""
        return {
            Provider.SPOTIFY: self.spotify(),
            Provider.GOOGLE: self.youtube(),
        }
