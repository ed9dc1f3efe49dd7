"""External provider integrations."""

from tunebridge.infrastructure.integrations.factory import ProviderClientFactory
from tunebridge.infrastructure.integrations.http_pool import HttpClientPool
from tunebridge.infrastructure.integrations.spotify_client import SpotifyClient
from tunebridge.infrastructure.integrations.youtube_client import (
    MUSIC_CATEGORY_ID,
    YouTubeClient,
)

__all__ = [
    "HttpClientPool",
    "MUSIC_CATEGORY_ID",
    "ProviderClientFactory",
    "SpotifyClient",
    "YouTubeClient",
]
