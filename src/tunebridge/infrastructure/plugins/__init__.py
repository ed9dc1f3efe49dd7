"""
Transfer adapters (ITrackSource / ITrackDestination implementations).

Architecture:
    TransferPipeline
           ↓
    SpotifyTrackSource / YouTubeTrackSource     (read)
    YouTubeDestination / SpotifyDestination     (match + write)
           ↓
    SpotifyClient / YouTubeClient (HTTP calls)
"""

from tunebridge.infrastructure.plugins.spotify_plugin import (
    SpotifyDestination,
    SpotifyTrackSource,
)
from tunebridge.infrastructure.plugins.youtube_plugin import (
    YouTubeDestination,
    YouTubeTrackSource,
)

__all__ = [
    "SpotifyDestination",
    "SpotifyTrackSource",
    "YouTubeDestination",
    "YouTubeTrackSource",
]
