"""TuneBridge - copy playlists between linked music platform accounts."""

__version__ = "0.1.0"
