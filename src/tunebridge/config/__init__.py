"""Configuration module for TuneBridge."""

from .settings import (
    AuthSettings,
    DatabaseSettings,
    GoogleSettings,
    Settings,
    SpotifySettings,
    TransferSettings,
    get_settings,
)

__all__ = [
    "AuthSettings",
    "DatabaseSettings",
    "GoogleSettings",
    "Settings",
    "SpotifySettings",
    "TransferSettings",
    "get_settings",
]
