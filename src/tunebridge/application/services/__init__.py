"""Application services."""

from tunebridge.application.services.credential_manager import (
    CredentialLifecycleManager,
    CredentialResolution,
)
from tunebridge.application.services.playlist_service import (
    ClassifiedPlaylist,
    PlaylistService,
)
from tunebridge.application.services.session_service import SessionService
from tunebridge.application.services.transfer_service import (
    TransferPipeline,
    TransferService,
)

__all__ = [
    "ClassifiedPlaylist",
    "CredentialLifecycleManager",
    "CredentialResolution",
    "PlaylistService",
    "SessionService",
    "TransferPipeline",
    "TransferService",
]
