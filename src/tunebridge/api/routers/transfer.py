"""Playlist transfer endpoints."""

import logging

from fastapi import APIRouter, Depends

from tunebridge.api.dependencies import get_transfer_service, require_providers
from tunebridge.api.schemas import (
    ReverseTransferResponse,
    TransferRequest,
    TransferResponse,
)
from tunebridge.application.services import TransferService
from tunebridge.domain.entities import Provider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transfer"])


# Yo, credentials are checked source-first: Spotify, then Google. The body is only validated
# once both are present, and nothing is created upstream unless both checks pass.
@router.post("/transfer", response_model=TransferResponse)
async def transfer_to_youtube(
    body: TransferRequest,
    tokens: dict[Provider, str] = Depends(
        require_providers(Provider.SPOTIFY, Provider.GOOGLE)
    ),
    service: TransferService = Depends(get_transfer_service),
) -> TransferResponse:
    """Copy a Spotify playlist into a new YouTube playlist."""
    result = await service.transfer_to_youtube(
        spotify_token=tokens[Provider.SPOTIFY],
        google_token=tokens[Provider.GOOGLE],
        playlist_id=body.playlist_id,
        playlist_name=body.playlist_name,
    )
    return TransferResponse.from_result(result)


@router.post("/transfer-reverse", response_model=ReverseTransferResponse)
async def transfer_to_spotify(
    body: TransferRequest,
    tokens: dict[Provider, str] = Depends(
        require_providers(Provider.GOOGLE, Provider.SPOTIFY)
    ),
    service: TransferService = Depends(get_transfer_service),
) -> ReverseTransferResponse:
    """Copy (the first videos of) a YouTube playlist into a new Spotify playlist."""
    result = await service.transfer_to_spotify(
        google_token=tokens[Provider.GOOGLE],
        spotify_token=tokens[Provider.SPOTIFY],
        playlist_id=body.playlist_id,
        playlist_name=body.playlist_name,
    )
    return ReverseTransferResponse.from_result(result)
