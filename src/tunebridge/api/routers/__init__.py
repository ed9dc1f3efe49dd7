"""API routers."""

from fastapi import APIRouter

from tunebridge.api.routers import health, playlists, transfer

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(playlists.router)
api_router.include_router(transfer.router)

__all__ = ["api_router"]
