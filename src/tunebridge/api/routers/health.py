"""Health check endpoint for Docker/Kubernetes probes."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tunebridge import __version__

router = APIRouter(tags=["health"])


class LivenessStatus(BaseModel):
    """Simple liveness probe response."""

    status: str = Field(description="Always 'ok' while the process serves requests")
    version: str = Field(default=__version__, description="Application version")


# Liveness only: no upstream or database calls
@router.get("/health", response_model=LivenessStatus)
async def health() -> LivenessStatus:
    """Liveness probe."""
    return LivenessStatus(status="ok")
