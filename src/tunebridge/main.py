"""FastAPI application entry point.

Run with:
    uvicorn tunebridge.main:app
"""

from fastapi import FastAPI

from tunebridge import __version__
from tunebridge.api.exception_handlers import register_exception_handlers
from tunebridge.api.routers import api_router
from tunebridge.infrastructure.lifecycle import lifespan
from tunebridge.infrastructure.observability import RequestLoggingMiddleware


def create_app() -> FastAPI:
    """Build the application: routes, middleware and exception handlers."""
    app = FastAPI(
        title="TuneBridge",
        description="Copy playlists between Spotify and YouTube",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
