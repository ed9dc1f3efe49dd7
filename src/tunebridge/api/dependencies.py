"""Dependency injection for API endpoints."""

import logging
from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import Cookie, Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tunebridge.application.services import (
    CredentialLifecycleManager,
    PlaylistService,
    SessionService,
    TransferService,
)
from tunebridge.config import Settings, get_settings
from tunebridge.domain.entities import Provider, ProviderTokenBundle
from tunebridge.domain.exceptions import AuthenticationError
from tunebridge.infrastructure.integrations import ProviderClientFactory
from tunebridge.infrastructure.persistence import (
    Database,
    DatabaseSessionStore,
    LinkedAccountRepository,
)

logger = logging.getLogger(__name__)


def get_database(request: Request) -> Database:
    """Get the Database attached to app state during startup.

    Raises:
        HTTPException: 503 if the database is not initialized
    """
    if not hasattr(request.app.state, "db"):
        raise HTTPException(status_code=503, detail="Database not initialized")
    return cast(Database, request.app.state.db)


def get_client_factory(settings: Settings = Depends(get_settings)) -> ProviderClientFactory:
    """Provider clients share the HttpClientPool connection."""
    return ProviderClientFactory(settings)


def build_credential_manager(
    session: AsyncSession,
    settings: Settings,
    clients: ProviderClientFactory,
) -> CredentialLifecycleManager:
    return CredentialLifecycleManager(
        LinkedAccountRepository(session),
        clients.refreshers(),
        refresh_skew_seconds=settings.auth.refresh_skew_seconds,
        persist_refreshed_tokens=settings.auth.persist_refreshed_tokens,
    )


def build_session_service(
    session: AsyncSession,
    settings: Settings,
    clients: ProviderClientFactory,
) -> SessionService:
    """Wire a SessionService whose stores share `session`."""
    return SessionService(
        DatabaseSessionStore(session),
        build_credential_manager(session, settings, clients),
    )


def parse_bearer_token(authorization: str) -> str:
    """Parse Authorization header to extract session ID.

    Handles both "Bearer {token}" and raw token formats.
    Bearer prefix is case-insensitive.

    Args:
        authorization: Authorization header value

    Returns:
        Session ID with Bearer prefix removed (if present)
    """
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    # If no "Bearer " prefix, treat entire value as session ID (lenient)
    return authorization.strip()


# Hey future me, BOTH cookie and bearer token work! Browsers send the session cookie, API clients
# pass the same id as "Authorization: Bearer <session_id>". The header wins (explicit > implicit);
# a blank header falls back to the cookie instead of being treated as an empty session id.
async def get_session_id(
    authorization: str | None = Header(None),
    session_id_cookie: str | None = Cookie(None, alias="session_id"),
) -> str | None:
    """Extract session ID from either Authorization header or cookie.

    Args:
        authorization: Authorization header (format: "Bearer {session_id}")
        session_id_cookie: Session ID from cookie

    Returns:
        Session ID or None if not found in either source
    """
    if authorization and authorization.strip():
        return parse_bearer_token(authorization)
    return session_id_cookie


# Hey future me - credential state gets its OWN transaction, committed before the route body
# runs. A provider may rotate the refresh token on every grant; if a later 401/500 in the same
# request rolled that back, the next request would replay a token the provider already revoked.
async def get_live_tokens(
    session_id: str | None = Depends(get_session_id),
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
    clients: ProviderClientFactory = Depends(get_client_factory),
) -> dict[Provider, ProviderTokenBundle]:
    """Resolve (and if needed refresh) the provider tokens for this request.

    Refreshed tokens and the updated session blob are committed together when this
    dependency returns, independent of how the route itself ends.
    """
    async with db.session_scope() as session:
        service = build_session_service(session, settings, clients)
        return await service.load_live_tokens(session_id)


# Listen up, ORDER MATTERS here! The providers are checked in the order given and the first
# missing one is named in the 401. Routes declare this dependency BEFORE their body parameter,
# so a missing credential is reported before the body is validated and nothing upstream runs.
def require_providers(
    *providers: Provider,
) -> Callable[..., Awaitable[dict[Provider, str]]]:
    """Build a dependency that demands live access tokens for `providers`.

    Returns:
        Dependency returning {provider: access_token}

    Raises:
        AuthenticationError: 401 naming the first provider without a token
    """

    async def dependency(
        tokens: dict[Provider, ProviderTokenBundle] = Depends(get_live_tokens),
    ) -> dict[Provider, str]:
        access: dict[Provider, str] = {}
        for provider in providers:
            bundle = tokens.get(provider)
            if bundle is None or not bundle.access_token:
                raise AuthenticationError(
                    f"Connect {provider.display_name} first",
                    provider=provider.value,
                )
            access[provider] = bundle.access_token
        return access

    return dependency


def get_playlist_service(
    settings: Settings = Depends(get_settings),
    clients: ProviderClientFactory = Depends(get_client_factory),
) -> PlaylistService:
    return PlaylistService(
        clients,
        classification_concurrency=settings.transfer.classification_concurrency,
        sample_size=settings.transfer.classification_sample_size,
    )


def get_transfer_service(
    settings: Settings = Depends(get_settings),
    clients: ProviderClientFactory = Depends(get_client_factory),
) -> TransferService:
    return TransferService(clients, settings.transfer)


__all__ = [
    "build_credential_manager",
    "build_session_service",
    "get_client_factory",
    "get_database",
    "get_live_tokens",
    "get_playlist_service",
    "get_session_id",
    "get_transfer_service",
    "parse_bearer_token",
    "require_providers",
]
