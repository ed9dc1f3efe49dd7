"""Session-level glue between the session store and the credential manager."""

import logging

from tunebridge.application.services.credential_manager import (
    CredentialLifecycleManager,
    CredentialResolution,
)
from tunebridge.domain.entities import (
    Provider,
    ProviderTokenBundle,
    SessionTokenState,
    SignInData,
)
from tunebridge.domain.ports import ISessionStore

logger = logging.getLogger(__name__)


class SessionService:
    """Rebuilds session token state per request and keeps it up to date.

    Hey future me - the session store holds an opaque blob, this service is the only place
    that turns it into a SessionTokenState, runs the credential manager over it and writes it
    back. Routes never touch the store directly.
    """

    def __init__(
        self,
        session_store: ISessionStore,
        credential_manager: CredentialLifecycleManager,
    ) -> None:
        self._store = session_store
        self._credentials = credential_manager

    async def load_live_tokens(
        self, session_id: str | None
    ) -> dict[Provider, ProviderTokenBundle]:
        """Resolve live provider tokens for a session reference.

        Args:
            session_id: Opaque session reference (cookie or bearer), may be None

        Returns:
            Per-provider bundles; empty when there is no such session
        """
        if not session_id:
            return {}

        state = await self._store.get_session(session_id)
        if state is None:
            logger.debug("Unknown session reference")
            return {}

        resolution = await self._credentials.resolve(state)
        await self._save(session_id, state, resolution)
        return resolution.bundles

    # Yo, this is what the (external) sign-in layer calls after an OAuth callback. It creates a
    # session when the browser has none yet; otherwise the new provider MERGES into the existing
    # one - signing into Google must never wipe the Spotify tokens.
    async def link_account(
        self, session_id: str | None, sign_in: SignInData
    ) -> str:
        """Merge sign-in data into a (possibly new) session.

        Args:
            session_id: Existing session reference, or None to start a session
            sign_in: Provider-account data from the sign-in layer

        Returns:
            Session id holding the merged state
        """
        state: SessionTokenState | None = None
        if session_id:
            state = await self._store.get_session(session_id)
        if state is None:
            state = SessionTokenState()
            session_id = None

        resolution = await self._credentials.resolve(state, sign_in)

        if session_id is None:
            session_id = await self._store.create_session(state)
            logger.info("Started session for %s sign-in", sign_in.provider.value)
        else:
            await self._save(session_id, state, resolution)
        return session_id

    async def _save(
        self,
        session_id: str,
        state: SessionTokenState,
        resolution: CredentialResolution,
    ) -> None:
        await self._store.save_session(session_id, state)
        if resolution.refreshed:
            logger.debug(
                "Saved session after refreshing %s",
                ", ".join(p.value for p in resolution.refreshed),
            )
