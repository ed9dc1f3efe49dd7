"""Repository implementations for the account and session ports."""

import logging
import secrets
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tunebridge.domain.entities import (
    Provider,
    ProviderTokenBundle,
    SessionTokenState,
    StoredAccount,
)
from tunebridge.domain.ports import IAccountStore, ISessionStore
from tunebridge.infrastructure.persistence.models import (
    LinkedAccountModel,
    SessionModel,
)

logger = logging.getLogger(__name__)


# Hey future me, repositories NEVER commit! The commit happens when the caller's
# Database.session_scope() exits (api/dependencies.get_live_tokens, or tests). If that scope
# blows up, everything staged here rolls back together.
class LinkedAccountRepository(IAccountStore):
    """Repository for linked provider accounts."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_user_id(
        self, provider: Provider, provider_account_id: str
    ) -> str | None:
        stmt = select(LinkedAccountModel.user_id).where(
            LinkedAccountModel.provider == provider.value,
            LinkedAccountModel.provider_account_id == provider_account_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_accounts(self, user_id: str) -> list[StoredAccount]:
        stmt = (
            select(LinkedAccountModel)
            .where(LinkedAccountModel.user_id == user_id)
            .order_by(LinkedAccountModel.created_at)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    # Yo, a refresh that did NOT rotate the refresh token leaves bundle.refresh_token as the old
    # value anyway, so writing it back is a no-op. None never overwrites a stored value though.
    async def update_tokens(
        self, user_id: str, provider: Provider, bundle: ProviderTokenBundle
    ) -> None:
        values: dict[str, object] = {
            "access_token": bundle.access_token,
            "expires_at": (
                bundle.expires_at_ms // 1000 if bundle.expires_at_ms is not None else None
            ),
            "updated_at": datetime.now(UTC),
        }
        if bundle.refresh_token:
            values["refresh_token"] = bundle.refresh_token

        stmt = (
            update(LinkedAccountModel)
            .where(
                LinkedAccountModel.user_id == user_id,
                LinkedAccountModel.provider == provider.value,
            )
            .values(**values)
        )
        result = await self.session.execute(stmt)
        if not result.rowcount:  # type: ignore[attr-defined]
            logger.debug("No %s account row to update for user", provider.value)

    async def save_account(self, account: StoredAccount) -> None:
        """Insert or update an account row keyed by (provider, provider_account_id).

        This is what a sign-in layer calls after an OAuth callback, next to
        SessionService.link_account.
        """
        stmt = select(LinkedAccountModel).where(
            LinkedAccountModel.provider == account.provider,
            LinkedAccountModel.provider_account_id == account.provider_account_id,
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self.session.add(
                LinkedAccountModel(
                    user_id=account.user_id,
                    provider=account.provider,
                    provider_account_id=account.provider_account_id,
                    access_token=account.access_token,
                    refresh_token=account.refresh_token,
                    expires_at=account.expires_at,
                )
            )
            await self.session.flush()
            return

        model.user_id = account.user_id
        model.access_token = account.access_token
        if account.refresh_token:
            model.refresh_token = account.refresh_token
        model.expires_at = account.expires_at
        await self.session.flush()

    @staticmethod
    def _to_entity(model: LinkedAccountModel) -> StoredAccount:
        return StoredAccount(
            provider=model.provider,
            provider_account_id=model.provider_account_id,
            user_id=model.user_id,
            access_token=model.access_token,
            refresh_token=model.refresh_token,
            expires_at=model.expires_at,
        )


# Listen up, the session id IS the credential the browser holds (cookie or bearer). It's a
# urlsafe random string, never derived from the user. get_session() bumps last_accessed_at
# (sliding expiration) the same way the auth sessions always did.
class DatabaseSessionStore(ISessionStore):
    """Session store backed by the sessions table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_session(self, session_id: str) -> SessionTokenState | None:
        model = await self.session.get(SessionModel, session_id)
        if model is None:
            return None

        model.last_accessed_at = datetime.now(UTC)
        return SessionTokenState.from_dict(model.payload)

    async def save_session(self, session_id: str, state: SessionTokenState) -> None:
        model = await self.session.get(SessionModel, session_id)
        if model is None:
            self.session.add(SessionModel(session_id=session_id, payload=state.to_dict()))
        else:
            # Reassign (not mutate) so the JSON column is flagged dirty
            model.payload = state.to_dict()
            model.last_accessed_at = datetime.now(UTC)
        await self.session.flush()

    async def create_session(self, state: SessionTokenState) -> str:
        session_id = secrets.token_urlsafe(32)
        self.session.add(SessionModel(session_id=session_id, payload=state.to_dict()))
        await self.session.flush()
        return session_id
