"""Multi-provider credential lifecycle: identity, merge, hydration and refresh.

Hey future me - this runs on EVERY request that needs a provider token! The order is fixed:

1. Identity   - adopt the sign-in user id, or look up the owner of the signed-in account
2. Merge      - fold fresh sign-in tokens into that provider's bundle (others untouched!)
3. Hydrate    - fill missing provider slots from the persisted account rows
4. Refresh    - renew bundles that expire within the skew window
5. Persist    - write refreshed tokens back to the account rows (optional)

Each step is isolated: a failed lookup, hydration, refresh or persist is logged and recorded as
a StepResult, and the next step still runs. The caller always gets whatever valid tokens exist.

There is NO lock here. Two concurrent requests for the same user may both refresh the same
provider; whichever saves the session last wins. Providers tolerate that.
"""

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tunebridge.domain.entities import (
    Provider,
    ProviderTokenBundle,
    SessionTokenState,
    SignInData,
)
from tunebridge.domain.ports import IAccountStore, ITokenRefresher
from tunebridge.domain.value_objects import StepResult

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SKEW_SECONDS = 60


@dataclass
class CredentialResolution:
    """Result of resolving a session's credentials.

    Attributes:
        bundles: Live per-provider bundles (same mapping as state.bundles)
        steps: Outcome of every sub-step, in execution order
    """

    bundles: dict[Provider, ProviderTokenBundle]
    steps: list[StepResult[Any]] = field(default_factory=list)

    def step(self, name: str) -> StepResult[Any] | None:
        """Return the outcome recorded for a step name, if it ran."""
        for result in self.steps:
            if result.step == name:
                return result
        return None

    @property
    def refreshed(self) -> list[Provider]:
        """Providers whose token was refreshed in this resolution."""
        return [
            provider
            for provider in Provider
            if (result := self.step(f"refresh:{provider.value}")) is not None
            and result.is_ok
        ]


class CredentialLifecycleManager:
    """Keeps per-provider token bundles in a session state usable."""

    def __init__(
        self,
        account_store: IAccountStore,
        refreshers: Mapping[Provider, ITokenRefresher],
        *,
        refresh_skew_seconds: int = DEFAULT_REFRESH_SKEW_SECONDS,
        persist_refreshed_tokens: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the manager.

        Args:
            account_store: Persisted account lookups (identity + hydration)
            refreshers: Refresh-token grant per provider; providers without one
                are never refreshed
            refresh_skew_seconds: Refresh this long BEFORE the expiry
            persist_refreshed_tokens: Write refreshed tokens back to the store
            clock: Returns epoch seconds; injectable for tests
        """
        self._accounts = account_store
        self._refreshers = dict(refreshers)
        self._skew_ms = refresh_skew_seconds * 1000
        self._persist = persist_refreshed_tokens
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def resolve(
        self, state: SessionTokenState, sign_in: SignInData | None = None
    ) -> CredentialResolution:
        """Bring `state` up to date and return its live bundles.

        `state` is mutated in place; the caller projects it back into the
        session store.

        Args:
            state: Session token state reconstructed for this request
            sign_in: Provider-account data on a sign-in / re-link event

        Returns:
            CredentialResolution with the bundle mapping and step outcomes
        """
        steps: list[StepResult[Any]] = []

        steps.append(await self._resolve_identity(state, sign_in))
        if sign_in is not None:
            steps.append(self._merge(state, sign_in))
        steps.append(await self._hydrate(state))

        refreshed: list[Provider] = []
        for provider in list(state.bundles):
            result = await self._refresh(provider, state.bundles[provider])
            steps.append(result)
            if result.is_ok:
                refreshed.append(provider)

        for provider in refreshed:
            steps.append(await self._persist_refreshed(state, provider))

        return CredentialResolution(bundles=state.bundles, steps=steps)

    # =========================================================================
    # 1. IDENTITY
    # =========================================================================

    async def _resolve_identity(
        self, state: SessionTokenState, sign_in: SignInData | None
    ) -> StepResult[str]:
        if sign_in is not None and sign_in.user_id:
            state.sub = sign_in.user_id
            return StepResult.ok(state.sub, step="identity")

        if sign_in is None or state.sub:
            return StepResult.skipped(step="identity")

        try:
            user_id = await self._accounts.find_user_id(
                sign_in.provider, sign_in.provider_account_id
            )
        except Exception as e:
            # Degraded session: no sub → no hydration, but the fresh tokens still merge
            logger.error(
                "Account lookup failed for %s: %s", sign_in.provider.value, e
            )
            return StepResult.failed(str(e), step="identity")

        if not user_id:
            return StepResult.not_found(step="identity")

        state.sub = user_id
        return StepResult.ok(user_id, step="identity")

    # =========================================================================
    # 2. MERGE
    # =========================================================================

    # Hey future me - the refresh-token rule is the important one! Providers do NOT always resend
    # refresh_token (Google only sends it on first consent). A missing value keeps the old one.
    def _merge(
        self, state: SessionTokenState, sign_in: SignInData
    ) -> StepResult[None]:
        existing = state.bundles.get(sign_in.provider) or ProviderTokenBundle()
        state.bundles[sign_in.provider] = ProviderTokenBundle(
            access_token=sign_in.access_token or existing.access_token,
            refresh_token=sign_in.refresh_token or existing.refresh_token,
            expires_at_ms=(
                sign_in.expires_at * 1000
                if sign_in.expires_at
                else existing.expires_at_ms
            ),
        )
        logger.info("Merged sign-in tokens for %s", sign_in.provider.value)
        return StepResult.ok(step="merge")

    # =========================================================================
    # 3. HYDRATION
    # =========================================================================

    # Listen up - this repairs sessions that started BEFORE a second provider was linked. A slot
    # is filled only when absent or without an access token; a populated bundle is never touched.
    async def _hydrate(self, state: SessionTokenState) -> StepResult[list[Provider]]:
        if not state.sub:
            return StepResult.skipped(step="hydrate")

        try:
            accounts = await self._accounts.list_accounts(state.sub)
        except Exception as e:
            logger.error("Hydrating session from stored accounts failed: %s", e)
            return StepResult.failed(str(e), step="hydrate")

        filled: list[Provider] = []
        for account in accounts:
            provider = Provider.parse(account.provider)
            if provider is None:
                continue
            current = state.bundles.get(provider)
            if current is not None and current.access_token:
                continue
            state.bundles[provider] = ProviderTokenBundle(
                access_token=account.access_token or None,
                refresh_token=account.refresh_token or None,
                expires_at_ms=account.expires_at * 1000 if account.expires_at else None,
            )
            filled.append(provider)

        if filled:
            logger.info(
                "Hydrated session with %s",
                ", ".join(p.value for p in filled),
            )
        return StepResult.ok(filled, step="hydrate")

    # =========================================================================
    # 4. REFRESH
    # =========================================================================

    async def _refresh(
        self, provider: Provider, bundle: ProviderTokenBundle
    ) -> StepResult[None]:
        step = f"refresh:{provider.value}"
        refresher = self._refreshers.get(provider)

        if refresher is None or not bundle.refresh_token:
            return StepResult.skipped(step=step)

        now_ms = self._now_ms()
        if not bundle.is_expiring(now_ms, self._skew_ms):
            return StepResult.skipped(step=step)

        try:
            grant = await refresher.refresh_access_token(bundle.refresh_token)
        except Exception as e:
            # Stale bundle stays; the actual API call will fail on its own if it must
            logger.error("%s token refresh failed: %s", provider.value, e)
            return StepResult.failed(str(e), step=step)

        bundle.access_token = grant.access_token
        bundle.expires_at_ms = self._now_ms() + grant.expires_in * 1000
        if grant.refresh_token:
            bundle.refresh_token = grant.refresh_token

        logger.info("Refreshed %s access token", provider.value)
        return StepResult.ok(step=step)

    # =========================================================================
    # 5. PERSIST
    # =========================================================================

    async def _persist_refreshed(
        self, state: SessionTokenState, provider: Provider
    ) -> StepResult[None]:
        step = f"persist:{provider.value}"
        if not self._persist or not state.sub:
            return StepResult.skipped(step=step)

        try:
            await self._accounts.update_tokens(
                state.sub, provider, state.bundles[provider]
            )
        except Exception as e:
            logger.warning(
                "Persisting refreshed %s tokens failed: %s", provider.value, e
            )
            return StepResult.failed(str(e), step=step)
        return StepResult.ok(step=step)
