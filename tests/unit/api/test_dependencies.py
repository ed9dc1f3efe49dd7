"""Tests for API dependencies: session id extraction and provider requirements."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from tunebridge.api.dependencies import (
    get_database,
    get_session_id,
    parse_bearer_token,
    require_providers,
)
from tunebridge.domain.entities import Provider, ProviderTokenBundle
from tunebridge.domain.exceptions import AuthenticationError


class TestGetSessionId:
    """Test get_session_id dependency that supports both cookie and bearer token."""

    @pytest.mark.parametrize(
        "authorization",
        [
            "Bearer test-session-id-123",
            "bearer test-session-id-123",
            "BeArEr test-session-id-123",
            "Bearer   test-session-id-123   ",
            "test-session-id-123",
        ],
    )
    async def test_from_authorization_header(self, authorization: str) -> None:
        session_id = await get_session_id(
            authorization=authorization, session_id_cookie=None
        )
        assert session_id == "test-session-id-123"

    async def test_from_cookie(self) -> None:
        """Test extracting session ID from cookie when no Authorization header."""
        session_id = await get_session_id(
            authorization=None, session_id_cookie="cookie-session-id-456"
        )
        assert session_id == "cookie-session-id-456"

    async def test_header_precedence_over_cookie(self) -> None:
        session_id = await get_session_id(
            authorization="Bearer header-session-id",
            session_id_cookie="cookie-session-id",
        )
        assert session_id == "header-session-id"

    async def test_none_when_both_missing(self) -> None:
        assert await get_session_id(authorization=None, session_id_cookie=None) is None

    @pytest.mark.parametrize("authorization", ["", "   "])
    async def test_blank_header_falls_back_to_cookie(self, authorization: str) -> None:
        session_id = await get_session_id(
            authorization=authorization, session_id_cookie="cookie-session-id"
        )
        assert session_id == "cookie-session-id"

    def test_parse_bearer_token(self) -> None:
        assert parse_bearer_token("Bearer abc") == "abc"
        assert parse_bearer_token("abc") == "abc"


class TestRequireProviders:
    """Test the credential gate dependency."""

    async def test_returns_access_tokens_in_order(self) -> None:
        dependency = require_providers(Provider.SPOTIFY, Provider.GOOGLE)

        access = await dependency(
            tokens={
                Provider.SPOTIFY: ProviderTokenBundle("sp"),
                Provider.GOOGLE: ProviderTokenBundle("gg"),
            }
        )

        assert access == {Provider.SPOTIFY: "sp", Provider.GOOGLE: "gg"}

    async def test_first_missing_provider_is_named(self) -> None:
        dependency = require_providers(Provider.GOOGLE, Provider.SPOTIFY)

        with pytest.raises(AuthenticationError) as exc_info:
            await dependency(tokens={})

        assert exc_info.value.message == "Connect Google (YouTube) first"
        assert exc_info.value.provider == "google"

    async def test_only_requested_providers_are_checked(self) -> None:
        dependency = require_providers(Provider.SPOTIFY)

        access = await dependency(tokens={Provider.SPOTIFY: ProviderTokenBundle("sp")})

        assert access == {Provider.SPOTIFY: "sp"}


class TestGetDatabase:
    """Test get_database()."""

    def test_503_before_startup(self) -> None:
        request = MagicMock()
        request.app.state = object()

        with pytest.raises(HTTPException) as exc_info:
            get_database(request)

        assert exc_info.value.status_code == 503

    def test_returns_state_database(self) -> None:
        request = MagicMock()
        request.app.state.db = "db"

        assert get_database(request) == "db"
