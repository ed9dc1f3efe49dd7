"""Tests for credential entities and session blob (de)serialization."""

from tunebridge.domain.entities import Provider, ProviderTokenBundle, SessionTokenState


class TestProvider:
    """Test the closed provider enumeration."""

    def test_parse_known(self) -> None:
        assert Provider.parse("spotify") is Provider.SPOTIFY
        assert Provider.parse("google") is Provider.GOOGLE

    def test_parse_unknown_returns_none(self) -> None:
        assert Provider.parse("deezer") is None
        assert Provider.parse(None) is None

    def test_display_names(self) -> None:
        assert Provider.SPOTIFY.display_name == "Spotify"
        assert Provider.GOOGLE.display_name == "Google (YouTube)"


class TestProviderTokenBundle:
    """Test expiry checks."""

    def test_no_expiry_never_expiring(self) -> None:
        bundle = ProviderTokenBundle(access_token="a")
        assert bundle.is_expiring(now_ms=10**15, skew_ms=60_000) is False

    def test_more_than_skew_in_future_not_expiring(self) -> None:
        bundle = ProviderTokenBundle(access_token="a", expires_at_ms=1_000_000 + 61_000)
        assert bundle.is_expiring(now_ms=1_000_000, skew_ms=60_000) is False

    def test_within_skew_is_expiring(self) -> None:
        bundle = ProviderTokenBundle(access_token="a", expires_at_ms=1_000_000 + 59_000)
        assert bundle.is_expiring(now_ms=1_000_000, skew_ms=60_000) is True

    def test_already_expired_is_expiring(self) -> None:
        bundle = ProviderTokenBundle(access_token="a", expires_at_ms=500)
        assert bundle.is_expiring(now_ms=1_000_000, skew_ms=60_000) is True


class TestSessionTokenState:
    """Test the session blob boundary."""

    def test_round_trip_keeps_all_providers(self) -> None:
        state = SessionTokenState(
            sub="user-1",
            bundles={
                Provider.SPOTIFY: ProviderTokenBundle("sp", "sp-r", 123),
                Provider.GOOGLE: ProviderTokenBundle("gg", None, None),
            },
        )
        assert SessionTokenState.from_dict(state.to_dict()) == state

    def test_unknown_provider_is_ignored(self) -> None:
        state = SessionTokenState.from_dict(
            {
                "sub": "user-1",
                "providers": {
                    "spotify": {"access_token": "sp"},
                    "myspace": {"access_token": "nope"},
                },
            }
        )
        assert set(state.bundles) == {Provider.SPOTIFY}

    def test_malformed_values_are_ignored(self) -> None:
        state = SessionTokenState.from_dict(
            {
                "sub": 42,
                "providers": {
                    "spotify": "not-a-dict",
                    "google": {"access_token": 5, "expires_at_ms": True},
                },
            }
        )
        assert state.sub is None
        assert Provider.SPOTIFY not in state.bundles
        assert state.bundles[Provider.GOOGLE] == ProviderTokenBundle()

    def test_non_dict_blob_gives_empty_state(self) -> None:
        assert SessionTokenState.from_dict(None) == SessionTokenState()

    def test_access_token_lookup(self) -> None:
        state = SessionTokenState(bundles={Provider.SPOTIFY: ProviderTokenBundle("sp")})
        assert state.access_token(Provider.SPOTIFY) == "sp"
        assert state.access_token(Provider.GOOGLE) is None
