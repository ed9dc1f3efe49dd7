"""Application settings loaded from environment variables and `.env`."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE = ".env"


# Hey future me - each provider group reads its OWN env prefix (SPOTIFY_*, GOOGLE_*).
# Empty client credentials are allowed at startup! We only fail when a token refresh actually
# needs them (ConfigurationError → 503), so the app still boots for read-only health checks.
class SpotifySettings(BaseSettings):
    """Spotify OAuth client and API quota settings."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_", env_file=_ENV_FILE, extra="ignore"
    )

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    # Spotify allows roughly 180 req/min; stay well below it
    requests_per_second: float = 2.0
    burst: int = 10


class GoogleSettings(BaseSettings):
    """Google (YouTube Data API) OAuth client and quota settings."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_", env_file=_ENV_FILE, extra="ignore"
    )

    client_id: str = ""
    client_secret: str = ""
    requests_per_second: float = 1.0
    burst: int = 5


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_", env_file=_ENV_FILE, extra="ignore"
    )

    url: str = "sqlite+aiosqlite:///./tunebridge.db"
    echo: bool = False


class TransferSettings(BaseSettings):
    """Knobs for the transfer pipeline and playlist classification."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSFER_", env_file=_ENV_FILE, extra="ignore"
    )

    # Spotify rejects more than 100 URIs per add-items call
    batch_size: int = Field(default=100, ge=1, le=100)
    reverse_source_limit: int = Field(default=100, ge=1)
    classification_concurrency: int = Field(default=5, ge=1)
    classification_sample_size: int = Field(default=5, ge=1, le=50)
    playlist_title_prefix: str = "Imported — "


class AuthSettings(BaseSettings):
    """Credential lifecycle settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_", env_file=_ENV_FILE, extra="ignore"
    )

    refresh_skew_seconds: int = Field(default=60, ge=0)
    persist_refreshed_tokens: bool = True


class Settings(BaseSettings):
    """Root settings object.

    Sub-groups are built through default factories so each one resolves its own
    env prefix. Override them explicitly in tests:

        Settings(transfer=TransferSettings(batch_size=10))
    """

    model_config = SettingsConfigDict(env_file=_ENV_FILE, extra="ignore")

    app_name: str = "tunebridge"
    log_level: str = "INFO"
    log_json: bool = False

    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    transfer: TransferSettings = Field(default_factory=TransferSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)


# Yo, cached singleton! FastAPI calls this via Depends(get_settings) on every request, and we
# don't want to re-read .env each time. Tests override it with app.dependency_overrides.
@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
