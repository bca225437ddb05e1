from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 3000
    APP_ENV: Literal["development", "production"] = "production"
    APP_NAME: str = "ReelRoll"

    # Plex Media Server
    PLEX_SCHEME: Literal["http", "https"] = "http"
    PLEX_PORT: int = 32400
    # Library sections a user may pick from (1 = Movies, 2 = TV Shows on a default install)
    SUPPORTED_SECTION_IDS: set[int] = {1, 2}
    SECTION_FETCH_TIMEOUT_SECONDS: float = 10.0
    SERVER_INFO_TIMEOUT_SECONDS: float = 5.0
    SERVER_IDENTITY_TTL_SECONDS: int = 3600

    # Reveal animation
    SPIN_MIN_DURATION_MS: float = 4000.0
    SPIN_MAX_DURATION_MS: float = 6000.0

    # Poster transcode sizes
    STRIP_POSTER_WIDTH: int = 300
    STRIP_POSTER_HEIGHT: int = 450
    REVEAL_POSTER_WIDTH: int = 648
    REVEAL_POSTER_HEIGHT: int = 972


settings = Settings()
