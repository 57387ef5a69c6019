"""Application configuration via pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Remote headless browser (browserless)
    browserless_token: str = ""
    browserless_endpoint: str = "wss://chrome.browserless.io"
    browser_locale: str = "en-US"

    # Per-step timeout budgets
    generic_timeout_seconds: float = 10.0
    video_timeout_seconds: float = 10.0
    subtitle_timeout_seconds: float = 30.0
    automation_post_timeout_seconds: float = 30.0
    automation_profile_timeout_seconds: float = 45.0

    # Randomized delay before generic-site requests
    polite_delay_enabled: bool = True
    polite_delay_min_ms: int = 500
    polite_delay_max_ms: int = 2000

    # Hydration waits for client-rendered pages (empirically tuned for Threads)
    post_settle_ms: int = 4000
    profile_settle_ms: int = 4000
    scroll_settle_ms: int = 2000
    profile_scroll_enabled: bool = True
    profile_post_limit: int = 10

    # Subtitles
    subtitle_backend: Literal["transcript-api", "yt-dlp", "none"] = "transcript-api"
    subtitle_primary_language: str = "ko"
    subtitle_fallback_language: str = "en"
    yt_dlp_path: str = "yt-dlp"
    youtube_proxy_url: str = ""

    # Use the single-GET DOM strategy for Threads when no browser is configured
    automation_fallback_to_dom: bool = True

    # App
    log_level: str = "INFO"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
