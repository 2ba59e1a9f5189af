"""Application configuration loaded from environment variables."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment."""

    def __init__(self):
        self.platform_url: str = os.getenv("PLATFORM_URL", "http://localhost:54321")
        self.platform_anon_key: str = os.getenv("PLATFORM_ANON_KEY", "")
        self.site_url: str = os.getenv("SITE_URL", "http://localhost:8000")
        self.oauth_provider: str = os.getenv("OAUTH_PROVIDER", "google")
        self.session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "sb-access-token")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.database_url: str = os.getenv(
            "DATABASE_URL", "sqlite+aiosqlite:///./bookmarks.db"
        )

    @property
    def auth_base_url(self) -> str:
        return f"{self.platform_url.rstrip('/')}/auth/v1"

    @property
    def callback_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/auth/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
