"""
Application configuration — Pydantic Settings.

Loads from .env with strict validation. Single source of truth
for all environment-dependent values: where the aggregation backend
lives, which tenant/session headers to send, and request limits.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────
    APP_NAME: str = "SmartWidgets"
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_PORT: int = 8000

    # ── Aggregation backend ──────────────────────────────────────
    BACKEND_BASE_URL: str = "http://localhost:3006"
    BACKEND_API_PREFIX: str = "/api/v1/smart-widgets"
    BACKEND_TIMEOUT: int = 15

    # ── Tenant / session context (opaque, forwarded as headers) ──
    TENANT_ID: Optional[str] = None
    SESSION_ID: Optional[str] = None
    USER_ID: Optional[str] = None

    # ── Widget data ──────────────────────────────────────────────
    PREVIEW_LIMIT: int = 1000

    # ── Logging ──────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── URL Builders ─────────────────────────────────────────────

    def backend_url(self, path: str) -> str:
        """Build an absolute URL for a backend path like ``tables``."""
        base = self.BACKEND_BASE_URL.rstrip("/")
        # Avoid a doubled "/api" when the base URL already ends with it
        if base.endswith("/api") and self.BACKEND_API_PREFIX.startswith("/api/"):
            base = base[: -len("/api")]
        prefix = "/" + self.BACKEND_API_PREFIX.strip("/")
        return f"{base}{prefix}/{path.lstrip('/')}"


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
