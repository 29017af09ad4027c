"""
Application settings.

Values come from the environment (or a local ``.env`` file) and are shared by
the backend, the API access layer and the CLI through the module-level
``settings`` object.
"""

from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "clientdash"
    MODE: str = "development"
    LOG_LEVEL: str = "INFO"

    # API access layer
    CLIENTDASH_API_URL: str = "http://localhost:3000"
    API_TIMEOUT: float = 30.0
    TOKEN_STORE_PATH: Path = Path.home() / ".config" / "clientdash" / "session.json"

    # Backend
    DATABASE_URL: str = "sqlite+aiosqlite:///./clientdash.db"
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    FRONTEND_URL: str = "http://localhost:3001"
    CORS_ORIGINS: List[str] = ["*"]

    # Password reset mail delivery
    SMTP_SERVER: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: Optional[str] = None
    SMTP_FROM_NAME: str = "Client Dashboard"

    # Error tracking
    SENTRY_DSN: Optional[str] = None
    SENTRY_ENVIRONMENT: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1


def normalize_url(url: str) -> str:
    """Strip a single trailing slash so paths can be appended directly."""
    return url[:-1] if url.endswith("/") else url


def is_debug_mode() -> bool:
    return settings.MODE in ("development", "test")


settings = Settings()
