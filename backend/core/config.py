"""
Centralised settings using `pydantic-settings`.

All env-vars are loaded once at import time.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class _Settings(BaseSettings):
    # environment
    ENV: str = "development"  # development | staging | production

    # CORS
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Log level (DEBUG/INFO/WARNING/ERROR)
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    # Storage: "memory" keeps everything for the process lifetime only
    STORAGE_BACKEND: Literal["memory", "database"] = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./app.db"

    # Gemini
    GEMINI_API_KEY: str | None = None          # set this in .env / secrets manager
    GEMINI_MODEL: str = "gemini-1.5-flash"
    SUMMARY_MAX_OUTPUT_TOKENS: int = 2000
    SUMMARY_TEMPERATURE: float = 0.3

    # Gmail (sending account, offline refresh token with gmail.send scope)
    GMAIL_CLIENT_ID: str | None = None
    GMAIL_CLIENT_SECRET: str | None = None
    GMAIL_REFRESH_TOKEN: str | None = None
    EMAIL_SENDER: str | None = None

    # Feature flags
    ENABLE_EMAIL: bool = True

    # Uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10 MiB

    @property
    def email_configured(self) -> bool:
        return bool(
            self.ENABLE_EMAIL
            and self.GMAIL_CLIENT_ID
            and self.GMAIL_CLIENT_SECRET
            and self.GMAIL_REFRESH_TOKEN
        )

    # --- internal ---
    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = _Settings()  # Singleton
