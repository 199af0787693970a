"""
TeamForge – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── App ──
    APP_NAME: str = "TeamForge"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./teamforge.db"

    # ── Scoring ──
    FALLBACK_SCORE: int = 85
    WIN_SCORE_THRESHOLD: int = 80
    COMPATIBILITY_FORMULA: Literal["average", "weighted"] = "average"

    # ── Real-time ──
    WS_ENABLED: bool = True


settings = Settings()
