"""
Application configuration using Pydantic Settings.

Storage backend switching is controlled by the STORE_BACKEND variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Storage
    # ===========================================
    # "memory" keeps everything in-process (tests, throwaway runs)
    # "sqlite" persists key/value records through SQLAlchemy
    STORE_BACKEND: Literal["memory", "sqlite"] = "sqlite"
    DATABASE_URL: str = "sqlite+aiosqlite:///./tessera.db"
    STORE_KEY_PREFIX: str = "tessera:"

    # ===========================================
    # Layout engine
    # ===========================================
    SLOT_MINUTES: int = Field(30, gt=0)
    LUNCH_START: str = "12:00"
    LUNCH_MINUTES: int = Field(30, ge=0)
    DEFAULT_MEETING_MINUTES: int = Field(30, gt=0)
    # Minimum duration for drop/resize edits
    MIN_BLOCK_MINUTES: int = Field(30, gt=0)

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def uses_memory_store(self) -> bool:
        """Check if the in-process key/value store is selected."""
        return self.STORE_BACKEND == "memory"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
