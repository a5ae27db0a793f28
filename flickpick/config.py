"""
FlickPick — Application Configuration
All settings loaded from environment variables via pydantic-settings.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "CHANGE_ME_JWT_SECRET_256_BIT"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # ── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./flickpick.db"

    # ── Auth ──────────────────────────────────────────────────────────────────
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_DAYS: int = 7

    # passlib scheme + work factor used for stored password hashes
    PASSWORD_HASH_SCHEME: str = "pbkdf2_sha256"
    PASSWORD_HASH_ROUNDS: Optional[int] = None  # None = passlib default for the scheme

    # ── Application Settings ──────────────────────────────────────────────────
    ENVIRONMENT: str = "development"  # development | staging | production
    APP_TITLE: str = "FlickPick"
    APP_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    # ── CORS / Security ───────────────────────────────────────────────────────
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:8080",
        "http://localhost:4200",
        "http://localhost:1234",
        "https://myflickpick.netlify.app",
        "https://codestun.github.io",
        "https://flickpick-1911bf3985c5.herokuapp.com",
    ]
    DEBUG: bool = False

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of {allowed}")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        if v not in {"HS256", "HS384", "HS512"}:
            raise ValueError("JWT_ALGORITHM must be an HMAC algorithm (HS256/HS384/HS512)")
        return v

    @field_validator("JWT_EXPIRY_DAYS", "PASSWORD_HASH_ROUNDS")
    @classmethod
    def validate_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL {v!r}")
        return level

    @model_validator(mode="after")
    def reject_default_secret_in_production(self) -> "Settings":
        if self.ENVIRONMENT == "production" and self.JWT_SECRET == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set explicitly in production")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton — safe for FastAPI Depends()."""
    return Settings()
