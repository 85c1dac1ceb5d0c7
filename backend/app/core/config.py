# backend/app/core/config.py
"""
Production-ready configuration using pydantic-settings.

Security considerations:
- VAULT_SECRET_KEY must be set in production; it never lives next to the data
- CORS_ORIGINS parsed from comma-separated env var, never defaults to "*"
- Lockout, session and recovery windows are tunable but validated
"""
from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Strictly typed application settings.

    Priority for loading:
    1. Environment variables (highest priority)
    2. .env file (via pydantic-settings)
    3. Default values (lowest priority, dev-safe only)
    """

    # ─────────────────────────────────────────────────────────────
    # Application metadata
    # ─────────────────────────────────────────────────────────────
    PROJECT_NAME: str = "SafePazz"
    PROJECT_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # ─────────────────────────────────────────────────────────────
    # Environment mode
    # Used to toggle behaviors between dev/production safely
    # ─────────────────────────────────────────────────────────────
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # ─────────────────────────────────────────────────────────────
    # Database Configuration
    # Default is a private in-memory SQLite database: state lives as long
    # as the process. A file URL (sqlite:///./safepazz.db) keeps it on disk.
    # ─────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite://"

    # ─────────────────────────────────────────────────────────────
    # Database debugging
    # MUST be False in production to prevent SQL query exposure
    # ─────────────────────────────────────────────────────────────
    DATABASE_ECHO: bool = False

    # ─────────────────────────────────────────────────────────────
    # Security: credential encryption
    # VAULT_SECRET_KEY MUST be set in production via environment variable.
    # The AES key is derived from it with HKDF and is never persisted.
    # ─────────────────────────────────────────────────────────────
    VAULT_SECRET_KEY: str = "INSECURE_DEV_KEY_CHANGE_IN_PRODUCTION"

    # ─────────────────────────────────────────────────────────────
    # Security: master password hashing (bcrypt cost factor)
    # ─────────────────────────────────────────────────────────────
    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=20)

    # ─────────────────────────────────────────────────────────────
    # Authentication policy
    # ─────────────────────────────────────────────────────────────
    MAX_FAILED_ATTEMPTS: int = Field(default=5, ge=1)
    SESSION_DURATION_HOURS: int = Field(default=24, ge=1)
    RECOVERY_TOKEN_EXPIRY_HOURS: int = Field(default=24, ge=1)
    DEFAULT_INACTIVITY_TIMEOUT: int = Field(default=15, ge=1, le=60)

    # ─────────────────────────────────────────────────────────────
    # Two-factor
    # "totp"   → RFC 6238 codes checked with pyotp
    # "format" → any 6-digit code accepted (legacy behaviour)
    # ─────────────────────────────────────────────────────────────
    TWO_FACTOR_MODE: Literal["totp", "format"] = "totp"
    TOTP_ISSUER: str = "SafePazz"

    # ─────────────────────────────────────────────────────────────
    # Password records
    # ─────────────────────────────────────────────────────────────
    EXPIRATION_WARNING_DAYS: int = Field(default=7, ge=0)

    # ─────────────────────────────────────────────────────────────
    # CORS Configuration
    # Parsed from comma-separated CORS_ORIGINS env var
    # Empty string → empty list (NOT "*" for security)
    # ─────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        if v is None:
            return "INFO"
        return str(v).strip().upper()

    @property
    def BACKEND_CORS_ORIGINS(self) -> List[str]:
        """
        Parse CORS_ORIGINS string into a list of allowed origins.

        Security considerations:
        - Empty string returns empty list, NOT wildcard "*"
        - Whitespace is trimmed from each origin
        - Empty entries after split are filtered out

        Returns:
            List of allowed origin URLs
        """
        if not self.CORS_ORIGINS or not self.CORS_ORIGINS.strip():
            return []

        return [
            origin.strip()
            for origin in self.CORS_ORIGINS.split(",")
            if origin.strip()
        ]

    # ─────────────────────────────────────────────────────────────
    # Pydantic Settings Configuration
    # ─────────────────────────────────────────────────────────────
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # Extra fields in .env are ignored (prevents config injection)
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance.

    Using lru_cache ensures settings are only loaded once,
    providing consistent configuration across the application
    and avoiding repeated env var parsing.
    """
    return Settings()


# Existing code imports `settings` directly from this module
settings = get_settings()
