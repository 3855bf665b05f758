"""
Configuration settings for the SaveZar fleet API.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional
import secrets
import logging

logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    """Application settings loaded from the environment and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        validate_assignment=True,
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: str = Field(default="development", description="Application environment")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # API Settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "SaveZar Fleet API"
    VERSION: str = "1.0.0"

    # Storage Settings - in-memory storage is used when no URL is configured
    DATABASE_URL: Optional[str] = Field(default=None, description="Database connection URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")
    USE_IN_MEMORY_STORAGE: bool = Field(default=False, description="Force the in-memory backend")
    SEED_DEMO_DATA: bool = Field(default=True, description="Seed demo data into an empty store")

    # Security Settings
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "savezar_session"
    SESSION_TTL_HOURS: int = Field(default=24, ge=1, le=720)
    SESSION_COOKIE_SECURE: bool = Field(default=True, description="Send the session cookie over HTTPS only")

    # Password Security
    MIN_PASSWORD_LENGTH: int = Field(default=8, ge=1)

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_FILE: Optional[str] = None

    # CORS
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:5173"], description="Allowed CORS origins")

    @field_validator('SECRET_KEY')
    @classmethod
    def validate_secret_key(cls, v):
        if len(v) < 32:
            logger.warning("SECRET_KEY should be at least 32 characters long")
        if v == "your-secret-key-change-in-production":
            raise ValueError("SECRET_KEY must be changed from default value")
        return v

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            return None
        if not v.startswith(('postgresql://', 'postgresql+asyncpg://', 'sqlite')):
            raise ValueError("DATABASE_URL must be a PostgreSQL or SQLite URL")
        return v

    @field_validator('ENVIRONMENT')
    @classmethod
    def validate_environment(cls, v):
        allowed_envs = ['development', 'staging', 'production', 'test']
        if v not in allowed_envs:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed_envs}")
        return v

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    def use_memory_storage(self) -> bool:
        return self.USE_IN_MEMORY_STORAGE or not self.DATABASE_URL

    @property
    def async_database_url(self) -> Optional[str]:
        """DATABASE_URL with an async driver selected."""
        url = self.DATABASE_URL
        if not url:
            return None
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

# Global settings instance with error handling
try:
    settings = Settings()
    if settings.is_production() and settings.DEBUG:
        logger.warning("DEBUG mode is enabled in production environment")
    if settings.is_production() and not settings.SESSION_COOKIE_SECURE:
        logger.warning("Session cookies are not secure-flagged in production")
except Exception as e:
    logger.error(f"Failed to load settings: {e}")
    raise
