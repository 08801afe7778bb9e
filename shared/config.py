"""
Configuration module - Central access point for environment variables.

CRITICAL: Access ALL environment variables through this module.
NEVER use os.getenv() directly in application code.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Marketplace backend (reservations, payment plans, checkout)
    MARKETPLACE_API_URL: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the marketplace booking API"
    )
    MARKETPLACE_API_TOKEN: str = Field(
        default="placeholder",
        description="Bearer token forwarded to the marketplace booking API"
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Transport-level timeout for a single HTTP request"
    )

    # Booking defaults
    DEFAULT_CURRENCY: str = Field(
        default="MXN",
        description="Currency used when generating payment plans"
    )
    DEFAULT_COLLECTION_TYPE: str = Field(
        default="circuit",
        description="Collection type sent when the product has no product_type"
    )

    # Navigation targets shown after a failed payment handoff
    MARKETPLACE_PATH: str = Field(default="/marketplace")
    RESERVATIONS_PATH: str = Field(default="/traveler/reservations")

    # Redis (companion roster autosave)
    REDIS_URL: str = Field(
        default="redis://redis:6379/0",
        description="Redis connection string"
    )
    ROSTER_CACHE_TTL_SECONDS: int = Field(
        default=86400,
        description="TTL for autosaved companion rosters"
    )

    # Application Settings
    LOG_LEVEL: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()
