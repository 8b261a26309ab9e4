"""
Environment configuration for the hostel allocation engine.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.

Domain settings (admission windows, allocation limits, priority flags)
are not environment variables; they live in the Setting table and are
read through SettingRepository.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application configuration
    APP_NAME: str = Field(default="Hostel Allocation Service", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Database configuration
    DATABASE_URL: str = "sqlite:///./hostel_allocation.db"
    DATABASE_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_POOL_OVERFLOW: int = 5

    # Redis configuration (shared rate-limit counters)
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 20
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # Payment gateway
    PAYSTACK_SECRET_KEY: str = ""
    PAYSTACK_BASE_URL: str = "https://api.paystack.co"
    PAYMENT_GATEWAY_TIMEOUT: float = 15.0
    PAYMENT_CURRENCY: str = "NGN"
    FRONTEND_URL: str = "http://localhost:5173"

    # Allocation defaults when the Setting table is silent
    DEFAULT_MAX_ALLOCATIONS_PER_RUN: int = 50

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Optional[str]) -> str:
        """Accept lowercase level names from .env files"""
        return (v or "INFO").upper()

    @field_validator("LOG_FORMAT", mode="before")
    @classmethod
    def validate_log_format(cls, v: Optional[str]) -> str:
        value = (v or "json").lower()
        if value not in {"json", "text"}:
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return value

    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
