"""
Environment configuration for the complaint workflow service.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

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

    @staticmethod
    def get_secret_key_default() -> str:
        """Generate a default secret key if not provided"""
        import secrets
        import string
        alphabet = string.ascii_letters + string.digits
        return ''.join(secrets.choice(alphabet) for _ in range(32))

    # Application configuration
    APP_NAME: str = "Civic Desk"
    API_VERSION: str = "v1"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    SECRET_KEY: str = Field(default_factory=lambda: Settings.get_secret_key_default())
    CORS_ORIGINS: List[str] = ["*"]

    # Database configuration
    DATABASE_URL: str = "sqlite:///./civicdesk.db"
    DATABASE_ECHO: bool = False

    # Redis (CAPTCHA challenges)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_POOL_SIZE: int = Field(default=10, ge=1)
    CAPTCHA_KEY_PREFIX: str = "civicdesk:captcha:"

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # One-time codes
    OTP_EXPIRY_MINUTES: int = Field(default=10, ge=1)
    OTP_MAX_ATTEMPTS: int = Field(default=5, ge=1)
    OTP_RETENTION_HOURS: int = Field(default=24, ge=0)

    # CAPTCHA challenges
    CAPTCHA_TTL_SECONDS: int = Field(default=300, ge=1)
    CAPTCHA_LENGTH: int = Field(default=5, ge=3)

    # Sequence code allocation
    SEQUENCE_MAX_RETRIES: int = Field(default=3, ge=1)
    SEQUENCE_RETRY_BASE_DELAY_MS: int = Field(default=25, ge=0)
    COMPLAINT_ID_PREFIX: str = "KSC"
    COMPLAINT_ID_START_NUMBER: int = Field(default=1, ge=0)
    COMPLAINT_ID_LENGTH: int = Field(default=4, ge=1)

    # Workflow defaults (overridable through system_configs rows)
    DEFAULT_SLA_HOURS: int = Field(default=48, gt=0)
    SLA_WARNING_WINDOW_HOURS: int = Field(default=24, ge=0)
    AUTO_ASSIGN_COMPLAINTS: bool = True

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def normalize_log_level(cls, v: Optional[str]) -> str:
        """Accept log levels in any case"""
        return str(v or "INFO").strip().upper()

    @field_validator('COMPLAINT_ID_PREFIX', mode='before')
    @classmethod
    def normalize_prefix(cls, v: Optional[str]) -> str:
        prefix = str(v or "").strip().upper()
        if not prefix:
            raise ValueError("COMPLAINT_ID_PREFIX cannot be empty")
        return prefix

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
