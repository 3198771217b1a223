"""
Application configuration
Loads settings from environment variables
"""
from pydantic_settings import BaseSettings
from typing import Optional, List, Union
from pydantic import field_validator


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "BookFlow API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Security (tokens are issued by the identity provider, shared secret)
    SECRET_KEY: str = "change-me-in-production-use-a-long-random-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database
    DATABASE_URL: str = "sqlite:///./bookflow.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 0

    # Email (SMTP)
    MAIL_USERNAME: Optional[str] = None
    MAIL_PASSWORD: Optional[str] = None
    MAIL_FROM: Optional[str] = None
    MAIL_PORT: int = 587
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_USE_TLS: bool = True

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # CORS Origins
    CORS_ORIGINS: Union[List[str], str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Booking defaults (used when an organization has not configured its own)
    DEFAULT_TIMEZONE: str = "America/Santiago"
    DEFAULT_SERVICE_DURATION_MINUTES: int = 60
    DEFAULT_BUFFER_MINUTES: int = 15
    DEFAULT_MAX_ADVANCE_BOOKING_DAYS: int = 30
    DEFAULT_BUFFER_POLICY: str = "after"

    # Trial
    TRIAL_DAYS: int = 30

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list"""
        if isinstance(v, list):
            return v

        if isinstance(v, str):
            if not v.strip():
                return []
            origins = [origin.strip() for origin in v.split(",")]
            return [origin for origin in origins if origin]

        return ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("DEFAULT_BUFFER_POLICY")
    @classmethod
    def validate_buffer_policy(cls, v: str) -> str:
        """Only 'after' and 'symmetric' are understood by the slot calculator"""
        if v not in ("after", "symmetric"):
            raise ValueError("DEFAULT_BUFFER_POLICY must be 'after' or 'symmetric'")
        return v

    @property
    def email_enabled(self) -> bool:
        return all([self.MAIL_USERNAME, self.MAIL_PASSWORD, self.MAIL_FROM])

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create settings instance
settings = Settings()
