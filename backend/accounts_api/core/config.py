"""
Application Configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional
import warnings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Accounts API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    PORT: int = 5000

    # Database
    DATABASE_URL: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "accounts_db"

    # Security
    JWT_SECRET: str = "your-super-secret-key-change-in-production-min-32-chars"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: str = "7d"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_MS: int = 900000  # 15 minutes
    RATE_LIMIT_MAX_REQUESTS: int = 100

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def database_url(self) -> str:
        """Get properly formatted database URL"""
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            if url.startswith("file:"):
                return f"sqlite:///{url[5:]}"
            if url.startswith("mysql://"):
                return "mysql+pymysql://" + url[len("mysql://"):]
            return url
        if self.DB_HOST:
            return (
                f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        return "sqlite:///./accounts.db"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    def validate_security_settings(self):
        """Validate security settings and warn about insecure defaults"""
        default_secrets = [
            "your-super-secret-key-change-in-production-min-32-chars",
            "your-secret-key",
            "secret",
            "change-me",
        ]

        if self.JWT_SECRET in default_secrets:
            if self.is_production:
                raise ValueError(
                    "CRITICAL: Default JWT_SECRET detected in production! "
                    "Set the JWT_SECRET environment variable to a secure random value."
                )
            warnings.warn(
                "WARNING: Using default JWT_SECRET. "
                "Set JWT_SECRET environment variable for production.",
                UserWarning
            )

        if len(self.JWT_SECRET) < 32:
            if self.is_production:
                raise ValueError(
                    "CRITICAL: JWT_SECRET is too short for production! "
                    "Use at least 32 characters."
                )
            warnings.warn(
                "WARNING: JWT_SECRET should be at least 32 characters.",
                UserWarning
            )

        if self.is_production and self.DEBUG:
            raise ValueError(
                "CRITICAL: DEBUG mode is enabled in production! "
                "Set DEBUG=False for production environment."
            )

        return True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()

# Validate security settings on import (but don't crash in development)
try:
    settings.validate_security_settings()
except ValueError as e:
    if settings.is_production:
        raise
    warnings.warn(str(e), UserWarning)
