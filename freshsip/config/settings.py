"""Application settings using Pydantic."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    This uses Pydantic to:
    1. Load values from .env file
    2. Validate data types
    3. Provide defaults
    """

    # API Settings
    PROJECT_NAME: str = "FreshSip Delivery"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Environment & Logging
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # text | json
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = False

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "freshsip"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # Auth - tokens are issued by the login service, we only verify them
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    AUTH_COOKIE_NAME: str = "authToken"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]

    # Business time zone used for "today" windows and default timestamps
    TIMEZONE: str = "Asia/Kolkata"

    # Delivery
    NOT_DELIVERED_REASON: str = "Customer not available"

    # Load environment variables from .env; extra fields are ignored.
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_file_encoding='utf-8',
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Create cached settings instance.
    """
    return Settings()


# Create a single instance for easy importing
settings = get_settings()
