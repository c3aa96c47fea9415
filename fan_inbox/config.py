"""
Application configuration using environment variables.
"""
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Fan Inbox API"
    debug: bool = False
    environment: str = "development"

    # Mock auth - replace with a real identity provider in production
    api_token: str = "mock_valid_token_12345"

    # Data
    seed_path: Optional[str] = None  # defaults to the packaged seed document
    cache_ttl_seconds: int = 300

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Rate limiting
    message_rate_limit: str = "30/minute"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
