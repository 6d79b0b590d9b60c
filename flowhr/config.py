"""Application configuration via environment variables."""

import json
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Backend REST service every proxy route forwards to
    NEXT_PUBLIC_API_URL: str = "http://localhost:5000/api"

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "info"
    CORS_ORIGINS: str = '["http://localhost:3000"]'

    # Rate limiting (slowapi syntax)
    RATE_LIMIT: str = "120/minute"

    @property
    def api_base_url(self) -> str:
        """Backend base URL without a trailing slash."""
        return self.NEXT_PUBLIC_API_URL.rstrip("/")

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS JSON string into a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except (json.JSONDecodeError, TypeError):
            return ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
