# backend/config.py
"""
Settings for the LANZA BULLS backend.

Values come from environment variables (or a .env file next to the process).
The settings object is built once and handed to the routes through FastAPI
dependencies, so tests can swap in fake credentials.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # provider credentials
    alpha_vantage_api_key: Optional[str] = None
    finnhub_api_key: Optional[str] = None

    # provider endpoints
    alpha_vantage_base: str = "https://www.alphavantage.co/query"
    finnhub_base: str = "https://finnhub.io/api/v1"

    # server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    def require_alpha_vantage_key(self) -> str:
        if not self.alpha_vantage_api_key:
            raise ConfigurationError("Alpha Vantage API Key not configured")
        return self.alpha_vantage_api_key

    def require_all_keys(self):
        """Both credentials, or ConfigurationError if either is missing."""
        if not self.alpha_vantage_api_key or not self.finnhub_api_key:
            raise ConfigurationError("Server configuration error: API keys missing")
        return self.alpha_vantage_api_key, self.finnhub_api_key


@lru_cache
def get_settings() -> Settings:
    return Settings()
