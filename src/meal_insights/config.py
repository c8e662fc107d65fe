"""Application configuration."""

import os
from datetime import date

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    change_epsilon: float = 0.01
    all_time_start: date = date(1000, 1, 1)
    all_time_end: date = date(9999, 12, 31)
    max_sessions: int = 1000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
