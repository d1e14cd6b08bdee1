"""Application configuration using Pydantic Settings."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # MongoDB (local cache)
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "worklog"

    # Pantry (remote key-value replica)
    pantry_base_url: str = "https://getpantry.cloud/apiv1/pantry"
    pantry_id: Optional[str] = None
    remote_timeout_seconds: float = 10.0
    poll_interval_seconds: float = 10.0

    # Payroll
    default_hourly_rate: float = 220
    billing_unit_minutes: int = 30

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()
