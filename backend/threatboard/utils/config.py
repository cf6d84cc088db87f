"""
Dashboard configuration, read from the environment and .env via Pydantic Settings.
"""
import json
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "Threat Intelligence Dashboard"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API settings
    api_prefix: str = "/api"

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Accept a JSON array or a comma-separated list of origins."""
        if not isinstance(v, str):
            return v
        raw = v.strip()
        if raw.startswith("["):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                raw = raw.strip("[]")
        return [part.strip().strip("\"'") for part in raw.split(",") if part.strip()]

    # Storage settings
    storage_backend: str = "json"  # json / document
    data_dir: str = "./data"
    database_url: str = "sqlite:///./threatboard.db"

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("json", "document"):
            raise ValueError(f"Unsupported storage backend: {v}")
        return v

    # Auth settings
    auth_enabled: bool = True
    secret_key: str = "change-this-secret-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60 * 24 * 7

    # Rate limiting
    rate_limit_enabled: bool = True
    auth_rate_limit: str = "20/minute"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
