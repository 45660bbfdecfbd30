"""Application settings and configuration."""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="forbid",
    )

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./marketplace.db"
    database_echo: bool = False
    auto_create_schema: bool = True
    store_timeout_seconds: float = 5.0

    # Password hashing
    password_hash_rounds: int = 12

    # Sessions
    session_cookie_name: str = "marketplace_session"
    session_ttl_minutes: int = 60 * 24
    session_cookie_secure: bool = False

    # Rate Limiting
    global_rate_limit_requests: int = 100
    global_rate_limit_window_seconds: int = 15 * 60
    auth_rate_limit_requests: int = 10
    auth_rate_limit_window_seconds: int = 60 * 60
    trust_proxy_headers: bool = False
    trusted_proxy_hops: int = 1

    # API Configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    allowed_hosts: List[str] = ["localhost", "127.0.0.1", "0.0.0.0", "test"]

    # File Upload Configuration
    upload_dir: str = "uploads"
    max_file_size_mb: int = 50
    allowed_file_extensions: List[str] = [".mp3", ".wav", ".pdf"]

    # Admin bootstrap
    bootstrap_admin_username: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_environments = ["development", "staging", "production", "test"]
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("password_hash_rounds")
    @classmethod
    def validate_password_hash_rounds(cls, v: int) -> int:
        """bcrypt accepts cost factors between 4 and 31."""
        if not 4 <= v <= 31:
            raise ValueError("Password hash rounds must be between 4 and 31")
        return v

    @field_validator("trusted_proxy_hops")
    @classmethod
    def validate_trusted_proxy_hops(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Trusted proxy hops must be at least 1")
        return v

    @field_validator("allowed_file_extensions")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
