"""
Bio Storefront
Centralized Configuration Management

Pydantic settings with environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational store configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="bio_storefront", description="Database name")
    user: str = Field(default="storefront", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, alias="DATABASE_URL", description="Async database URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL - uses DATABASE_URL if set, otherwise asyncpg from host/port"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class SecuritySettings(BaseSettings):
    """Identity and CORS configuration"""

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    auth_header: str = Field(
        default="X-User-Id",
        description="Header carrying the identity provider's opaque user id",
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class StorefrontSettings(BaseSettings):
    """Page composition and rollup limits"""

    model_config = SettingsConfigDict(env_prefix="STOREFRONT_")

    max_pages_per_user: int = Field(default=20, description="Pages a single user may own")
    top_components_limit: int = Field(default=10, description="Entries in the top components ranking")
    top_products_limit: int = Field(default=5, description="Entries in the top products ranking")
    legacy_product_id_offset: int = Field(default=1000, description="First synthetic id for legacy products")
    legacy_video_id: int = Field(default=999, description="Synthetic id for the legacy video")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="bio-storefront", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    storefront: StorefrontSettings = Field(default_factory=StorefrontSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
