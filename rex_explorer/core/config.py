"""
Configuration management using Pydantic Settings.
Loads settings from environment variables and .env files.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlatformSettings(BaseSettings):
    """Downstream metadata platform settings."""

    model_config = SettingsConfigDict(env_prefix="PLATFORM_")

    url_root: str = Field(
        default="https://localhost:9443",
        description="URL root of the metadata platform hosting the repository servers",
    )
    server_name: str = Field(default="cocoMDS1", description="Default repository server name")
    user_id: str = Field(default="garygeeke", description="User id passed to repository services")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    max_retries: int = Field(default=3, description="Max retries for idempotent requests")
    verify_tls: bool = Field(default=False, description="Verify the platform TLS certificate")


class ViewServiceSettings(BaseSettings):
    """Settings for the view-service answering traversal queries."""

    model_config = SettingsConfigDict(env_prefix="VIEW_")

    url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the view-service (this application by default)",
    )
    pre_traversal_path: str = Field(default="/api/instances/rex-pre-traversal")
    traversal_path: str = Field(default="/api/instances/rex-traversal")
    timeout: int = Field(default=30, description="Request timeout in seconds")


class TraversalSettings(BaseSettings):
    """Traversal behaviour."""

    model_config = SettingsConfigDict(env_prefix="TRAVERSAL_")

    max_depth: int = Field(default=5, description="Largest depth accepted for a traversal")


class SecuritySettings(BaseSettings):
    """Security configuration."""

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8091"],
        description="CORS allowed origins",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="rex-explorer", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=True, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Sub-settings
    platform: PlatformSettings = Field(default_factory=PlatformSettings)
    view: ViewServiceSettings = Field(default_factory=ViewServiceSettings)
    traversal: TraversalSettings = Field(default_factory=TraversalSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production"}
        if v.lower() not in allowed:
            raise ValueError(f"app_env must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


settings = get_settings()
