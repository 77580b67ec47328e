"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        BOOKMARK_AUTHZ_DB_HOST: Database host (default: localhost)
        BOOKMARK_AUTHZ_DB_PORT: Database port (default: 5432)
        BOOKMARK_AUTHZ_DB_DATABASE: Database name (default: bookmarks)
        BOOKMARK_AUTHZ_DB_USERNAME: Database user (default: bookmarks)
        BOOKMARK_AUTHZ_DB_PASSWORD: Database password (required in production)
        BOOKMARK_AUTHZ_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        BOOKMARK_AUTHZ_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 20)
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKMARK_AUTHZ_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="bookmarks", description="Database name")
    username: str = Field(default="bookmarks", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=20,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AuthzSettings(BaseSettings):
    """Authorization and request-context settings.

    Environment variables:
        BOOKMARK_AUTHZ_PLATFORM_ADMIN_ROLES: JSON list of roles allowed to act
            without a tenant (default: ["platform:admin", "super:admin"])
        BOOKMARK_AUTHZ_DEFAULT_PAGE_SIZE: Page size when none is requested (default: 20)
        BOOKMARK_AUTHZ_MAX_PAGE_SIZE: Upper bound on page size (default: 100)
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKMARK_AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    platform_admin_roles: list[str] = Field(
        default=["platform:admin", "super:admin"],
        description="Roles exempt from the tenant requirement",
    )
    default_page_size: int = Field(
        default=20,
        description="Default page size for permission listings",
        ge=1,
        le=1000,
    )
    max_page_size: int = Field(
        default=100,
        description="Maximum page size for permission listings",
        ge=1,
        le=1000,
    )

    @model_validator(mode="after")
    def validate_page_sizes(self) -> "AuthzSettings":
        """Validate max page size >= default page size."""
        if self.max_page_size < self.default_page_size:
            raise ValueError(
                f"max_page_size ({self.max_page_size}) must be >= "
                f"default_page_size ({self.default_page_size})"
            )
        return self


class Settings(BaseSettings):
    """Application-wide settings: name, debug mode and logging.

    Environment variables:
        BOOKMARK_AUTHZ_APP_NAME: Application name
        BOOKMARK_AUTHZ_DEBUG: Debug mode (default: false)
        BOOKMARK_AUTHZ_LOG_LEVEL: Minimum log level (default: info)
        BOOKMARK_AUTHZ_LOG_FORMAT: auto, console or json (default: auto)
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKMARK_AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(
        default="Bookmark Authorization API", description="Application name"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="info", description="Minimum log level")
    log_format: Literal["auto", "console", "json"] = Field(
        default="auto", description="Log output format"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_authz_settings() -> AuthzSettings:
    """Get cached authorization settings."""
    return AuthzSettings()
