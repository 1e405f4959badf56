"""
Configuration Management for SIGEG

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each concern (storage, API server, client, auth) has its own settings
class and environment prefix, so a partially configured environment
still lets the other parts start.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Repository root; the default data file lives under it, whatever the cwd
PROJECT_ROOT = Path(__file__).resolve().parents[2]


class StorageSettings(BaseSettings):
    """JSON data file configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SIGEG_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_file: Path = Field(
        default=PROJECT_ROOT / "data" / "initialData.json",
        description="Path to the JSON document holding both users' tasks"
    )
    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation used when rewriting the data file"
    )


class ApiSettings(BaseSettings):
    """REST backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SIGEG_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    host: str = Field(
        default="127.0.0.1",
        description="Interface the API server binds to"
    )
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="Port the API server listens on"
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Get allowed origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class ClientSettings(BaseSettings):
    """Front-end data access configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SIGEG_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["http", "local"] = Field(
        default="http",
        description="'http' talks to the REST API, 'local' reads the data file directly"
    )
    api_base_url: str = Field(
        default="http://localhost:3001/api",
        description="Base URL of the REST API"
    )
    # No timeout unless explicitly configured
    request_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-request timeout in seconds"
    )

    @field_validator('api_base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class AuthSettings(BaseSettings):
    """
    Login credentials.

    Only bcrypt hashes are configured here, never plaintext passwords.
    Generate one with `sigeg-hash-password`.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIGEG_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    poe_password_hash: str = Field(
        default="",
        description="bcrypt hash of poe's password"
    )
    poisson_password_hash: str = Field(
        default="",
        description="bcrypt hash of poisson's password"
    )

    @property
    def credential_table(self) -> dict[str, str]:
        """Username → hash, skipping users without a configured hash."""
        table = {
            "poe": self.poe_password_hash,
            "poisson": self.poisson_password_hash,
        }
        return {user: h for user, h in table.items() if h}


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Standard library log level for all loggers"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Loaded lazily so a broken section doesn't block the others

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def client(self) -> ClientSettings:
        return ClientSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {section: is_valid}, plus a "<section>_error"
    entry with the message for each section that failed.
    """
    results = {}

    settings = get_settings()

    for section in ("storage", "api", "client", "auth", "app"):
        try:
            loaded = getattr(settings, section)
            results[section] = True
        except Exception as e:
            results[section] = False
            results[f"{section}_error"] = str(e)
            continue

        if section == "auth" and not loaded.credential_table:
            results[section] = False
            results[f"{section}_error"] = "No password hashes configured"

    return results
