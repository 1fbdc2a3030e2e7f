"""
Configuration management for the Smarthome SDK command line.
"""

import os

# Load environment variables from .env file with SMARTHOME_ENV_FILE support
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .auth import (
    AuthMode,
    AuthStrategy,
    NoAuth,
    QueryPassword,
    QueryToken,
    SessionPassword,
    SessionToken,
)

env_file = os.getenv("SMARTHOME_ENV_FILE", ".env")
env_path = Path(env_file)

# Load the specified environment file (silently, since env vars may come from other sources)
if env_path.exists():
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # Smarthome connection
    smarthome_url: str = Field("http://localhost:8082", alias="SMARTHOME_URL")
    auth_mode: AuthMode = Field(AuthMode.NONE, alias="SMARTHOME_AUTH_MODE")
    username: str | None = Field(None, alias="SMARTHOME_USERNAME")
    password: str | None = Field(None, alias="SMARTHOME_PASSWORD", repr=False)
    token: str | None = Field(None, alias="SMARTHOME_TOKEN", repr=False)

    timeout: int = Field(30, alias="SMARTHOME_TIMEOUT")

    # Development/Debug configuration
    log_level: str = Field("WARNING", alias="LOG_LEVEL")

    @field_validator("smarthome_url")
    @classmethod
    def validate_smarthome_url(cls, v: str) -> str:
        """Ensure URL is properly formatted."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Smarthome URL must start with http:// or https://")
        return v.rstrip("/")  # Remove trailing slash

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Timeout must be a positive number of seconds")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    def auth_strategy(self) -> AuthStrategy:
        """
        Build the authentication strategy selected by SMARTHOME_AUTH_MODE.

        Raises:
            ValueError: A credential required by the mode is missing
        """
        match self.auth_mode:
            case AuthMode.NONE:
                return NoAuth()
            case AuthMode.QUERY_PASSWORD | AuthMode.SESSION_PASSWORD:
                if not self.username or not self.password:
                    raise ValueError(
                        f"Auth mode '{self.auth_mode}' requires SMARTHOME_USERNAME "
                        "and SMARTHOME_PASSWORD"
                    )
                if self.auth_mode == AuthMode.QUERY_PASSWORD:
                    return QueryPassword(self.username, self.password)
                return SessionPassword(self.username, self.password)
            case AuthMode.QUERY_TOKEN | AuthMode.SESSION_TOKEN:
                if not self.token:
                    raise ValueError(
                        f"Auth mode '{self.auth_mode}' requires SMARTHOME_TOKEN"
                    )
                if self.auth_mode == AuthMode.QUERY_TOKEN:
                    return QueryToken(self.token)
                return SessionToken(self.token)
        raise ValueError(f"Unknown auth mode: {self.auth_mode}")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="allow"
    )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
_settings: Settings | None = None


def get_global_settings() -> Settings:
    """Get global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings
