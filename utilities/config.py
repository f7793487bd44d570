"""
Configuration management using environment variables.
Handles repository, polling and logging settings with validation and defaults.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WatchSettings(BaseSettings):
    """
    Settings for the dependency watcher.
    Uses pydantic BaseSettings for environment variable management.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env
    )

    # Repository Configuration
    repository_name: str = Field(default="Maven Central")
    repository_url: str = Field(default="https://repo1.maven.org/maven2/")
    request_timeout: int = Field(default=30)

    # Polling Configuration
    poll_interval_seconds: float = Field(default=60.0)

    # Notification Configuration
    webhook_url: Optional[str] = Field(default=None)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")
    log_file: Optional[str] = Field(default=None)

    # Development/Testing
    debug: bool = Field(default=False)

    @field_validator("repository_url")
    @classmethod
    def validate_repository_url(cls, v):
        """Ensure the repository URL is http(s) and ends with a slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("repository_url must be an http or https URL")
        return v if v.endswith("/") else v + "/"

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v):
        """Ensure timeout is reasonable."""
        if v < 1 or v > 300:
            raise ValueError("request_timeout must be between 1 and 300 seconds")
        return v

    @field_validator("poll_interval_seconds")
    @classmethod
    def validate_poll_interval(cls, v):
        if v <= 0:
            raise ValueError("poll_interval_seconds must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None

    def get_user_agent(self) -> str:
        """Get user agent string for requests."""
        return "dependency-watch/1.0"

    def get_headers(self) -> dict:
        """Get default headers for HTTP requests."""
        return {
            "User-Agent": self.get_user_agent(),
            "Accept": "application/xml,text/xml;q=0.9,*/*;q=0.8",
        }


# Global configuration instance
config = WatchSettings()
