"""
PkgWatch Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Try current working directory
    load_dotenv()


class ResolverSettings(BaseSettings):
    """Package resolution settings."""

    model_config = SettingsConfigDict(env_prefix="RESOLVER_")

    allow_binary: bool = Field(
        default=True,
        description="Accept packages that only ship compiled extension modules",
    )
    include_stdlib: bool = Field(
        default=False,
        description="Resolve and watch standard library packages too",
    )


class WatcherSettings(BaseSettings):
    """Package watcher configuration settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    queue_size: int = Field(default=1, ge=1, description="Capacity of the public event/error queues")
    poll_interval_ms: int = Field(default=100, ge=10, le=5000)
    join_timeout_s: float = Field(default=5.0, ge=0.1)
    hidden_prefix: str = Field(default=".", min_length=1)

    @field_validator("hidden_prefix", mode="before")
    @classmethod
    def strip_hidden_prefix(cls, v: str) -> str:
        """Strip surrounding whitespace from the hidden directory prefix."""
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"
    file_path: Path | None = Field(default=None)


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="PkgWatch")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")

    # Sub-settings
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    """
    return Settings()
