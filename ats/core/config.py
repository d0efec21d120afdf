"""Application configuration management."""

from typing import Literal

from pydantic import AnyUrl, ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: AnyUrl
    database_echo: bool = False
    database_lock_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long a transaction waits for a row lock before failing",
    )

    # Notifications
    notification_backend: Literal["database", "queue"] = "database"
    redis_url: str = "redis://localhost:6379/0"
    notification_queue_name: str = "ats-notifications"
    notification_job_timeout: str = "1m"
    app_base_path: str = Field(
        default="",
        description="Prefix prepended to links stored in notifications",
    )

    # Analytics
    analytics_enabled: bool = True

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
