#nodeconfig_engine\config.py

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Engine configuration from environment variables (NODECONFIG_*)."""

    model_config = SettingsConfigDict(
        env_prefix="NODECONFIG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Node registry
    registry_backend: Literal["memory", "sql"] = "memory"
    database_url: str = "sqlite:///nodeconfig.db"

    # SQLAlchemy
    echo_sql: bool = False

    # Logging
    log_level: str = "INFO"


settings = EngineSettings()
