"""
Service and CLI settings, loaded from FLATCSV_* environment variables.
"""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the HTTP service and the command line."""

    model_config = SettingsConfigDict(env_prefix="FLATCSV_", env_file=".env", extra="ignore")

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_DIR: Optional[str] = Field(default=None, description="Directory for DEBUG log files (None = console only)")
    MAX_UPLOAD_BYTES: int = Field(
        default=50 * 1024 * 1024,  # 50 MB
        description="Maximum upload size accepted by the export endpoints",
    )


def get_settings() -> Settings:
    return Settings()
