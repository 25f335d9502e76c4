"""
Environment and configuration settings for floorsync.

Uses pydantic-settings for environment variable management with validation.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from floorsync.merge.config import MergeConfig, load_merge_config


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FLOORSYNC_",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    data_dir: str = Field(
        default="data",
        description="Directory for floor plans, versions and editors",
    )

    # Merge Configuration
    merge_config_path: Optional[str] = Field(
        default=None,
        description="Path to merge configuration YAML (packaged default if unset)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    # Telemetry
    telemetry_enabled: bool = Field(
        default=False,
        description="Export traces and metrics over OTLP",
    )
    otel_service_name: str = Field(
        default="floorsync",
        description="Service name reported to the collector",
    )
    otel_exporter_otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP gRPC collector endpoint",
    )

    # CLI Configuration
    default_output_format: str = Field(
        default="human",
        description="Default output format (human/json)",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def load_configured_merge_config(settings: Optional[Settings] = None) -> MergeConfig:
    """
    Load the merge configuration named by the settings.

    Args:
        settings: Settings to use. Defaults to the cached settings.

    Returns:
        MergeConfig instance
    """
    settings = settings or get_settings()
    return load_merge_config(settings.merge_config_path)
