"""Configuration module for floorsync."""

from floorsync.config.settings import Settings, get_settings, load_configured_merge_config

__all__ = ["Settings", "get_settings", "load_configured_merge_config"]
