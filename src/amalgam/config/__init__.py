"""
Configuration module for Amalgam.

Uses pydantic-settings for environment variable loading.
"""

from amalgam.config.settings import Settings, get_settings, reset_settings

__all__ = ["Settings", "get_settings", "reset_settings"]
