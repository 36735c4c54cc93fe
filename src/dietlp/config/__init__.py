"""Configuration management."""

from dietlp.config.settings import (
    OptimizationConfig,
    Settings,
    get_settings,
    reload_settings,
)

__all__ = ["OptimizationConfig", "Settings", "get_settings", "reload_settings"]
