"""
Infrastructure Configuration

Configuration management for the application.
"""
from .settings import (
    Settings,
    DatabaseSettings,
    RedisSettings,
    FileStorageSettings,
    AIServiceSettings,
    RateLimitSettings,
    MonitoringSettings,
    get_settings,
)
from .logging_config import configure_logging, JsonFormatter

__all__ = [
    "Settings",
    "DatabaseSettings",
    "RedisSettings",
    "FileStorageSettings",
    "AIServiceSettings",
    "RateLimitSettings",
    "MonitoringSettings",
    "get_settings",
    "configure_logging",
    "JsonFormatter",
]
