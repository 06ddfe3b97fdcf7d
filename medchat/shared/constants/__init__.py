"""
Shared Constants

Application-wide constants and configuration values.
"""
from .app_constants import (
    FileConstants,
    ChatConstants,
    SpecialtyConstants,
    RateLimitConstants,
    DatabaseConstants,
    LoggingConstants,
    EnvironmentConstants,
    AIConstants,
)

__all__ = [
    "FileConstants",
    "ChatConstants",
    "SpecialtyConstants",
    "RateLimitConstants",
    "DatabaseConstants",
    "LoggingConstants",
    "EnvironmentConstants",
    "AIConstants",
]
