"""Configuration for neo-identity: logging, settings and configuration sources."""

from .logging_config import (
    LoggingConfig,
    LogLevel,
    LogVerbosity,
    LogFormat,
    setup_logging,
    get_logger,
)
from .settings import IdentitySettings, get_identity_settings
from .source import ConfigurationSection

__all__ = [
    "LoggingConfig",
    "LogLevel",
    "LogVerbosity",
    "LogFormat",
    "setup_logging",
    "get_logger",
    "IdentitySettings",
    "get_identity_settings",
    "ConfigurationSection",
]
