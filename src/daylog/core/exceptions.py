"""daylog exception hierarchy."""

from __future__ import annotations


class DaylogError(Exception):
    """Base exception for all daylog errors."""


class ConfigError(DaylogError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class UnknownChannelError(DaylogError):
    """Raised when a channel name is not one of the configured channels."""
