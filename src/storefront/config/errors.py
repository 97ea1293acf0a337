"""Configuration errors; fatal at startup and at the point of use."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid (e.g. a zero fee denominator)."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""
