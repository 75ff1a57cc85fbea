"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid or contradict each other."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required environment variable is absent or blank."""
