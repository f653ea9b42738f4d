"""Base exception for configuration loading."""


class ConfigurationError(Exception):
    """Base exception for configuration errors."""

    pass
