"""Custom exceptions for configuration management."""

from dirwise.errors import DirwiseError


class ConfigError(DirwiseError):
    """Raised when configuration data cannot be read, parsed, or validated."""

    code = "config_error"
