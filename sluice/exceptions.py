"""Shared exception types for sluice."""


class SluiceError(Exception):
    """Base exception for all sluice errors."""


class ConfigError(SluiceError):
    """Configuration is invalid or missing."""


class ValidatorConfigError(ConfigError):
    """A validator exposes none of the recognised parse interfaces."""
