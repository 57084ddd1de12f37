"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Configuration error.

    Raised at setup when a required vote setting (voter type, vote table,
    voter foreign key column) is absent or cannot be resolved.
    """

    pass


class DependencyInjectionError(UtilError):
    """Dependency injection error."""

    pass
