"""Exceptions raised by the access-log middleware."""


class ConfigurationError(ValueError):
    """Raised when the middleware is constructed with invalid options."""
