"""Structured access logging for Starlette and FastAPI applications.

Quick start::

    import structlog
    from fastapi import FastAPI
    from access_log import RequestLoggingMiddleware

    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware, logger=structlog.get_logger("access"))
"""

from access_log.context import add_fields, get_logger_from_state, set_logger
from access_log.errors import ConfigurationError
from access_log.fields import (
    DEFAULT_CUSTOM_FIELDS_KEY,
    DEFAULT_CUSTOM_LOGGER_KEY,
    Field,
)
from access_log.middleware import Options, RequestLoggingMiddleware

__all__ = [
    "DEFAULT_CUSTOM_FIELDS_KEY",
    "DEFAULT_CUSTOM_LOGGER_KEY",
    "ConfigurationError",
    "Field",
    "Options",
    "RequestLoggingMiddleware",
    "add_fields",
    "get_logger_from_state",
    "set_logger",
]
