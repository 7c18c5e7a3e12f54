"""Request-scoped logger and field lookup.

Upstream middleware and handlers pass values to the access log through
``request.state`` (backed by ``scope["state"]``). Lookups here never raise:
a missing or malformed value is reported as ``None``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from access_log.fields import (
    DEFAULT_CUSTOM_FIELDS_KEY,
    DEFAULT_CUSTOM_LOGGER_KEY,
    Field,
)

if TYPE_CHECKING:
    from starlette.requests import Request
    from structlog.typing import BindableLogger

_BINDABLE_METHODS: tuple[str, ...] = ("bind", "unbind", "new")


def _is_bindable(value: object) -> bool:
    return all(callable(getattr(value, name, None)) for name in _BINDABLE_METHODS)


def normalize_logger(value: object) -> BindableLogger | None:
    """Return ``value`` as a structlog logger, or None if it is not one.

    Accepted forms:
        - a structlog bound logger (or lazy proxy), returned as-is;
        - a stdlib ``logging.Logger``, wrapped with ``structlog.wrap_logger``;
        - a stdlib ``logging.LoggerAdapter``, whose underlying logger is
          wrapped and whose ``extra`` mapping is bound as context.
    """
    if isinstance(value, logging.LoggerAdapter):
        wrapped = structlog.wrap_logger(value.logger)
        extra = dict(value.extra or {})
        return wrapped.bind(**extra) if extra else wrapped
    if isinstance(value, logging.Logger):
        return structlog.wrap_logger(value)
    if _is_bindable(value):
        return value  # type: ignore[return-value]
    return None


def get_logger_from_state(
    state: Mapping[str, Any], key: str = DEFAULT_CUSTOM_LOGGER_KEY
) -> BindableLogger | None:
    """Look up a per-request logger override stored under ``key``."""
    return normalize_logger(state.get(key))


def get_custom_fields(
    state: Mapping[str, Any], key: str = DEFAULT_CUSTOM_FIELDS_KEY
) -> list[Field] | None:
    """Look up extra access-log fields stored under ``key``.

    The stored value must be a list or tuple made only of ``Field`` items;
    anything else is treated as absent.
    """
    value = state.get(key)
    if not isinstance(value, (list, tuple)):
        return None
    if not all(isinstance(item, Field) for item in value):
        return None
    return list(value)


def set_logger(
    request: Request, logger: object, key: str = DEFAULT_CUSTOM_LOGGER_KEY
) -> None:
    """Store a logger override for the current request."""
    setattr(request.state, key, logger)


def add_fields(
    request: Request, *fields: Field, key: str = DEFAULT_CUSTOM_FIELDS_KEY
) -> None:
    """Append extra fields to the current request's access-log record.

    A missing or malformed value under ``key`` is replaced by a fresh list.
    """
    current = get_custom_fields(request.scope.setdefault("state", {}), key) or []
    setattr(request.state, key, [*current, *fields])
