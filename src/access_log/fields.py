"""Structured log fields and the well-known request-state keys."""

from typing import Any, NamedTuple

DEFAULT_CUSTOM_FIELDS_KEY = "_customfields_"
DEFAULT_CUSTOM_LOGGER_KEY = "_customlogger_"

REQUEST_ID_HEADER = "X-Request-ID"


class Field(NamedTuple):
    """Single key/value pair attached to an access-log record.

    Handlers append these to ``request.state`` under the custom fields key
    (see ``access_log.context.add_fields``). They are emitted verbatim, in
    order, after the base fields.
    """

    key: str
    value: Any
