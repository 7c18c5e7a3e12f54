"""Structured logging configuration for access records.

Access records and application events share one structlog chain routed
through the stdlib root logger: JSON lines in production, colored console
otherwise. Call configure_logging() once at startup (``create_app`` does it
in the lifespan).
"""

import logging
import sys

import structlog

SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"api_key", "authorization", "cookie", "password", "secret", "token"}
)


def _redact_sensitive_keys(
    logger: logging.Logger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Redact values of sensitive keys, e.g. extras copied from headers."""
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = "***REDACTED***"
    return event_dict


def _renderer(environment: str) -> structlog.types.Processor:
    if environment == "production":
        # Access records carry exceptions in ``error``; render them as text.
        return structlog.processors.JSONRenderer(default=str)
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(
    environment: str = "development",
    log_level: str = "INFO",
) -> None:
    """Configure the structlog chain and the stdlib root logger.

    Args:
        environment: 'production' for JSON output, anything else
            for colored console output.
        log_level: Python log level name (DEBUG, INFO, WARNING, etc.).
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_sensitive_keys,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(environment),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # The access-log middleware replaces the server's own access log.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
