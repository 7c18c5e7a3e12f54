"""Access-log middleware: one structured record per HTTP request."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

import structlog
from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from structlog.typing import BindableLogger

from access_log.config import Settings
from access_log.context import get_custom_fields, get_logger_from_state, normalize_logger
from access_log.duration import format_duration
from access_log.errors import ConfigurationError
from access_log.fields import (
    DEFAULT_CUSTOM_FIELDS_KEY,
    DEFAULT_CUSTOM_LOGGER_KEY,
    REQUEST_ID_HEADER,
    Field,
)
from access_log.reporting import ErrorReporter, report_error

IPExtractor = Callable[[Request], str]


def status_text(status_code: int) -> str:
    """Standard reason phrase for ``status_code``, empty if unknown."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def _strip_brackets(address: str) -> str:
    return address.removeprefix("[").removesuffix("]")


def real_ip(request: Request) -> str:
    """Best-effort client address, honoring proxy headers.

    Order: first ``X-Forwarded-For`` entry, then ``X-Real-IP``, then
    the socket peer.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        index = forwarded.find(",")
        if index > 0:
            return _strip_brackets(forwarded[:index].strip())
        return forwarded
    forwarded = request.headers.get("x-real-ip", "")
    if forwarded:
        return _strip_brackets(forwarded)
    return request.client.host if request.client else ""


def _request_uri(scope: Scope) -> str:
    raw_path: bytes | None = scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = scope.get("path", "")
    query: bytes = scope.get("query_string", b"")
    return f"{path}?{query.decode('latin-1')}" if query else path


@dataclass(frozen=True)
class Options:
    """Middleware configuration, shared read-only by all requests."""

    logger: BindableLogger
    custom_fields_key: str = DEFAULT_CUSTOM_FIELDS_KEY
    custom_logger_key: str = DEFAULT_CUSTOM_LOGGER_KEY


class RequestLoggingMiddleware:
    """Log every HTTP request with client, latency, status and size.

    Severity follows the final status code: ``error`` for 5xx, ``warning``
    for 4xx (both carry the handler exception, or None, as ``error``),
    ``info`` otherwise. Exceptions raised by the wrapped app are handed to
    the error reporter, which renders the error response; they are never
    re-raised. If the reporter itself fails, the record is still written
    and the reporter's exception is raised afterwards.

    Per-request overrides are read from ``request.state``:
        - a logger under ``custom_logger_key`` replaces ``logger`` for that
          request only;
        - a list of ``Field`` under ``custom_fields_key`` is appended to the
          record.

    Usage::

        app.add_middleware(RequestLoggingMiddleware, logger=structlog.get_logger("access"))
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        logger: object,
        custom_fields_key: str = "",
        custom_logger_key: str = "",
        error_reporter: ErrorReporter | None = None,
        ip_extractor: IPExtractor | None = None,
    ) -> None:
        resolved = normalize_logger(logger)
        if resolved is None:
            raise ConfigurationError(
                f"logger must be a structlog or stdlib logger, got {type(logger).__name__}"
            )
        self.app = app
        self.options = Options(
            logger=resolved,
            custom_fields_key=custom_fields_key or DEFAULT_CUSTOM_FIELDS_KEY,
            custom_logger_key=custom_logger_key or DEFAULT_CUSTOM_LOGGER_KEY,
        )
        self._report_error: ErrorReporter = error_reporter or report_error
        self._ip_extractor: IPExtractor = ip_extractor or real_ip

    @staticmethod
    def options_from_settings(settings: Settings) -> dict[str, Any]:
        """Keyword arguments for ``app.add_middleware`` built from settings."""
        return {
            "logger": structlog.get_logger(settings.access_log_logger_name),
            "custom_fields_key": settings.access_log_custom_fields_key,
            "custom_logger_key": settings.access_log_custom_logger_key,
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        # Kept local: the shared options are never rebound per request.
        logger = (
            get_logger_from_state(state, self.options.custom_logger_key)
            or self.options.logger
        )

        status_code = HTTPStatus.OK.value
        size = 0
        response_headers = Headers()
        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code, size, response_headers, response_started

            if message["type"] == "http.response.start":
                response_started = True
                status_code = int(message["status"])
                response_headers = Headers(raw=message.get("headers", []))
            elif message["type"] == "http.response.body":
                size += len(message.get("body", b""))

            await send(message)

        request = Request(scope, receive)
        error: Exception | None = None
        reporter_error: Exception | None = None

        start = time.perf_counter_ns()
        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            error = exc
            try:
                response = await self._report_error(request, exc)
                if not response_started:
                    await response(scope, receive, send_wrapper)
            except Exception as report_exc:
                # Raised again once the record is written; the outer
                # server error middleware renders the 500.
                reporter_error = report_exc
                if not response_started:
                    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
        latency = format_duration(time.perf_counter_ns() - start)

        fields = [
            Field("remote_ip", self._ip_extractor(request)),
            Field("latency", latency),
            Field("host", request.headers.get("host", "")),
            Field("request", f"{scope.get('method', '')} {_request_uri(scope)}"),
            Field("status", status_code),
            Field("size", size),
            Field("user_agent", request.headers.get("user-agent", "")),
        ]

        custom_fields = get_custom_fields(state, self.options.custom_fields_key)
        if custom_fields:
            fields.extend(custom_fields)

        # request_id is only emitted when it comes from the response header.
        request_id = request.headers.get(REQUEST_ID_HEADER, "")
        if not request_id:
            request_id = response_headers.get(REQUEST_ID_HEADER, "")
            fields.append(Field("request_id", request_id))

        self._emit(logger, status_code, error, fields)

        if reporter_error is not None:
            raise reporter_error

    @staticmethod
    def _emit(
        logger: Any,
        status_code: int,
        error: Exception | None,
        fields: list[Field],
    ) -> None:
        # Fields are bound rather than passed as keywords so names such as
        # ``event`` cannot clash with the call arguments. The handler error
        # is bound last and wins over an extra field of the same name.
        values = dict(fields)
        text = status_text(status_code)
        if status_code >= 500:
            logger.bind(**values).bind(error=error).error(f"Server: {text}")
        elif status_code >= 400:
            logger.bind(**values).bind(error=error).warning(f"Client: {text}")
        elif status_code >= 300:
            logger.bind(**values).info(f"Redirection: {text}")
        else:
            logger.bind(**values).info(f"Success: {text}")
