"""Centralized error reporting for exceptions escaping the wrapped app.

Mirrors the lookup Starlette's exception middlewares perform, so handlers
registered with ``app.add_exception_handler`` (or FastAPI's
``@app.exception_handler``) still shape the error response when the access
log middleware sits outside them.
"""

import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

ErrorReporter = Callable[[Request, Exception], Awaitable[Response]]

_BODYLESS_STATUSES: frozenset[int] = frozenset({204, 304})


def _exception_handlers(request: Request) -> Mapping[Any, Callable[..., Any]]:
    app = request.scope.get("app")
    handlers = getattr(app, "exception_handlers", None)
    return handlers if isinstance(handlers, Mapping) else {}


def _lookup_handler(
    handlers: Mapping[Any, Callable[..., Any]], exc: Exception
) -> Callable[..., Any] | None:
    if isinstance(exc, HTTPException) and exc.status_code in handlers:
        return handlers[exc.status_code]
    for cls in type(exc).__mro__:
        if cls in handlers:
            return handlers[cls]
    if not isinstance(exc, HTTPException):
        return handlers.get(500)
    return None


def _default_response(exc: Exception) -> Response:
    if isinstance(exc, HTTPException):
        if exc.status_code in _BODYLESS_STATUSES:
            return Response(status_code=exc.status_code, headers=exc.headers)
        return PlainTextResponse(
            exc.detail, status_code=exc.status_code, headers=exc.headers
        )
    return PlainTextResponse("Internal Server Error", status_code=500)


async def report_error(request: Request, exc: Exception) -> Response:
    """Turn an exception raised by the wrapped app into an error response.

    Args:
        request: The request being served.
        exc: Exception raised by the downstream handler.

    Returns:
        Response produced by a registered exception handler, or a plain
        text default (``exc.detail`` for HTTP errors, 500 otherwise).
    """
    handler = _lookup_handler(_exception_handlers(request), exc)
    if handler is None:
        return _default_response(exc)

    response = handler(request, exc)
    if inspect.isawaitable(response):
        response = await response
    return response
