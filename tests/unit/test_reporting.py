"""Tests for the default error reporter."""

from typing import Any

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from access_log.reporting import report_error


def _request(app: Any = None) -> Request:
    scope: dict[str, Any] = {"type": "http", "method": "GET", "path": "/", "headers": []}
    if app is not None:
        scope["app"] = app
    return Request(scope)


class TestDefaults:
    """Responses produced without registered handlers."""

    async def test_generic_exception_is_500(self) -> None:
        response = await report_error(_request(), RuntimeError("boom"))
        assert response.status_code == 500
        assert response.body == b"Internal Server Error"

    async def test_http_exception_keeps_status_and_detail(self) -> None:
        exc = HTTPException(status_code=409, detail="already exists")
        response = await report_error(_request(), exc)
        assert response.status_code == 409
        assert response.body == b"already exists"

    async def test_http_exception_headers(self) -> None:
        exc = HTTPException(status_code=401, headers={"WWW-Authenticate": "Bearer"})
        response = await report_error(_request(), exc)
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_bodyless_status(self) -> None:
        response = await report_error(_request(), HTTPException(status_code=304))
        assert response.status_code == 304
        assert response.body == b""

    async def test_app_without_handlers(self) -> None:
        response = await report_error(_request(app=object()), KeyError("x"))
        assert response.status_code == 500


class TestRegisteredHandlers:
    """Handlers registered on the application take precedence."""

    async def test_status_code_handler_for_http_exception(self) -> None:
        async def not_found(request: Request, exc: Exception) -> Response:
            return PlainTextResponse("custom 404", status_code=404)

        app = Starlette(exception_handlers={404: not_found})
        response = await report_error(_request(app), HTTPException(status_code=404))
        assert response.body == b"custom 404"

    async def test_handler_found_through_mro(self) -> None:
        async def lookup_failed(request: Request, exc: Exception) -> Response:
            return PlainTextResponse("lookup", status_code=422)

        app = Starlette(exception_handlers={LookupError: lookup_failed})
        response = await report_error(_request(app), KeyError("missing"))
        assert response.status_code == 422

    async def test_500_handler_for_generic_exception(self) -> None:
        async def server_error(request: Request, exc: Exception) -> Response:
            return PlainTextResponse("oops", status_code=500)

        app = Starlette(exception_handlers={500: server_error})
        response = await report_error(_request(app), ValueError("bad"))
        assert response.body == b"oops"

    async def test_500_handler_not_used_for_http_exception(self) -> None:
        async def server_error(request: Request, exc: Exception) -> Response:
            return PlainTextResponse("oops", status_code=500)

        app = Starlette(exception_handlers={500: server_error})
        response = await report_error(_request(app), HTTPException(status_code=400))
        assert response.status_code == 400

    async def test_sync_handler(self) -> None:
        def teapot(request: Request, exc: Exception) -> Response:
            return PlainTextResponse("short and stout", status_code=418)

        app = Starlette(exception_handlers={ValueError: teapot})
        response = await report_error(_request(app), ValueError("tea"))
        assert response.status_code == 418

    async def test_handler_receives_exception(self) -> None:
        seen: list[Exception] = []

        async def handler(request: Request, exc: Exception) -> Response:
            seen.append(exc)
            return PlainTextResponse("seen", status_code=500)

        exc = RuntimeError("tracked")
        app = Starlette(exception_handlers={RuntimeError: handler})
        await report_error(_request(app), exc)
        assert seen == [exc]
