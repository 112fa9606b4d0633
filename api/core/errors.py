"""
Error types shared across features, and the HTTP error shape clients see.

Internal failures are raised as the exceptions below. The handlers registered
by `install_error_handlers` translate them into a small closed set of codes:

- validation   (400/422)
- not_found    (404)
- conflict     (409)
- unavailable  (503)
- internal     (500)

Driver messages are logged, never returned.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ServiceError(RuntimeError):
    pass


class ConfigurationError(ServiceError):
    pass


class StoreConnectionError(ServiceError):
    """
    A store could not hand out a connection (unreachable, timed out, exhausted).
    """


class QueryError(ServiceError):
    pass


class MigrationError(ServiceError):
    pass


class RegistryProtocolError(ServiceError):
    pass


_STATUS_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "validation",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "not_found",
    status.HTTP_409_CONFLICT: "conflict",
    422: "validation",
    status.HTTP_503_SERVICE_UNAVAILABLE: "unavailable",
}


def error_code(status_code: int) -> str:
    return _STATUS_CODES.get(status_code, "internal")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": error_code(status_code), "message": message}},
    )


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed."
    if exc.status_code >= 500:
        message = "Internal server error."
    return error_response(exc.status_code, message)


async def _validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    message = "Invalid request."
    if fields:
        message = f"Invalid request: {', '.join(fields)}."
    return error_response(422, message)


async def _store_connection_handler(request: Request, exc: StoreConnectionError) -> JSONResponse:
    logger.error("store_unavailable path=%s error=%s", request.url.path, exc)
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Storage backend is unavailable.",
    )


async def _query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    logger.error("query_failed path=%s error=%s", request.url.path, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error.")


async def _unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error path=%s", request.url.path, exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error.")


def install_error_handlers(app: FastAPI) -> None:
    # Starlette's HTTPException also covers routing 404/405.
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_handler)
    app.add_exception_handler(StoreConnectionError, _store_connection_handler)
    app.add_exception_handler(QueryError, _query_error_handler)
    app.add_exception_handler(Exception, _unhandled_handler)
