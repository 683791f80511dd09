"""Centralized error envelopes.

Every failure leaves the gateway as
    {"success": false, "error": {"code", "message", "path"}, "timestamp"}
so clients only need to check the status code.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from raahvia.errors import NotFoundError
from raahvia.schemas.errors import ErrorBody, ErrorEnvelope
from raahvia.utils.time import utc_now

logger = logging.getLogger("raahvia.api.errors")

_STATUS_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def error_response(status_code: int, code: str, message: str, path: str) -> JSONResponse:
    envelope = ErrorEnvelope(
        error=ErrorBody(code=code, message=message, path=path),
        timestamp=utc_now(),
    )
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json"))


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning(f"← 404 {request.method} {request.url.path}: {exc}")
    return error_response(404, "NOT_FOUND", str(exc), request.url.path)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    if exc.status_code == 404:
        message = f"Route {request.method} {request.url.path} not found"
    return error_response(exc.status_code, code, message, request.url.path)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    logger.warning(f"← 400 {request.method} {request.url.path}: {problems}")
    return error_response(400, "VALIDATION_ERROR", problems or "invalid request", request.url.path)


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"← 500 {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return error_response(500, "INTERNAL_ERROR", "Internal server error", request.url.path)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled)
