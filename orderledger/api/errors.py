"""JSON envelope for every response, success or failure.

All responses carry processing_time_ms, measured from the moment the
request entered the app (see install_error_handlers' timing middleware).
"""
from __future__ import annotations

import logging
import time
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from orderledger.api.schemas.ledger import LedgerResponse
from orderledger.errors import LedgerError

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {401: "UNAUTHORIZED", 404: "NOT_FOUND", 405: "INVALID_INPUT"}


def elapsed_ms(request: Request) -> int:
    started = getattr(request.state, "started", None)
    if started is None:
        return 0
    return int((time.monotonic() - started) * 1000)


def ok(request: Request, message: str, data: Optional[Any] = None) -> LedgerResponse:
    return LedgerResponse(success=True, message=message, data=data, processing_time_ms=elapsed_ms(request))


def _error_response(request: Request, status_code: int, code: str, message: str, data: Any = None) -> JSONResponse:
    body = LedgerResponse(
        success=False,
        message=message,
        error_code=code,
        data=data,
        processing_time_ms=elapsed_ms(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def install_error_handlers(app: FastAPI) -> None:
    @app.middleware("http")
    async def stamp_start(request: Request, call_next):
        request.state.started = time.monotonic()
        return await call_next(request)

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        logger.warning(
            "api.ledger_error",
            extra={"error": exc.code, "reason": exc.message, "elapsed_ms": elapsed_ms(request)},
        )
        return _error_response(request, exc.status_code, exc.code, exc.message, exc.data)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _HTTP_ERROR_CODES.get(exc.status_code, "INTERNAL_ERROR" if exc.status_code >= 500 else "INVALID_INPUT")
        return _error_response(request, exc.status_code, code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {loc} {first.get('msg', '')}".strip()
        return _error_response(request, 400, "INVALID_INPUT", message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api.unhandled_error", extra={"elapsed_ms": elapsed_ms(request)})
        return _error_response(request, 500, "INTERNAL_ERROR", "Internal server error.")
