"""HTTP middleware and exception handler wiring for the form API."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from form_bridge.api.contracts import ApiErrorResponse
from form_bridge.api.errors import ApiErrorCode, to_error_payload
from form_bridge.core.config import AppConfig
from form_bridge.core.logging import set_correlation_id

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def _error_response(status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiErrorResponse(error_code=error_code, message=message).model_dump(),
    )


def _request_extra(request: Request, status_code: int) -> dict[str, Any]:
    return {
        "path": request.url.path,
        "method": request.method,
        "status_code": status_code,
    }


def register_http_middleware(app: FastAPI, *, config: AppConfig, logger: Any) -> None:
    """Attach request size guard and correlation/logging middleware."""

    @app.middleware("http")
    async def request_size_limit_middleware(request: Request, call_next):
        content_length = request.headers.get("content-length")
        try:
            parsed_length = int(content_length) if content_length else 0
        except ValueError:
            parsed_length = 0
        if parsed_length > config.security.request_max_bytes:
            return _error_response(
                413,
                ApiErrorCode.REQUEST_TOO_LARGE,
                "Request size exceeds configured limit "
                f"({config.security.request_max_bytes} bytes).",
            )
        return await call_next(request)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        correlation_id = (
            request.headers.get("x-request-id")
            or request.headers.get("x-correlation-id")
            or uuid.uuid4().hex
        )
        set_correlation_id(correlation_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = correlation_id
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        logger.info(
            "request_completed",
            extra=_request_extra(request, response.status_code),
        )
        return response


def register_exception_handlers(app: FastAPI, *, logger: Any) -> None:
    """Render every failure as an ``ApiErrorResponse`` envelope."""

    @app.exception_handler(HTTPException)
    async def handle_http_exception(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        payload = to_error_payload(exc.detail, exc.status_code)
        logger.warning(
            "http_exception",
            extra={
                **_request_extra(request, exc.status_code),
                "error_code": payload["error_code"],
            },
        )
        return _error_response(exc.status_code, payload["error_code"], payload["message"])

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning("validation_exception", extra=_request_extra(request, 422))
        return _error_response(422, ApiErrorCode.VALIDATION_ERROR, str(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception("unexpected_exception", extra=_request_extra(request, 500))
        return _error_response(
            500,
            ApiErrorCode.INTERNAL_SERVER_ERROR,
            str(exc) or "Internal server error",
        )
