"""
Core middleware and exception handler registration for the FastAPI application.

Request tracking, timing, error logging, and the translation of
application exceptions into JSON error bodies.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from hostel_allocation.core import logging as log_context
from hostel_allocation.core.exceptions import BaseAppException, ErrorCode, RateLimitExceeded
from hostel_allocation.core.logging import get_logger

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Adds a unique request ID to each incoming request.

    The ID is stored in ``request.state.request_id``, bound to the logging
    context and echoed back in the ``X-Request-ID`` header.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id

        request_token = log_context.request_id.set(request_id)
        actor_token = log_context.actor_id.set(request.headers.get("X-Actor-Id"))
        try:
            response = await call_next(request)
        finally:
            log_context.request_id.reset(request_token)
            log_context.actor_id.reset(actor_token)

        response.headers[self.header_name] = request_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Adds X-Process-Time and logs request completion."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        logger.info(
            "Request completed",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "method": request.method,
                "url": str(request.url.path),
                "status_code": response.status_code,
                "process_time": f"{process_time:.4f}s",
                "client_host": request.client.host if request.client else None,
            }
        )
        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Logs error responses and unhandled exceptions."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request processing failed: {str(exc)}",
                extra={
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "method": request.method,
                    "url": str(request.url.path),
                    "error_type": type(exc).__name__,
                },
                exc_info=True
            )
            raise

        if response.status_code >= 400:
            logger.warning(
                f"Request returned error status {response.status_code}",
                extra={
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "method": request.method,
                    "url": str(request.url.path),
                    "status_code": response.status_code,
                }
            )
        return response


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitExceeded):
        headers = {"Retry-After": str(exc.details.get("retry_after", 0))}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "message": "Request validation failed",
                "code": ErrorCode.VALIDATION_ERROR.value,
                "details": {"errors": jsonable_encoder(exc.errors())},
                "type": "ValidationError",
            }
        },
    )


def register_middlewares(app: FastAPI) -> None:
    """
    Register core middlewares and exception handlers.

    Middlewares run in reverse order of registration: the request ID is
    assigned outermost, then timing, with error logging innermost.
    """
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    logger.info("Core middlewares registered", extra={"count": 3})


def get_request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


__all__ = [
    "RequestIDMiddleware",
    "TimingMiddleware",
    "ErrorLoggingMiddleware",
    "app_exception_handler",
    "register_middlewares",
    "get_request_id",
]
