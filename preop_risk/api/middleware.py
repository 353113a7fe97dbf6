"""Middleware and exception handlers for the risk API."""

import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from preop_risk.domain.ports import AssessmentError, ValidationError

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"{request.method} {request.url.path} - Client: {client_ip}")

        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.3f}"

        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time": round(process_time, 3),
                "client_ip": client_ip,
            }
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns unexpected exceptions into a generic 500 response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unexpected error on {request.method} {request.url.path}: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred. Please check logs for details."
                }
            )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning(f"Validation error on {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation failed",
            "detail": str(exc),
            "errors": exc.details.get("errors", []),
        }
    )


async def assessment_error_handler(request: Request, exc: AssessmentError) -> JSONResponse:
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=400,
        content={"error": "Bad Request", "detail": str(exc)}
    )


def setup_middleware(app: FastAPI) -> None:
    """Register exception handlers and middleware.

    Middleware order: ErrorHandlingMiddleware is added first so that
    LoggingMiddleware wraps it and logs the 500 it produces.
    """
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(AssessmentError, assessment_error_handler)

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
