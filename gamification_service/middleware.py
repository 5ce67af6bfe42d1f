"""
Middleware and exception handlers for the Gamification Service

- Request ID tracking (X-Request-ID)
- Uniform error envelope: {"error": {"code", "message", "details"?}}
"""
import logging
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from gamification_service.core.errors import AppError, ERROR_CODES

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuses the client's X-Request-ID or generates one, and echoes it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _error_response(status_code: int, code: str, details=None) -> JSONResponse:
    body = {"code": code, "message": ERROR_CODES[code]["message"]}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(f"Application error {exc.code} on {request.method} {request.url.path} [{_request_id(request)}]")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Validation error on {request.method} {request.url.path} [{_request_id(request)}]")
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return _error_response(status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", {"errors": details})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        f"Database error on {request.method} {request.url.path} [{_request_id(request)}]: {exc}",
        exc_info=True,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR")


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unexpected error on {request.method} {request.url.path} [{_request_id(request)}]: {exc}",
        exc_info=True,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


def setup_middleware(app: FastAPI, cors_origins: list) -> None:
    """Registers CORS, request id and the exception handlers."""
    app.add_middleware(CORSMiddleware, allow_origins=cors_origins, allow_credentials=True,
                       allow_methods=["*"], allow_headers=["*"])
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
    logger.info("Middleware and exception handlers configured")
