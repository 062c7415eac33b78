from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    FederationError,
    InternalError,
    NotFoundError,
    ValidationError,
)


logger = logging.getLogger(__name__)

# Unmatched one-use tokens answer 400, never 404.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 400),
    (ConflictError, 409),
    (AuthenticationError, 401),
    (FederationError, 401),
    (AuthorizationError, 403),
    (InternalError, 500),
)


def status_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def register_exception_handlers(app: FastAPI, *, expose_internal_errors: bool) -> None:
    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        status_code = status_for(exc)
        details = exc.details
        if status_code >= 500 and expose_internal_errors and exc.__cause__ is not None:
            details = str(exc.__cause__)
        if status_code < 500:
            logger.info(
                "api: request_rejected method=%s path=%s status=%s code=%s",
                request.method,
                request.url.path,
                status_code,
                exc.code,
            )
        return JSONResponse(status_code=status_code, content=error_body(exc.code, exc.message, details))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
                "message": error.get("msg", "Invalid value"),
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=error_body("VALIDATION_ERROR", "Request validation failed", details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            body = error_body(
                "ROUTE_NOT_FOUND",
                f"Route {request.method} {request.url.path} does not exist",
            )
        else:
            message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
            body = error_body(f"HTTP_{exc.status_code}", message)
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api: unhandled_error method=%s path=%s", request.method, request.url.path)
        message = str(exc) if expose_internal_errors else "An internal error occurred"
        return JSONResponse(status_code=500, content=error_body("INTERNAL_ERROR", message))
