"""
Error handling middleware.

Maps domain exceptions to JSON error bodies shaped like ``ErrorResponse``.
"""

import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.api.schemas.common import ErrorResponse
from src.config.logging import get_logger
from src.domain.exceptions.sync_error import ResourceNotFoundError, SyncError
from src.domain.exceptions.validation_error import ValidationError
from src.domain.exceptions.webhook_error import WebhookDeliveryError

logger = get_logger(__name__)


def error_response(
    status_code: int,
    error: str,
    message: str,
    error_type: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, type=error_type, details=details)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


class ErrorHandlerMiddleware:
    """Error handling middleware for FastAPI."""

    def __init__(self, app: FastAPI):
        self.app = app
        add_error_handlers(app)


def add_error_handlers(app: FastAPI) -> None:
    """Register exception handlers, most specific first."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning("Validation error", error=str(exc), path=request.url.path)
        return error_response(400, "Validation Error", str(exc), "validation_error")

    @app.exception_handler(ResourceNotFoundError)
    async def not_found_error_handler(request: Request, exc: ResourceNotFoundError):
        logger.warning(
            "Resource not found",
            resource_type=exc.resource_type,
            resource_id=exc.resource_id,
            path=request.url.path,
        )
        return error_response(404, "Not Found", str(exc), "not_found")

    @app.exception_handler(WebhookDeliveryError)
    async def delivery_error_handler(request: Request, exc: WebhookDeliveryError):
        logger.error(
            "Webhook delivery error",
            event_id=exc.event_id,
            failed_endpoints=len(exc.failures),
            path=request.url.path,
        )
        return error_response(
            502,
            "Webhook Delivery Error",
            str(exc),
            "webhook_delivery_error",
            details={
                "event_id": exc.event_id,
                "failures": [
                    {"url": failure.url, "message": failure.message}
                    for failure in exc.failures
                ],
            },
        )

    @app.exception_handler(SyncError)
    async def sync_error_handler(request: Request, exc: SyncError):
        logger.error("Sync error", error=str(exc), path=request.url.path)
        return error_response(422, "Sync Error", str(exc), "sync_error")

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error", error=str(exc), path=request.url.path)
        return error_response(
            500, "Database Error", "A database error occurred", "database_error"
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return error_response(exc.status_code, "HTTP Error", str(exc.detail), "http_error")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            error=str(exc),
            path=request.url.path,
            traceback=traceback.format_exc(),
        )
        return error_response(
            500, "Internal Server Error", "An unexpected error occurred", "internal_error"
        )
