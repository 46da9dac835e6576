"""Custom exception hierarchy and handlers."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from app.core.enums import WorkflowErrorCode

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    status_code = 400
    code = "app_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundException(AppException):
    """Raised when entity is not found."""

    status_code = 404
    code = "not_found"


class BusinessRuleException(AppException):
    """Raised when business rule validation fails."""

    status_code = 422
    code = "business_rule_violation"


_WORKFLOW_STATUS_CODES: dict[WorkflowErrorCode, int] = {
    WorkflowErrorCode.INVALID_TRANSITION: 409,
    WorkflowErrorCode.ALREADY_FINALIZED: 409,
    WorkflowErrorCode.MISSING_SCHEDULE: 422,
    WorkflowErrorCode.PAYMENT_REQUIRED: 422,
}


class WorkflowRejectedException(AppException):
    """Raised when the workflow engine refuses an administrative action.

    The error code is kept distinct per failure so operators can tell a
    concurrent double-submit (``already_finalized``) from a bad request.
    """

    def __init__(self, error_code: WorkflowErrorCode, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.code = str(error_code)
        self.status_code = _WORKFLOW_STATUS_CODES[error_code]


async def app_exception_handler(_: Request, exc: AppException) -> JSONResponse:
    """Handle custom domain exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions in unified shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "http_error", "message": str(exc.detail)}},
    )


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "internal_error", "message": "Internal server error"}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
