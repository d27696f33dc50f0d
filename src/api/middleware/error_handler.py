"""
Error handling for the HTTP API.

Every failure leaves the API as the same JSON body:
- error_code: machine-readable identifier (INSUFFICIENT_STOCK, ...)
- message: human-readable description
- hint: suggested recovery action
- details: structured context from the domain error (shortfall, versions)

Domain errors map to status codes by kind: validation 400, missing
entity 404, state and version conflicts 409, business rules and stock
shortfalls 422, storage failures 500.
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.application.dto.responses import ErrorResponse
from src.config import get_logger
from src.core.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyConflictError,
    InsufficientStockError,
    InvalidStateError,
    InventoryError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)

# First match wins, so subclasses must precede their bases
STATUS_BY_ERROR: tuple[tuple[type[Exception], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (ConcurrencyConflictError, status.HTTP_409_CONFLICT),
    (BusinessRuleViolationError, 422),
    (InsufficientStockError, 422),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

HINTS: dict[str, str] = {
    "PRODUCT_NOT_FOUND": "Check the product ID; GET /api/products lists products.",
    "WORK_ORDER_NOT_FOUND": "Check the work order ID; GET /api/work-orders lists work orders.",
    "WORK_ORDER_ITEM_NOT_FOUND": "Only products listed on the work order can be issued against it.",
    "USER_NOT_FOUND": "Check the user ID; GET /api/users lists users.",
    "INVALID_TRANSITION": "Reload the work order; allowed_actions lists what its status permits.",
    "CONCURRENCY_CONFLICT": "The record changed since you loaded it. Reload and retry.",
    "INSUFFICIENT_STOCK": "Receive stock first or reduce the quantity.",
    "OVER_ISSUE": "The quantity exceeds what remains to be issued for this item.",
    "EMPTY_WORK_ORDER": "Add at least one item before submitting.",
    "WORK_ORDER_COMPLETED": "Completed work orders are final.",
    "PRODUCT_IN_USE": "Complete or cancel the open work orders that use this product first.",
    "USER_INACTIVE": "Assign the work order to an active user.",
    "DUPLICATE_SKU": "SKUs are unique, including those of deleted products.",
    "DUPLICATE_EMAIL": "A user with this email already exists.",
    "MISSING_USER_ID": "Send the acting user's ID in the X-User-Id header.",
    "VALIDATION_ERROR": "Check the request fields against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
}

CODES_BY_STATUS: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def status_for_exception(exc: Exception) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_json(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert an exception into the standard JSON error body."""
    status_code = status_for_exception(exc)
    domain = isinstance(exc, InventoryError)
    error_code = exc.code if domain else "INTERNAL_ERROR"

    if status_code >= 500:
        logger.error(
            "request_error",
            status=status_code,
            error_code=error_code,
            error=str(exc),
            traceback="".join(traceback.format_exception(exc)),
        )
    else:
        logger.info("request_rejected", status=status_code, error_code=error_code)

    return _error_json(
        status_code,
        ErrorResponse(
            error_code=error_code,
            message=exc.message if domain else "Internal server error",
            hint=HINTS.get(error_code),
            details=exc.details if domain else None,
            path=request.url.path,
        ),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns exceptions no registered handler took into 500 responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InventoryError)
    async def domain_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def schema_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed bodies and parameters: 422 with one entry per field."""
        fields = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return _error_json(
            422,
            ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint=HINTS["VALIDATION_ERROR"],
                detail="; ".join(f"{f['field']}: {f['message']}" for f in fields),
                details={"errors": fields},
                path=request.url.path,
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Framework errors such as unknown routes."""
        return _error_json(
            exc.status_code,
            ErrorResponse(
                error_code=CODES_BY_STATUS.get(exc.status_code, "HTTP_ERROR"),
                message=str(exc.detail),
                path=request.url.path,
            ),
        )
