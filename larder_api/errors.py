"""
Exception → HTTP mapping.

Services raise domain exceptions only; this module decides the status code.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from larder.domain.exceptions import (
    DuplicateCouponError,
    ForbiddenError,
    GatewayError,
    NotFoundError,
    SettlementError,
    StateConflictError,
    ValidationError,
)


logger = logging.getLogger(__name__)

# Most specific first
STATUS_BY_ERROR = (
    (DuplicateCouponError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (StateConflictError, status.HTTP_400_BAD_REQUEST),
    (GatewayError, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: SettlementError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def settlement_error_handler(request: Request, exc: SettlementError):
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.message,
            "type": type(exc).__name__,
            "path": request.url.path,
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Request validation failed on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation failed",
            "details": jsonable_encoder(exc.errors()),
            "path": request.url.path,
        },
    )


async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "path": request.url.path,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SettlementError, settlement_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, global_exception_handler)
