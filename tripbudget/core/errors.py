from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("tripbudget.errors")


# Domain errors ------------------------------------------------------------


class TripBudgetError(Exception):
    """Base class for errors raised by the budget services."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"


class InvalidExpenseError(TripBudgetError, ValueError):
    code = "invalid_expense"


class ExpenseNotFoundError(TripBudgetError, LookupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "expense_not_found"


class ArchiveEntryNotFoundError(TripBudgetError, LookupError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "archive_entry_not_found"


class RateLookupError(TripBudgetError):
    """A rate provider could not produce a usable rate."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "rate_unavailable"


# HTTP handlers ------------------------------------------------------------


def not_found_handler(request: Request, exc):  # type: ignore
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http_error", "detail": exc.detail},
        )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "not_found",
            "detail": exc.detail
            if exc.detail and exc.detail != "Not Found"
            else f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def domain_error_handler(request: Request, exc: TripBudgetError):  # type: ignore
    logger.info("domain error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": str(exc)},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
