"""Mapping of service errors to HTTP errors, with request log bookkeeping."""

from fastapi import HTTPException, status

from api.dependencies import error_detail
from api.logging import RequestLog
from api.models.responses import ErrorCodes
from core.errors import MissingInputError, NoBookingsError


def record_http_error(request_log: RequestLog, exc: HTTPException) -> None:
    """Copy an HTTPException into the request log."""
    request_log.status_code = exc.status_code
    if isinstance(exc.detail, dict):
        request_log.error_code = exc.detail.get("code")
        request_log.error_message = exc.detail.get("error")
        for detail in exc.detail.get("details", []):
            request_log.add_detail("validation_error", detail)
    else:
        request_log.error_message = str(exc.detail)


def service_error_to_http(exc: Exception, request_log: RequestLog) -> HTTPException:
    """
    Translate an exception raised while processing a booking plan.

    - MissingInputError: the upload could not be read as a booking plan (400)
    - NoBookingsError: customer not in the booking plan (404)
    - other ValueError (e.g. FatalArithmeticError): validation failure (422)
    - anything else: internal error (500)
    """
    if isinstance(exc, MissingInputError):
        http_exc = HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                "Booking plan could not be read", ErrorCodes.INVALID_REQUEST, [str(exc)]
            ),
        )
    elif isinstance(exc, NoBookingsError):
        http_exc = HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("Customer not found", ErrorCodes.CUSTOMER_NOT_FOUND, [str(exc)]),
        )
    elif isinstance(exc, ValueError):
        http_exc = HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=error_detail(
                "Booking plan validation failed", ErrorCodes.VALIDATION_ERROR, [str(exc)]
            ),
        )
    else:
        http_exc = HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Internal server error", ErrorCodes.INTERNAL_ERROR),
        )
        # The client only sees the generic message; keep the cause in the log
        record_http_error(request_log, http_exc)
        request_log.error_message = str(exc)
        return http_exc

    record_http_error(request_log, http_exc)
    return http_exc
