"""API Pydantic models."""

from .responses import (
    BlockResponse,
    BookingResponse,
    CustomerDetailResponse,
    CustomerListResponse,
    CustomerSummary,
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "CustomerSummary",
    "CustomerListResponse",
    "BookingResponse",
    "BlockResponse",
    "CustomerDetailResponse",
]
