"""Pydantic response models for API endpoints."""

from pydantic import BaseModel

from models.bookings import BookingRow, CustomerRecord, TimeBlock


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    template_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class CustomerSummary(BaseModel):
    """Customer name with the number of booking plan rows it occurs in."""

    name: str
    occurrences: int


class CustomerListResponse(BaseModel):
    """All customers in a booking plan, sorted case-insensitively."""

    customers: list[CustomerSummary]


class BookingResponse(BaseModel):
    """Single booking row (not merged)."""

    sheet: str
    row: int
    hall: str | None = None
    court: str | None = None
    time_from: str | None = None
    time_to: str | None = None
    time: str | None = None
    price: str | None = None  # Decimal as string

    @classmethod
    def from_booking(cls, booking: BookingRow) -> "BookingResponse":
        return cls(
            sheet=booking.sheet_name,
            row=booking.row_number,
            hall=booking.hall,
            court=booking.court,
            time_from=booking.time_from,
            time_to=booking.time_to,
            time=booking.display_time(),
            price=None if booking.price is None else str(booking.price),
        )


class BlockResponse(BaseModel):
    """Billable block of consecutive slots."""

    sheet: str
    hall: str | None = None
    court: str | None = None
    start: str
    end: str
    units: int

    @classmethod
    def from_block(cls, block: TimeBlock) -> "BlockResponse":
        return cls(
            sheet=block.sheet_name,
            hall=block.hall,
            court=block.court,
            start=block.start,
            end=block.end,
            units=block.unit_count,
        )


class CustomerDetailResponse(BaseModel):
    """Contact data, bookings and billable blocks of one customer."""

    salutation: str | None = None
    title: str | None = None
    first_name: str | None = None
    last_name: str
    email: str | None = None
    address: str | None = None
    bookings: list[BookingResponse]
    blocks: list[BlockResponse]

    @classmethod
    def from_customer(
        cls, customer: CustomerRecord, blocks: list[TimeBlock]
    ) -> "CustomerDetailResponse":
        return cls(
            salutation=customer.salutation,
            title=customer.title,
            first_name=customer.first_name,
            last_name=customer.last_name,
            email=customer.email,
            address=customer.address,
            bookings=[BookingResponse.from_booking(b) for b in customer.bookings],
            blocks=[BlockResponse.from_block(b) for b in blocks],
        )


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
