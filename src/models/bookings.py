"""
Data models for booking plan rows, customers and billable blocks.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from core.config import SLOT_MINUTES
from core.parsing import minutes_to_time


@dataclass(frozen=True)
class RowRef:
    """Sheet plus 1-based row number of a customer occurrence."""

    sheet_name: str
    row_number: int

    def __str__(self) -> str:
        return f"{self.sheet_name}!{self.row_number}"


@dataclass(frozen=True)
class BookingRow:
    """One booked slot of a customer, as found in a weekday sheet."""

    sheet_name: str
    row_number: int
    hall: str | None = None
    court: str | None = None
    time_from: str | None = None  # "HH:MM"
    time_to: str | None = None
    time_raw: str | None = None  # "HH:MM - HH:MM" or a single "HH:MM"
    price: Decimal | None = None

    def display_time(self) -> str | None:
        """Time range for display: from/to if both exist, else the raw value."""
        if self.time_from and self.time_to:
            return f"{self.time_from} - {self.time_to}"
        return self.time_raw


@dataclass(frozen=True)
class CustomerRecord:
    """Contact data of a customer plus all of their bookings."""

    last_name: str
    salutation: str | None = None
    title: str | None = None
    first_name: str | None = None
    email: str | None = None
    address: str | None = None
    bookings: tuple[BookingRow, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TimeBlock:
    """A contiguous run of 30-minute slots on one day, hall and court."""

    sheet_name: str
    hall: str | None
    court: str | None
    start_minutes: int | None
    end_minutes: int | None
    unit_count: int

    @property
    def start(self) -> str:
        return minutes_to_time(self.start_minutes)

    @property
    def end(self) -> str:
        return minutes_to_time(self.end_minutes)

    @property
    def hours(self) -> Decimal:
        return Decimal(self.unit_count * SLOT_MINUTES) / 60
