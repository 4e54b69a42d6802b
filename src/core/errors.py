"""
Exception and warning types raised while reading booking plans and building invoices.
"""


class MissingInputError(FileNotFoundError):
    """Booking plan or invoice template is missing or cannot be read."""


class NoBookingsError(ValueError):
    """An invoice was requested for a customer without any bookings."""


class FatalArithmeticError(ValueError):
    """Invoice totals cannot be computed (no booking carries a price)."""


class CustomerNotFoundWarning(UserWarning):
    """The requested customer name matches no row in the booking plan."""
