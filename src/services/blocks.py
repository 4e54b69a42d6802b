"""
Time-block compression.

Bookings are stored one 30-minute slot per row. For billing, consecutive slots
on the same day, hall and court are merged into one block (line item).
"""

from collections.abc import Sequence
from decimal import Decimal

from core.config import SLOT_MINUTES
from core.parsing import normalize_time, split_time_range, time_to_minutes
from models.bookings import BookingRow, TimeBlock


def effective_start(booking: BookingRow) -> str | None:
    """Start of a booking: explicit from-time, else the raw range start or time point."""
    if booking.time_from:
        return booking.time_from
    start, _ = split_time_range(booking.time_raw)
    return start or normalize_time(booking.time_raw)


def effective_end(booking: BookingRow) -> str | None:
    """End of a booking: explicit to-time, else split from the raw range."""
    if booking.time_to:
        return booking.time_to
    _, end = split_time_range(booking.time_raw)
    return end


def merge_starts(starts: Sequence[int], slot_minutes: int = SLOT_MINUTES) -> list[tuple[int, int]]:
    """
    Merge slot start minutes into maximal contiguous runs.

    Returns:
        List of (start, end) minute pairs, end exclusive, ascending
    """
    runs = []
    run_start = last = None
    for start in sorted(set(starts)):
        if run_start is None:
            run_start = last = start
        elif start == last + slot_minutes:
            last = start
        else:
            runs.append((run_start, last + slot_minutes))
            run_start = last = start
    if run_start is not None:
        runs.append((run_start, last + slot_minutes))
    return runs


def _fallback_block(booking: BookingRow, slot_minutes: int) -> TimeBlock:
    """Single block from the first booking when no start time could be parsed."""
    start = time_to_minutes(effective_start(booking))
    end = time_to_minutes(effective_end(booking))
    units = 0
    if start is not None and end is not None and end > start:
        units = (end - start) // slot_minutes
    return TimeBlock(
        sheet_name=booking.sheet_name,
        hall=booking.hall,
        court=booking.court,
        start_minutes=start,
        end_minutes=end,
        unit_count=max(units, 1),
    )


def compress_bookings(
    bookings: Sequence[BookingRow], slot_minutes: int = SLOT_MINUTES
) -> list[TimeBlock]:
    """
    Compress bookings into billable time blocks.

    Groups by (sheet, hall, court) in first-seen order; within a group, slot
    starts are sorted and merged where each start follows the previous one by
    exactly one slot.

    Returns:
        Blocks in group order, ascending by start within a group
    """
    starts_by_key: dict[tuple[str, str | None, str | None], list[int]] = {}
    for booking in bookings:
        minutes = time_to_minutes(effective_start(booking))
        if minutes is None:
            continue
        key = (booking.sheet_name, booking.hall, booking.court)
        starts_by_key.setdefault(key, []).append(minutes)

    blocks = []
    for (sheet_name, hall, court), starts in starts_by_key.items():
        for start, end in merge_starts(starts, slot_minutes):
            blocks.append(
                TimeBlock(
                    sheet_name=sheet_name,
                    hall=hall,
                    court=court,
                    start_minutes=start,
                    end_minutes=end,
                    unit_count=(end - start) // slot_minutes,
                )
            )

    if not blocks and bookings:
        blocks.append(_fallback_block(bookings[0], slot_minutes))

    return blocks


def price_per_unit(bookings: Sequence[BookingRow]) -> Decimal | None:
    """Price of one slot: the first price found, in booking order."""
    for booking in bookings:
        if booking.price is not None:
            return booking.price
    return None


def distinct_prices(bookings: Sequence[BookingRow]) -> list[Decimal]:
    """All different prices among the bookings, in first-seen order."""
    prices = []
    for booking in bookings:
        if booking.price is not None and booking.price not in prices:
            prices.append(booking.price)
    return prices


def block_amount(block: TimeBlock, unit_price: Decimal | None) -> Decimal | None:
    """Billing amount of one block."""
    if unit_price is None:
        return None
    return unit_price * block.unit_count
