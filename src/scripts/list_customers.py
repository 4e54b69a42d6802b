#!/usr/bin/env python3
"""
List the customers of the weekly court booking plan, or show one customer's data.

Usage:
    uv run python src/scripts/list_customers.py [--input FILE] [--details CUSTOMER]
"""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import MissingInputError
from core.locate import default_strategies, resolve_input_file
from models.bookings import CustomerRecord
from services.blocks import compress_bookings
from services.invoices import format_money
from services.spreadsheet import list_customers, read_customer, sorted_customer_names


def print_customer(customer: CustomerRecord) -> None:
    """Print contact data, single bookings and merged blocks."""
    def show(value):
        return value or "-"

    print(f"Anrede:  {show(customer.salutation)}    Titel: {show(customer.title)}")
    print(f"Vorname: {show(customer.first_name)}    Name:  {show(customer.last_name)}")
    print(f"Adresse: {show(customer.address)}")
    print(f"E-Mail:  {show(customer.email)}")

    print(f"\nBookings ({len(customer.bookings)}):")
    for booking in customer.bookings:
        print(
            f"  {booking.sheet_name}!{booking.row_number:<4} Halle {show(booking.hall):<4} "
            f"Platz {show(booking.court):<4} {show(booking.display_time()):<15} "
            f"{format_money(booking.price) or '-'}"
        )

    blocks = compress_bookings(customer.bookings)
    print(f"\nBlocks ({len(blocks)}):")
    for block in blocks:
        print(
            f"  {block.sheet_name} Halle {show(block.hall)} Platz {show(block.court)}: "
            f"{block.start}-{block.end} ({block.unit_count} x 30 min)"
        )


def main():
    parser = argparse.ArgumentParser(description="List customers of the weekly court booking plan")
    parser.add_argument("--input", type=Path, help="Path to the booking plan (.xlsx or .numbers)")
    parser.add_argument("--details", metavar="CUSTOMER", help="Show data and bookings of one customer")

    args = parser.parse_args()

    try:
        input_file = resolve_input_file(default_strategies(args.input))
        if input_file is None:
            raise MissingInputError("No booking plan found (use --input or set BOOKING_PLAN_PATH)")
        print(f"Booking plan: {input_file}\n")

        if args.details:
            print_customer(read_customer(input_file, args.details))
            return

        grouped = list_customers(input_file)
        for name in sorted_customer_names(grouped):
            refs = ", ".join(str(ref) for ref in grouped[name])
            print(f"{name:<30} {refs}")
        print(f"\n{len(grouped)} customers")
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
