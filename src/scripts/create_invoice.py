#!/usr/bin/env python3
"""
Generate the invoice of one customer from the weekly court booking plan.

The booking plan is taken from --input, else BOOKING_PLAN_PATH, else
~/Desktop/Rechnungen/Excel/THK_Belegungsplan_ReAus_Programm.xlsx, else that
file name in the current directory.

Usage:
    uv run python src/scripts/create_invoice.py <customer> [--input FILE] [--template FILE] [--date YYYY-MM-DD]

Example:
    uv run python src/scripts/create_invoice.py "Müller" --input data/Belegungsplan.xlsx
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import TEMPLATE_PATH
from core.errors import MissingInputError
from core.locate import default_strategies, resolve_input_file
from services.invoices import generate_invoice


def main():
    parser = argparse.ArgumentParser(
        description="Generate a customer invoice from the weekly court booking plan"
    )
    parser.add_argument("customer", help="Customer name as in the booking plan's Name column")
    parser.add_argument("--input", type=Path, help="Path to the booking plan (.xlsx or .numbers)")
    parser.add_argument(
        "--template", type=Path, default=TEMPLATE_PATH, help="Path to the invoice template (.xlsx)"
    )
    parser.add_argument("--date", help="Invoice date (YYYY-MM-DD), defaults to today")

    args = parser.parse_args()

    try:
        input_file = resolve_input_file(default_strategies(args.input))
        if input_file is None:
            raise MissingInputError("No booking plan found (use --input or set BOOKING_PLAN_PATH)")

        invoice_date = datetime.strptime(args.date, "%Y-%m-%d").date() if args.date else None
        output_path = generate_invoice(input_file, args.customer, args.template, invoice_date)
        print(f"\nInvoice generated: {output_path}")
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
