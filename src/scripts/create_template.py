#!/usr/bin/env python3
"""
Create the default Excel invoice template with {{placeholder}} tokens.

Usage:
    uv run python src/scripts/create_template.py [--output FILE]
"""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import TEMPLATE_PATH
from services.templates import create_invoice_template


def main():
    parser = argparse.ArgumentParser(description="Create the default invoice template")
    parser.add_argument("--output", type=Path, default=TEMPLATE_PATH, help="Where to write the template")

    args = parser.parse_args()

    if args.output.exists():
        print(f"Template already exists, overwriting: {args.output}")
    output_path = create_invoice_template(args.output)
    print(f"Template written to: {output_path}")


if __name__ == "__main__":
    main()
