"""
Invoice Generation Service (Excel Version)

Generates a customer invoice from the weekly booking plan. Reads the customer's
bookings, compresses consecutive 30-minute slots into billable blocks, and fills
an Excel invoice template whose cells contain {{placeholder}} tokens. The
template row holding {{spieltag}} is repeated once per block.
"""

import re
import tempfile
from collections.abc import Mapping, Sequence
from copy import copy
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from core.config import (
    INVOICE_FILE_PREFIX,
    LINE_ITEM_TOKEN,
    OUTPUT_DIR,
    TEMPLATE_PATH,
    UNKNOWN_CUSTOMER_FILENAME,
    VAT_RATE,
)
from core.errors import FatalArithmeticError, MissingInputError, NoBookingsError
from models.bookings import CustomerRecord, TimeBlock
from services.blocks import block_amount, compress_bookings, distinct_prices, price_per_unit
from services.spreadsheet import read_customer


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class InvoiceTotals:
    """Money totals of one invoice."""

    unit_price: Decimal | None
    total_units: int
    gross: Decimal
    net: Decimal
    vat: Decimal


@dataclass
class InvoiceResult:
    """Result of invoice generation processing."""

    workbook: Any  # openpyxl.Workbook
    customer: CustomerRecord
    blocks: list[TimeBlock]
    totals: InvoiceTotals
    filename: str
    warnings: list[str] = field(default_factory=list)


# =============================================================================
# CONSTANTS
# =============================================================================

PLACEHOLDER_RE = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")
POSTCODE_RE = re.compile(r"(?:D\s*-\s*)?(\d{5})", re.IGNORECASE)
FILENAME_UNSAFE_RE = re.compile(r"[^\w-]")

INVOICE_TIMEZONE = ZoneInfo("Europe/Berlin")

# Swap "," and "." to turn "1,234.50" into German "1.234,50"
GERMAN_SEPARATORS = str.maketrans({",": ".", ".": ","})
CENT = Decimal("0.01")


# =============================================================================
# FORMATTING
# =============================================================================


def format_money(amount: Decimal | None) -> str:
    """Format as German currency, e.g. '1.234,50 €' ('' for None)."""
    if amount is None:
        return ""
    rounded = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{rounded:,.2f}".translate(GERMAN_SEPARATORS) + " €"


def format_hours(hours: Decimal) -> str:
    """Format hours German style without trailing zeros: '1,5', '2'."""
    text = f"{Decimal(hours):,.2f}".translate(GERMAN_SEPARATORS)
    return text.rstrip("0").rstrip(",")


def get_invoice_date(override: date | None = None) -> date:
    """Invoice date: the override, or today in the invoicing time zone."""
    if override:
        return override
    return datetime.now(INVOICE_TIMEZONE).date()


def split_address(address: str | None) -> tuple[str | None, str | None]:
    """
    Split an address into street and postcode/city at the first 5-digit postcode.

    Example:
        'Hauptstr. 1 D-12345 Berlin' -> ('Hauptstr. 1', '12345 Berlin')
    """
    if not address:
        return None, None
    text = address.strip()
    match = POSTCODE_RE.search(text)
    if not match:
        return text, None
    street = text[: match.start()].strip() or None
    return street, text[match.start(1):].strip()


def build_output_filename(last_name: str | None) -> str:
    """Invoice file name from the customer's last name (letters, digits, _ and - only)."""
    safe_name = FILENAME_UNSAFE_RE.sub("", last_name or "")
    return f"{INVOICE_FILE_PREFIX}_{safe_name or UNKNOWN_CUSTOMER_FILENAME}.xlsx"


def build_output_path(last_name: str | None, invoice_date: date, output_dir: Path = OUTPUT_DIR) -> Path:
    """
    Output path of an invoice: <output_dir>/invoices/<YYYY-MM-DD>/<prefix>_<name>.xlsx.

    An invoice for the same customer on the same day is overwritten.
    """
    day_dir = output_dir / "invoices" / invoice_date.strftime("%Y-%m-%d")
    day_dir.mkdir(parents=True, exist_ok=True)
    return day_dir / build_output_filename(last_name)


def save_workbook(wb, output_file: Path) -> None:
    """
    Save a workbook so that output_file is either complete or untouched.

    The workbook is written to a temporary file in the same folder and then
    moved over output_file; a failed save leaves no file behind.
    """
    tmp = tempfile.NamedTemporaryFile(
        dir=output_file.parent, prefix=f".{output_file.stem}.", suffix=".part", delete=False
    )
    tmp_path = Path(tmp.name)
    tmp.close()
    try:
        wb.save(str(tmp_path))
        tmp_path.replace(output_file)
    finally:
        tmp_path.unlink(missing_ok=True)


# =============================================================================
# TOTALS
# =============================================================================


def tax_split(gross: Decimal | None) -> tuple[Decimal, Decimal]:
    """
    Split a gross amount into (net, vat) at the fixed VAT rate.

    Raises:
        FatalArithmeticError: gross is None (no booking carries a price)
    """
    if gross is None:
        raise FatalArithmeticError(
            "Cannot compute net amount and VAT: no booking carries a price"
        )
    net = gross / (1 + VAT_RATE)
    return net, gross - net


def compute_totals(blocks: Sequence[TimeBlock], unit_price: Decimal | None) -> InvoiceTotals:
    """Compute gross, net and VAT for the blocks at one price per slot."""
    total_units = sum(block.unit_count for block in blocks)
    gross = None if unit_price is None else unit_price * total_units
    net, vat = tax_split(gross)
    return InvoiceTotals(
        unit_price=unit_price,
        total_units=total_units,
        gross=gross,
        net=net,
        vat=vat,
    )


# =============================================================================
# PLACEHOLDER VALUES
# =============================================================================


def build_document_values(
    customer: CustomerRecord, totals: InvoiceTotals, invoice_date: date
) -> dict[str, str]:
    """Values for the document-level placeholders."""
    street, postcode_city = split_address(customer.address)
    return {
        "anrede": customer.salutation or "",
        "titel": f" {customer.title}" if customer.title else "",
        "vorname": customer.first_name or "",
        "name": customer.last_name or "",
        "adresse": street or "",
        "plzundstadt": postcode_city or "",
        "email": customer.email or "",
        "datum": invoice_date.strftime("%d.%m.%Y"),
        "jahr": str(invoice_date.year),
        "BruttoSumme": format_money(totals.gross),
        "netto": format_money(totals.net),
        "erhalteneUst": format_money(totals.vat),
    }


def build_line_item_values(block: TimeBlock, unit_price: Decimal | None) -> dict[str, str]:
    """Values for the placeholders of one line-item row."""
    return {
        "spieltag": block.sheet_name,
        "halle": block.hall or "",
        "platz": block.court or "",
        "startzeit": block.start,
        "endzeit": block.end,
        "stunden": format_hours(block.hours),
        "einheiten": str(block.unit_count),
        "einzelpreis": format_money(unit_price),
        "betrag": format_money(block_amount(block, unit_price)),
    }


def fill_placeholders(text: str, values: Mapping[str, str]) -> str:
    """Replace every {{token}} in text; unknown tokens become ''."""
    return PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), ""), text)


# =============================================================================
# EXCEL MANIPULATION
# =============================================================================


def find_line_item_row(ws) -> int | None:
    """Find the first row containing the {{spieltag}} token (1-indexed)."""
    for row in ws.iter_rows():
        for cell in row:
            if isinstance(cell.value, str) and LINE_ITEM_TOKEN in cell.value:
                return cell.row
    return None


def insert_rows_below(ws, template_row: int, count: int) -> None:
    """
    Insert count copies of template_row directly below it.

    Copies values, cell styles and the horizontal merges of the template row.
    Merged ranges below the insertion point are shifted down with the rows;
    ranges spanning the insertion point grow by count rows.
    """
    if count <= 0:
        return

    insert_at = template_row + 1
    row_merges = []
    for merged in list(ws.merged_cells.ranges):
        if merged.min_row >= insert_at:
            ws.merged_cells.remove(merged)
            merged.shift(0, count)
            ws.merged_cells.add(merged)
        elif merged.max_row >= insert_at:
            ws.merged_cells.remove(merged)
            merged.expand(down=count)
            ws.merged_cells.add(merged)
        elif merged.min_row == template_row:
            row_merges.append((merged.min_col, merged.max_col))

    ws.insert_rows(insert_at, count)

    height = ws.row_dimensions[template_row].height
    for offset in range(1, count + 1):
        target_row = template_row + offset
        for src in ws[template_row]:
            dst = ws.cell(row=target_row, column=src.column, value=src.value)
            if src.has_style:
                dst._style = copy(src._style)
        for min_col, max_col in row_merges:
            ws.merge_cells(
                start_row=target_row, start_column=min_col, end_row=target_row, end_column=max_col
            )
        if height is not None:
            ws.row_dimensions[target_row].height = height


def populate_line_items(
    ws,
    blocks: Sequence[TimeBlock],
    unit_price: Decimal | None,
    document_values: Mapping[str, str] | None = None,
) -> int:
    """
    Fill the line-item row once per block.

    Document tokens inside the line-item row are filled from document_values;
    line-item tokens take precedence.

    Returns:
        Number of line-item rows written (0 if the template has no {{spieltag}} row)
    """
    template_row = find_line_item_row(ws)
    if template_row is None or not blocks:
        return 0

    insert_rows_below(ws, template_row, len(blocks) - 1)

    for offset, block in enumerate(blocks):
        values = {**(document_values or {}), **build_line_item_values(block, unit_price)}
        for cell in ws[template_row + offset]:
            if isinstance(cell.value, str) and "{{" in cell.value:
                cell.value = fill_placeholders(cell.value, values)

    return len(blocks)


def replace_document_placeholders(wb, values: Mapping[str, str]) -> None:
    """Replace remaining tokens in all cells, headers and footers of the workbook."""
    for ws in wb.worksheets:
        for row in ws.iter_rows():
            for cell in row:
                if isinstance(cell.value, str) and "{{" in cell.value:
                    cell.value = fill_placeholders(cell.value, values)

        for header_footer in (ws.oddHeader, ws.oddFooter):
            for part in (header_footer.left, header_footer.center, header_footer.right):
                if part.text and "{{" in part.text:
                    part.text = fill_placeholders(part.text, values)


def render_invoice(
    template_path: Path,
    customer: CustomerRecord,
    blocks: Sequence[TimeBlock],
    totals: InvoiceTotals,
    invoice_date: date,
):
    """
    Load the template and fill it for one customer.

    Returns:
        openpyxl Workbook (not yet saved)

    Raises:
        MissingInputError: Template missing or unreadable
    """
    template_path = Path(template_path)
    if not template_path.is_file():
        raise MissingInputError(f"Template file not found: {template_path}")

    try:
        wb = load_workbook(str(template_path))
    except (OSError, InvalidFileException, KeyError) as e:
        raise MissingInputError(f"Template could not be read: {template_path} ({e})") from e

    document_values = build_document_values(customer, totals, invoice_date)
    populate_line_items(wb.active, blocks, totals.unit_price, document_values)
    replace_document_placeholders(wb, document_values)
    return wb


# =============================================================================
# MAIN ENTRY POINTS
# =============================================================================


def _process_invoice(
    input_file: Path,
    customer_name: str,
    template_path: Path,
    invoice_date: date,
    silent: bool = False,
) -> InvoiceResult:
    """
    Core invoice processing shared by file and bytes generators.

    Raises:
        MissingInputError: Booking plan or template missing/unreadable
        NoBookingsError: Customer has no bookings
        FatalArithmeticError: No booking carries a price
    """
    if not silent:
        print(f"Reading booking plan: {input_file}")

    customer = read_customer(input_file, customer_name, warn=not silent)
    if not customer.bookings:
        raise NoBookingsError(f"No bookings found for customer '{customer_name}'")

    blocks = compress_bookings(customer.bookings)
    unit_price = price_per_unit(customer.bookings)

    warnings = []
    prices = distinct_prices(customer.bookings)
    if len(prices) > 1:
        warnings.append(
            "Bookings carry different prices ("
            + ", ".join(format_money(p) for p in prices)
            + f"); billing all slots at {format_money(unit_price)}"
        )

    totals = compute_totals(blocks, unit_price)

    if not silent:
        print(f"Found {len(customer.bookings)} bookings for {customer.last_name}")
        for block in blocks:
            print(
                f"  - {block.sheet_name} Halle {block.hall or '-'} Platz {block.court or '-'}: "
                f"{block.start}-{block.end} ({block.unit_count} x 30 min)"
            )
        for warning in warnings:
            print(f"WARNING: {warning}")
        print(f"Loading template: {template_path}")

    wb = render_invoice(template_path, customer, blocks, totals, invoice_date)

    return InvoiceResult(
        workbook=wb,
        customer=customer,
        blocks=blocks,
        totals=totals,
        filename=build_output_filename(customer.last_name),
        warnings=warnings,
    )


def generate_invoice_to_bytes(
    input_file: Path,
    customer_name: str,
    invoice_date: date | None = None,
    template_path: Path = TEMPLATE_PATH,
) -> tuple[bytes, InvoiceResult]:
    """
    Generate an invoice and return it as bytes (for API usage).

    Returns:
        Tuple of (excel_bytes, result)
    """
    result = _process_invoice(
        input_file, customer_name, template_path, get_invoice_date(invoice_date), silent=True
    )

    buffer = BytesIO()
    result.workbook.save(buffer)
    buffer.seek(0)

    return buffer.getvalue(), result


def generate_invoice(
    input_file: Path,
    customer_name: str,
    template_path: Path = TEMPLATE_PATH,
    invoice_date: date | None = None,
    output_dir: Path = OUTPUT_DIR,
) -> Path:
    """
    Main entry point for invoice generation (file output).

    Returns:
        Path to the generated invoice file
    """
    invoice_day = get_invoice_date(invoice_date)
    result = _process_invoice(input_file, customer_name, template_path, invoice_day)

    output_file = build_output_path(result.customer.last_name, invoice_day, output_dir)
    print(f"Writing output: {output_file}")
    save_workbook(result.workbook, output_file)

    print(
        f"\nComplete! {len(result.blocks)} line items, "
        f"{result.totals.total_units} slots, total {format_money(result.totals.gross)}"
    )
    return output_file
