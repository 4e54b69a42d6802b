"""
Booking Plan Reader

Reads the weekly booking plan (one sheet per weekday, "Mo".."So") from an
Excel workbook or an Apple Numbers document, locates columns by header alias,
and extracts the contact data and bookings of a customer.
"""

import warnings
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from zipfile import BadZipFile

from numbers_parser import Document
from numbers_parser.exceptions import NumbersError
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from core.columns import find_address_continuation, resolve_columns
from core.config import SUPPORTED_INPUT_SUFFIXES, WEEKDAY_SHEETS
from core.errors import CustomerNotFoundWarning, MissingInputError
from core.parsing import (
    TIME_RANGE_RE,
    cell_text,
    join_non_blank,
    normalize_salutation,
    normalize_time,
    price_from_cell,
    split_time_range,
    trim_or_none,
)
from models.bookings import BookingRow, CustomerRecord, RowRef

# Contact fields captured once per customer, in CustomerRecord order
CONTACT_FIELDS = ("salutation", "title", "first_name", "email", "address")


# =============================================================================
# INPUT READING
# =============================================================================


def _read_excel_sheets(input_file: Path, sheet_names: Sequence[str]) -> dict[str, list[tuple]]:
    """Read the rows of the named sheets from an .xlsx workbook."""
    try:
        wb = load_workbook(str(input_file), data_only=True)
    except (OSError, BadZipFile, InvalidFileException, KeyError) as e:
        raise MissingInputError(f"Booking plan could not be read: {input_file} ({e})") from e

    try:
        sheets = {}
        for name in sheet_names:
            if name not in wb.sheetnames:
                continue
            ws = wb[name]
            sheets[name] = list(ws.iter_rows(min_row=1, values_only=True))
        return sheets
    finally:
        wb.close()


def _read_numbers_sheets(input_file: Path, sheet_names: Sequence[str]) -> dict[str, list[tuple]]:
    """Read the first table of each named sheet from a Numbers document."""
    try:
        doc = Document(str(input_file))
    except (OSError, NumbersError) as e:
        raise MissingInputError(f"Booking plan could not be read: {input_file} ({e})") from e

    available = {sheet.name: sheet for sheet in doc.sheets}
    sheets = {}
    for name in sheet_names:
        sheet = available.get(name)
        if sheet is None or not sheet.tables:
            continue
        sheets[name] = [tuple(row) for row in sheet.tables[0].rows(values_only=True)]
    return sheets


def read_sheet_rows(
    input_file: Path, sheet_names: Sequence[str] = WEEKDAY_SHEETS
) -> dict[str, list[tuple]]:
    """
    Read raw cell values of the weekday sheets.

    Args:
        input_file: Booking plan (.xlsx, .xlsm or .numbers)
        sheet_names: Sheets to read; missing sheets are skipped

    Returns:
        Dict mapping sheet name to its rows (row 1 first), in sheet_names order

    Raises:
        MissingInputError: File missing, unsupported or unreadable
    """
    input_file = Path(input_file)
    if not input_file.is_file():
        raise MissingInputError(f"Booking plan not found: {input_file}")

    suffix = input_file.suffix.lower()
    if suffix not in SUPPORTED_INPUT_SUFFIXES:
        raise MissingInputError(
            f"Unsupported booking plan format '{suffix}' "
            f"(expected one of: {', '.join(sorted(SUPPORTED_INPUT_SUFFIXES))})"
        )

    if suffix == ".numbers":
        return _read_numbers_sheets(input_file, sheet_names)
    return _read_excel_sheets(input_file, sheet_names)


def _is_blank_row(row: Sequence) -> bool:
    return all(not cell_text(value).strip() for value in row)


def find_header(rows: Sequence[Sequence]) -> tuple[int, Sequence] | None:
    """Return (index, cells) of the first non-empty row, or None."""
    for idx, row in enumerate(rows):
        if not _is_blank_row(row):
            return idx, row
    return None


def _cell(row: Sequence, col: int | None):
    if col is None or col >= len(row):
        return None
    return row[col]


def _text(row: Sequence, col: int | None) -> str | None:
    return trim_or_none(cell_text(_cell(row, col)))


def _iter_named_rows(rows: Sequence[Sequence]) -> Iterable[tuple[int, Sequence, str, dict, int | None]]:
    """
    Yield (row_number, row, name, columns, address_extra_col) for every data row with a name.

    Sheets without a header or without a name column yield nothing.
    """
    header_info = find_header(rows)
    if header_info is None:
        return
    header_idx, header = header_info

    columns = resolve_columns(header)
    if columns["name"] is None:
        return
    address_extra = find_address_continuation(header, columns)

    for idx in range(header_idx + 1, len(rows)):
        row = rows[idx]
        name = _text(row, columns["name"])
        if name is None:
            continue
        yield idx + 1, row, name, columns, address_extra


# =============================================================================
# ROW EXTRACTION
# =============================================================================


def extract_times(
    row: Sequence, columns: Mapping[str, int | None]
) -> tuple[str | None, str | None, str | None]:
    """
    Extract (time_from, time_to, time_raw) from a booking row.

    Separate from/to columns take precedence. Otherwise a combined cell is
    split when it holds a range, or normalized as a single time point.
    """
    time_from = normalize_time(_text(row, columns.get("time_from")))
    time_to = normalize_time(_text(row, columns.get("time_to")))
    combined = _text(row, columns.get("time"))

    if time_from is None and time_to is None and combined is not None:
        if TIME_RANGE_RE.search(combined):
            time_from, time_to = split_time_range(combined)
            return time_from, time_to, join_non_blank(" - ", time_from, time_to)
        return None, None, normalize_time(combined)

    return time_from, time_to, join_non_blank(" - ", time_from, time_to)


def extract_booking(
    row: Sequence, columns: Mapping[str, int | None], sheet_name: str, row_number: int
) -> BookingRow:
    """Build the BookingRow of one spreadsheet row."""
    time_from, time_to, time_raw = extract_times(row, columns)
    return BookingRow(
        sheet_name=sheet_name,
        row_number=row_number,
        hall=_text(row, columns.get("hall")),
        court=_text(row, columns.get("court")),
        time_from=time_from,
        time_to=time_to,
        time_raw=time_raw,
        price=price_from_cell(_cell(row, columns.get("price"))),
    )


def extract_contact(
    row: Sequence, columns: Mapping[str, int | None], address_extra: int | None
) -> dict[str, str | None]:
    """Extract the contact fields of one row (None where blank or absent)."""
    return {
        "salutation": normalize_salutation(_text(row, columns.get("salutation"))),
        "title": _text(row, columns.get("title")),
        "first_name": _text(row, columns.get("first_name")),
        "email": _text(row, columns.get("email")),
        "address": join_non_blank(
            " ", _text(row, columns.get("address")), _text(row, address_extra)
        ),
    }


# =============================================================================
# AGGREGATION
# =============================================================================


def collect_customer(
    sheets: Mapping[str, Sequence[Sequence]],
    customer: str,
    sheet_order: Sequence[str] = WEEKDAY_SHEETS,
    warn: bool = True,
) -> CustomerRecord:
    """
    Aggregate all rows of one customer from already-read sheets.

    Contact fields keep the first non-blank value found (sheets in weekday
    order, rows top to bottom). Bookings keep sheet-then-row order. With
    warn=False an unknown customer is reported only through the empty
    bookings, without a CustomerNotFoundWarning.
    """
    wanted = customer.strip().lower()
    contact: dict[str, str | None] = dict.fromkeys(CONTACT_FIELDS)
    last_name = None
    bookings = []

    for sheet_name in sheet_order:
        rows = sheets.get(sheet_name)
        if not rows:
            continue

        for row_number, row, name, columns, address_extra in _iter_named_rows(rows):
            if name.lower() != wanted:
                continue

            if last_name is None:
                last_name = name
            for field, value in extract_contact(row, columns, address_extra).items():
                if contact[field] is None and value is not None:
                    contact[field] = value

            bookings.append(extract_booking(row, columns, sheet_name, row_number))

    if not bookings and warn:
        warnings.warn(
            f"Customer '{customer}' not found in booking plan",
            CustomerNotFoundWarning,
            stacklevel=2,
        )

    return CustomerRecord(
        last_name=last_name or customer,
        bookings=tuple(bookings),
        **contact,
    )


def read_customer(input_file: Path, customer: str, warn: bool = True) -> CustomerRecord:
    """
    Read contact data and all bookings of one customer from the booking plan.

    Args:
        input_file: Booking plan file
        customer: Customer name as in the "Name" column (trimmed, case-insensitive)
        warn: Issue a CustomerNotFoundWarning for an unknown customer

    Returns:
        CustomerRecord; bookings is empty if the customer was not found

    Raises:
        MissingInputError: Booking plan missing or unreadable
    """
    sheets = read_sheet_rows(input_file)
    return collect_customer(sheets, customer, warn=warn)


def group_rows_by_customer(
    sheets: Mapping[str, Sequence[Sequence]],
    sheet_order: Sequence[str] = WEEKDAY_SHEETS,
) -> dict[str, list[RowRef]]:
    """Map every customer name to its occurrences, in first-seen order."""
    result: dict[str, list[RowRef]] = {}
    for sheet_name in sheet_order:
        rows = sheets.get(sheet_name)
        if not rows:
            continue
        for row_number, _, name, _, _ in _iter_named_rows(rows):
            result.setdefault(name, []).append(RowRef(sheet_name, row_number))
    return result


def list_customers(input_file: Path) -> dict[str, list[RowRef]]:
    """Read the booking plan and map each customer name to its occurrences."""
    return group_rows_by_customer(read_sheet_rows(input_file))


def sorted_customer_names(grouped: Mapping[str, list[RowRef]]) -> list[str]:
    """Customer names sorted case-insensitively, for pick lists."""
    return sorted(grouped, key=str.lower)
