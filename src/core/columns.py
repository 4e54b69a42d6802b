"""
Header column resolution.

Booking plans are maintained by hand, so column headers vary in spelling and
case ("E-Mail", "email", " Mail "). Columns are located by matching trimmed,
lower-cased header text against a table of aliases per logical field.
"""

from collections.abc import Iterable, Mapping, Sequence

from core.config import COLUMN_ALIASES


def normalize_header(value) -> str:
    """Normalize a header cell for alias comparison."""
    if value is None:
        return ""
    return str(value).strip().lower()


def find_column(header: Sequence, aliases: Iterable[str]) -> int | None:
    """
    Find the first header cell matching one of the aliases.

    Args:
        header: Header row cells, left to right
        aliases: Acceptable labels for one logical field

    Returns:
        0-based column index, or None if no header cell matches
    """
    targets = {alias.strip().lower() for alias in aliases}
    for idx, cell in enumerate(header):
        if normalize_header(cell) in targets:
            return idx
    return None


def resolve_columns(
    header: Sequence,
    alias_table: Mapping[str, tuple[str, ...]] = COLUMN_ALIASES,
) -> dict[str, int | None]:
    """Resolve every logical field of the alias table against a header row."""
    return {field: find_column(header, aliases) for field, aliases in alias_table.items()}


def find_address_continuation(header: Sequence, columns: Mapping[str, int | None]) -> int | None:
    """
    Locate the column holding the second address line (postcode and city).

    Uses the labeled city column when present. Otherwise an unlabeled column
    directly right of the address column is taken as its continuation.
    """
    if columns.get("city") is not None:
        return columns["city"]

    address_col = columns.get("address")
    if address_col is None:
        return None

    next_col = address_col + 1
    if next_col < len(header) and not normalize_header(header[next_col]):
        return next_col
    return None
