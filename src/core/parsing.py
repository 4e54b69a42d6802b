"""
Cell value parsing: text, times and prices.

Every parser here is lenient. Text that cannot be understood yields None for
that field instead of failing the row.
"""

import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation

ISO_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T(\d{2}):(\d{2})(?::\d{2})?$")
CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
TIME_RANGE_RE = re.compile(r"(\d{1,2}:\d{2}(?::\d{2})?)\s*[-–—]\s*(\d{1,2}:\d{2}(?::\d{2})?)")
THOUSANDS_DOT_RE = re.compile(r"\.(?=\d{3}(?:\D|$))")

SALUTATION_FIXES = {"herrn": "Herr"}


def cell_text(value) -> str:
    """Render a spreadsheet cell value as text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
        return f"{seconds // 3600}:{seconds % 3600 // 60:02d}:{seconds % 60:02d}"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def trim_or_none(value: str | None) -> str | None:
    """Return stripped text, or None for blank text."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def join_non_blank(sep: str, *parts: str | None) -> str | None:
    """Join the non-blank parts, or return None if there are none."""
    kept = [p.strip() for p in parts if p and p.strip()]
    return sep.join(kept) if kept else None


def _format_clock(hours: str, minutes: str) -> str | None:
    h, m = int(hours), int(minutes)
    if h > 23 or m > 59:
        return None
    return f"{h:02d}:{m:02d}"


def normalize_time(value: str | None) -> str | None:
    """
    Normalize a time cell to 'HH:MM'.

    Accepts 'H:MM', 'HH:MM:SS' and 'YYYY-MM-DDTHH:MM[:SS]' (datetime cells),
    and retries once after stripping everything but digits and colons
    (e.g. '12:00 Uhr').

    Returns:
        'HH:MM' string, or None if the text is not a time of day
    """
    text = trim_or_none(value)
    if text is None:
        return None

    match = ISO_DATETIME_RE.match(text)
    if match:
        return _format_clock(*match.groups())

    match = CLOCK_RE.match(text)
    if match:
        return _format_clock(*match.groups())

    match = CLOCK_RE.match(re.sub(r"[^0-9:]", "", text))
    if match:
        return _format_clock(*match.groups())

    return None


def split_time_range(value: str | None) -> tuple[str | None, str | None]:
    """
    Split a combined range like '12:00 - 14:00' (hyphen, en or em dash).

    Returns:
        Tuple of normalized (from, to); (None, None) if no range is found
    """
    if not value:
        return None, None
    match = TIME_RANGE_RE.search(value)
    if not match:
        return None, None
    return normalize_time(match.group(1)), normalize_time(match.group(2))


def time_to_minutes(value: str | None) -> int | None:
    """Convert 'H:MM' / 'HH:MM' to minutes since midnight."""
    normalized = normalize_time(value)
    if normalized is None:
        return None
    hours, minutes = normalized.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int | None) -> str:
    """Format minutes since midnight as 'HH:MM' ('' for None)."""
    if minutes is None or minutes < 0:
        return ""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_price(value: str | None) -> Decimal | None:
    """
    Parse a German-formatted price: '290', '290,00', '1.234,50 €', '290 EUR'.

    Periods followed by exactly three digits are thousands separators; a
    decimal comma becomes a period.

    Returns:
        Decimal amount, or None if the text is not a number
    """
    text = trim_or_none(value)
    if text is None:
        return None

    cleaned = re.sub(r"\s+", "", text.replace("€", "").replace("EUR", ""))
    cleaned = THOUSANDS_DOT_RE.sub("", cleaned)
    cleaned = cleaned.replace(",", ".")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def price_from_cell(value) -> Decimal | None:
    """Price from a raw cell value; numeric cells bypass text parsing."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Decimal(str(value))
    return parse_price(cell_text(value))


def normalize_salutation(value: str | None) -> str | None:
    """Normalize a salutation ('Herrn' -> 'Herr')."""
    text = trim_or_none(value)
    if text is None:
        return None
    return SALUTATION_FIXES.get(text.lower(), text)
