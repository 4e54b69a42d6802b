"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import time
from pathlib import Path

import pytest
from openpyxl import Workbook

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from services.templates import create_invoice_template  # noqa: E402

MO_ROWS = [
    [],  # header search must skip leading empty rows
    ["Halle", "Platz", "Std-Belegung", "Tarif", "Anrede", "Titel", "Vorname", "Name", "Adresse", None, "E-Mail"],
    ["1", "2", "12:00", "14,50 €", "Herr", "Dr.", "Hans", "Müller", "Hauptstr. 1", "12345 Berlin", "hans@example.com"],
    ["1", "2", "12:30", 14.5, None, None, None, "Müller", None, None, None],
    ["1", "2", time(13, 0), 14.5, None, None, None, " Müller ", None, None, None],
    ["1", "3", "12:00", 14.5, "Frau", None, "Eva", "Schmidt", None, None, "eva@example.com"],
    ["1", "2", "15:00", 14.5, None, None, None, "Müller", None, None, None],
    ["1", "2", "16:00", 14.5, None, None, None, None, None, None, None],
]

DI_ROWS = [
    ["HALLE", " Platz ", "Zeit", "Preis", "Anrede", "Vorname", "Name", "Anschrift", "PLZ/Ort", "Email"],
    ["2", "1", "18:00–18:30", "abc", "Herrn", "Johann", "Müller", "Nebenweg 9", "99999 Köln", "other@example.com"],
    ["2", "1", "19:00", "20", "Herrn", "Karl", "Weber", None, None, None],
]

MI_ROWS = [
    ["Halle", "Platz", "Uhrzeit", "Betrag", "Name"],
    ["1", "1", "09:00", "14,50", "Müller"],
]

# Workbook sheet order deliberately differs from weekday order
BOOKING_PLAN_SHEETS = {"Mi": MI_ROWS, "Di": DI_ROWS, "Mo": MO_ROWS}


def write_booking_plan(path: Path, sheets: dict[str, list[list]]) -> Path:
    """Write a booking plan workbook with one sheet per entry (row 1 first)."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row_idx, row in enumerate(rows, start=1):
            for col_idx, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=row_idx, column=col_idx, value=value)
    wb.save(str(path))
    return path


@pytest.fixture
def booking_plan(tmp_path):
    """Booking plan with customers Müller, Schmidt and Weber across Mo, Di and Mi."""
    return write_booking_plan(tmp_path / "Belegungsplan.xlsx", BOOKING_PLAN_SHEETS)


@pytest.fixture
def invoice_template(tmp_path):
    """Default invoice template."""
    return create_invoice_template(tmp_path / "templates" / "invoice-template.xlsx")


@pytest.fixture
def make_booking_plan(tmp_path):
    """Factory writing a custom booking plan into tmp_path."""
    def _make(sheets: dict[str, list[list]], name: str = "plan.xlsx") -> Path:
        return write_booking_plan(tmp_path / name, sheets)
    return _make
