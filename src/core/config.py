"""
Configuration constants and environment setup.
"""

import os
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = PROJECT_ROOT / "data" / "db" / "court-invoices.db"
OUTPUT_DIR = Path(os.environ.get("OUTPUT_DIR", str(PROJECT_ROOT / "output")))
TEMPLATES_DIR = PROJECT_ROOT / "data" / "templates"
TEMPLATE_PATH = Path(
    os.environ.get("INVOICE_TEMPLATE_PATH", str(TEMPLATES_DIR / "invoice-template.xlsx"))
)

# =============================================================================
# BOOKING PLAN
# =============================================================================

# Weekday sheets, in the order bookings are collected
WEEKDAY_SHEETS = ("Mo", "Di", "Mi", "Do", "Fr", "Sa", "So")

DEFAULT_BOOKING_PLAN_NAME = "THK_Belegungsplan_ReAus_Programm.xlsx"
USER_BOOKING_PLAN_PATH = (
    Path.home() / "Desktop" / "Rechnungen" / "Excel" / DEFAULT_BOOKING_PLAN_NAME
)
BOOKING_PLAN_PATH = os.environ.get("BOOKING_PLAN_PATH", "")

SUPPORTED_INPUT_SUFFIXES = {".xlsx", ".xlsm", ".numbers"}

# Header aliases per logical column (matched trimmed and case-insensitively)
COLUMN_ALIASES = MappingProxyType({
    "name": ("name",),
    "first_name": ("vorname",),
    "salutation": ("anrede",),
    "title": ("titel",),
    "address": ("adresse", "anschrift", "strasse", "straße", "addr"),
    "city": ("plz/ort", "plz ort", "plz", "ort", "wohnort"),
    "email": ("e-mail", "email", "mail"),
    "hall": ("halle",),
    "court": ("platz", "court"),
    "time": (
        "std-belegung", "std.-belegung", "std . belegung", "belegung",
        "zeit", "uhrzeit", "beginn", "start", "von",
    ),
    "time_from": ("von", "start", "beginn", "startzeit"),
    "time_to": ("bis", "ende", "end", "endzeit"),
    "price": ("preis", "tarif", "betrag", "kosten"),
})

# =============================================================================
# BILLING
# =============================================================================

SLOT_MINUTES = 30
VAT_RATE = Decimal("0.19")
INVOICE_FILE_PREFIX = os.environ.get("INVOICE_FILE_PREFIX", "Rechnung")
UNKNOWN_CUSTOMER_FILENAME = "Unbekannt"

# Token that marks the repeatable line-item row in the invoice template
LINE_ITEM_TOKEN = "{{spieltag}}"

# =============================================================================
# API CONFIGURATION
# =============================================================================

INVOICE_API_KEY = os.environ.get("INVOICE_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
MAX_UPLOAD_SIZE_MB = int(os.environ.get("MAX_UPLOAD_SIZE_MB", "20"))
MAX_UPLOAD_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024
API_VERSION = "1.0.0"
