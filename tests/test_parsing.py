"""Tests for cell, time and price parsing."""

from datetime import datetime, time, timedelta
from decimal import Decimal

import pytest

from core.parsing import (
    cell_text,
    join_non_blank,
    minutes_to_time,
    normalize_salutation,
    normalize_time,
    parse_price,
    price_from_cell,
    split_time_range,
    time_to_minutes,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12:00", "12:00"),
        ("9:05", "09:05"),
        ("9:05:30", "09:05"),
        (" 07:30 ", "07:30"),
        ("2025-01-01T07:30", "07:30"),
        ("1899-12-31T18:00:00", "18:00"),
        ("12:00 Uhr", "12:00"),
        ("25:00", None),
        ("12:75", None),
        ("abc", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_time(raw, expected):
    assert normalize_time(raw) == expected


@pytest.mark.parametrize("raw", ["00:00", "09:30", "12:00", "23:59", "7:15:00"])
def test_normalize_time_is_idempotent(raw):
    once = normalize_time(raw)
    assert normalize_time(once) == once


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12:00 - 14:00", ("12:00", "14:00")),
        ("12:00–14:00", ("12:00", "14:00")),
        ("9:00 — 10:30:00", ("09:00", "10:30")),
        ("Platz 2, 12:00-12:30", ("12:00", "12:30")),
        ("12:00", (None, None)),
        (None, (None, None)),
    ],
)
def test_split_time_range(raw, expected):
    assert split_time_range(raw) == expected


def test_minutes_round_trip_helpers():
    assert time_to_minutes("12:30") == 750
    assert time_to_minutes("nope") is None
    assert minutes_to_time(750) == "12:30"
    assert minutes_to_time(None) == ""


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1.234,50 €", Decimal("1234.50")),
        ("290", Decimal("290")),
        ("290,00", Decimal("290.00")),
        ("290 EUR", Decimal("290")),
        ("12.50", Decimal("12.50")),
        ("1.000.000", Decimal("1000000")),
        ("abc", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_price(raw, expected):
    assert parse_price(raw) == expected


def test_numeric_price_cells_skip_text_parsing():
    assert price_from_cell(14.5) == Decimal("14.5")
    assert price_from_cell(290) == Decimal("290")
    assert price_from_cell("14,50 €") == Decimal("14.50")
    assert price_from_cell(True) is None
    assert price_from_cell(None) is None


def test_cell_text():
    assert cell_text(None) == ""
    assert cell_text(290.0) == "290"
    assert cell_text(14.5) == "14.5"
    assert cell_text(time(13, 0)) == "13:00:00"
    assert cell_text(datetime(2025, 1, 6, 12, 30)) == "2025-01-06T12:30:00"
    assert cell_text(timedelta(hours=9, minutes=30)) == "9:30:00"
    assert cell_text(False) == "false"


def test_normalize_salutation():
    assert normalize_salutation("Herrn") == "Herr"
    assert normalize_salutation(" herrn ") == "Herr"
    assert normalize_salutation("Frau") == "Frau"
    assert normalize_salutation("  ") is None


def test_join_non_blank():
    assert join_non_blank(" ", "Hauptstr. 1", None, " 12345 Berlin ") == "Hauptstr. 1 12345 Berlin"
    assert join_non_blank(" ", None, "") is None
